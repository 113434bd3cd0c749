"""
Prometheus metrics: orders created/cancelled, status updates applied or rejected, orders in progress.
"""
from prometheus_client import Counter, Gauge, generate_latest

orders_created_total = Counter(
    "orders_created_total",
    "Total orders accepted by the service",
)
order_status_updates_total = Counter(
    "order_status_updates_total",
    "Total status transitions applied, by new status",
    ["status"],
)
order_transitions_rejected_total = Counter(
    "order_transitions_rejected_total",
    "Total status updates rejected because the order was final or the transition is not allowed",
    ["current_status", "attempted_status"],
)
orders_cancelled_total = Counter(
    "orders_cancelled_total",
    "Total orders cancelled through the cancel operation",
)

# Orders not yet Delivered or Cancelled
orders_in_progress = Gauge(
    "orders_in_progress",
    "Number of orders that are not in a final state",
)


def get_metrics_content_type():
    return "text/plain; charset=utf-8; version=0.0.4"


def get_metrics_bytes():
    return generate_latest()
