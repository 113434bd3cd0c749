import pytest
from fastapi.testclient import TestClient

from order_tracker.main import app
from order_tracker.routes.orders import get_order_service
from order_tracker.service import OrderService


@pytest.fixture
def service() -> OrderService:
    return OrderService()


@pytest.fixture
def client(service):
    app.dependency_overrides[get_order_service] = lambda: service
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
