from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_title: str = "Food Order Tracker"
    log_level: str = "INFO"
    currency_label: str = "Rs"  # prefix used in order summaries
    default_cancel_reason: str = "Customer request"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
