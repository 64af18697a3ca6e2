"""Application configuration using Pydantic Settings"""

import logging
from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App
    app_name: str = "Return Requests API"
    debug: bool = False
    frontend_url: str = "http://localhost:3000"

    # Database
    mongodb_url: str
    mongodb_db_name: str = "return_requests"

    # Security
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    # Email
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = "returns@example.com"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()


DEFAULT_RETURN_REQUEST_REASONS = [
    "Arrived Too Late",
    "Bought 2 Kept 1",
    "Changed Mind",
    "Defective Item",
    "Didn't Fit",
    "Disliked",
    "Not as Pictured",
    "Wrong Item",
    "Other",
]


class ReturnRequestsConfig(BaseModel):
    """
    Operational settings for return requests.

    Editable at runtime through the admin API. Readers may observe a value
    that is replaced a moment later; that is accepted.
    """
    return_request_intro_text: str = "This text is customizable via the configuration page."
    return_request_max_order_age_in_days: int = Field(default=90, ge=0)
    return_request_max_authorized_age_in_days: int = Field(default=30, ge=0)
    return_request_past_return_window_text: str = "This order is beyond the allowed return window."
    return_request_reasons: List[str] = Field(default_factory=lambda: list(DEFAULT_RETURN_REQUEST_REASONS))
    return_request_success_text: str = (
        "Thank you for submitting your return request. We will get back to you soon."
    )


_return_requests_config = ReturnRequestsConfig()


def get_return_requests_config() -> ReturnRequestsConfig:
    """Return the process-wide return request configuration"""
    return _return_requests_config


def set_return_requests_config(config: ReturnRequestsConfig) -> ReturnRequestsConfig:
    """Replace the process-wide return request configuration"""
    global _return_requests_config
    _return_requests_config = config
    logger.info("Return request configuration updated")
    return config
