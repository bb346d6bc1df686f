"""Configuration settings using Pydantic"""
import logging
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Supabase Configuration (optional: without it visits live in memory)
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_key: Optional[str] = Field(default=None, alias="SUPABASE_KEY")

    # Application Settings
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")

    # Static ticket-rule document (served as /data/ticket_rules.json by the web app)
    ticket_rules_path: str = Field(default="data/ticket_rules.json", alias="TICKET_RULES_PATH")

    # Planning Settings
    default_radius_km: float = Field(default=25.0, alias="DEFAULT_RADIUS_KM")
    all_day_budget_hours: float = Field(default=8.0, alias="ALL_DAY_BUDGET_HOURS")
    standard_visit_hours: float = Field(default=2.0, alias="STANDARD_VISIT_HOURS")
    full_content_visit_hours: float = Field(default=3.0, alias="FULL_CONTENT_VISIT_HOURS")
    default_flexible_days: int = Field(default=3, alias="DEFAULT_FLEXIBLE_DAYS")
    max_flexible_days: int = Field(default=10, alias="MAX_FLEXIBLE_DAYS")
    default_ticket_category: str = Field(default="adult", alias="DEFAULT_TICKET_CATEGORY")

    # How far ahead "next eligible" dates are searched
    next_eligible_lookahead_days: int = Field(default=400, alias="NEXT_ELIGIBLE_LOOKAHEAD_DAYS")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for the service

    Args:
        level: Log level name, defaults to settings.log_level
    """
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, mode='a'))

    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


# Global settings instance
settings = Settings()
