import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Finance Reports"
    seed_path: str = Field("data/seed.json")
    currency: str = "BRL"
    currency_symbol: str = "R$"
    log_level: str = "INFO"

    recent_limit: int = Field(5, ge=0)
    unpaid_limit: int = Field(5, ge=0)

    model_config = SettingsConfigDict(env_prefix="FINREPORT_", env_file=".env", case_sensitive=False)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_money(value, settings: Settings) -> str:
    return f"{settings.currency_symbol} {float(value):,.2f}"
