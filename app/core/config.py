from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env at the project root: app/core/config.py -> app/core -> app -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"
    # Engine modules only (app.services, app.core.geo); unset follows log_level
    engine_log_level: str | None = None
    # Comma separated origin list; "*" allows everything
    cors_origins: str = "*"
    # Per-IP requests per minute on engine endpoints
    rate_limit_per_minute: int = 60
    # Coupon code lookup gets its own, tighter limit (code guessing)
    rate_limit_coupon_per_minute: int = 10
    currency: str = "INR"
    currency_symbol: str = "₹"
    # Used when a quote request does not carry its own percent
    student_discount_percent: float = 6.0
    # One-time deposit shown at checkout (whole currency units)
    subscription_deposit_amount: int = 1200

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("student_discount_percent", mode="before")
    @classmethod
    def clamp_student_percent(cls, v: float | str | None) -> float:
        try:
            value = float(v) if v is not None else 0.0
        except (TypeError, ValueError):
            return 0.0
        return min(100.0, max(0.0, value))

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str | None) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("engine_log_level", mode="before")
    @classmethod
    def upper_engine_level(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


settings = Settings()


def cors_origins_list() -> list[str]:
    """CORS_ORIGINS as a list; empty or "*" means everything."""
    raw = (settings.cors_origins or "").strip()
    if not raw or raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]
