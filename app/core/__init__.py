from .config import settings
from .rate_limit import limiter

__all__ = ["settings", "limiter"]
