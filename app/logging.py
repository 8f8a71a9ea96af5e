"""
Logging configuration.
One stdout handler; uvicorn and service loggers share LOG_LEVEL, the pricing engine
modules can be raised to DEBUG on their own (ENGINE_LOG_LEVEL) to trace discount
selection and coupon rejections without access-log noise.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

SERVICE_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "tiffin", "app")
ENGINE_LOGGERS = ("app.services", "app.core.geo")


def setup_logging(level: int | str = logging.INFO, engine_level: int | str | None = None) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)
    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(level)
    # NOTSET: inherit from "app"
    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(engine_level or logging.NOTSET)
