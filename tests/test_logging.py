"""Logger levels set at startup."""
import logging

from app.core.config import Settings
from app.logging import setup_logging


def test_engine_level_is_separate_from_service_level():
    try:
        setup_logging("WARNING", engine_level="DEBUG")
        assert logging.getLogger("app").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        assert logging.getLogger("app.services").level == logging.DEBUG
        assert logging.getLogger("app.services.discount").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("app.main").isEnabledFor(logging.INFO)
    finally:
        setup_logging("WARNING")


def test_engine_loggers_follow_app_level_when_unset():
    setup_logging("WARNING")
    assert logging.getLogger("app.services").level == logging.NOTSET
    assert logging.getLogger("app.services.coupon").getEffectiveLevel() == logging.WARNING


def test_engine_log_level_setting_is_normalised():
    assert Settings(engine_log_level=" debug ").engine_log_level == "DEBUG"
    assert Settings(engine_log_level="").engine_log_level is None
    assert Settings(log_level=None).log_level == "INFO"
