import logging

from src.core.logging import configure_logging


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    previous_level = root.level
    try:
        configure_logging("debug")
        handlers = list(root.handlers)
        configure_logging("warning")

        assert root.handlers == handlers
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous_level)
