import logging
import sys
import structlog
from pythonjsonlogger.json import JsonFormatter

from clinicdesk.config import Settings, get_settings


def setup_logging(settings: Settings = None):
    """Structured logging setup: console output in development, JSON in production"""
    settings = settings or get_settings()

    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
        formatter = JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()
        formatter = logging.Formatter('%(levelname)-8s %(name)s: %(message)s')

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Root logger: a single stdout handler
    logger = logging.getLogger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(settings.log_level)

    # SQL echo is noisy at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return structlog.get_logger()
