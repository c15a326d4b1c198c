"""Logger module for logging messages."""

from logging_utils import setup_service_logger

from .config import settings

SERVICE_NAME = "order-service"

logger = setup_service_logger(SERVICE_NAME, log_level=settings.log_level, log_file=settings.log_file)

__all__ = ["SERVICE_NAME", "logger"]
