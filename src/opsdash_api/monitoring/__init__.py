"""Monitoring package for logging."""

from opsdash_api.monitoring.logger import configure_logger
from opsdash_api.monitoring.logger import log_response_info

__all__ = [
    "configure_logger",
    "log_response_info",
]
