"""Event logging package."""

from pocketledger.audit.logger import EventLogger, configure_logging

__all__ = ["EventLogger", "configure_logging"]
