"""learnpath utilities."""

from .logsetup import configure_logging, LOG_FORMAT

__all__ = ["configure_logging", "LOG_FORMAT"]
