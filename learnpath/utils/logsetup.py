"""Logging setup shared by the Streamlit page and library modules."""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure root logging once.

    Streamlit re-executes the page script on every interaction, so repeated
    calls are ignored.
    """
    global _configured
    if not _configured:
        logging.basicConfig(
            level=getattr(logging, (level or "INFO").upper(), logging.INFO),
            format=LOG_FORMAT,
        )
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        _configured = True
    return logging.getLogger("learnpath")
