"""Observability infrastructure for cf-branch-wrangler.

Quick start::

    from branch_wrangler.observability import configure_logging, get_logger

    configure_logging(level="INFO")
    logger = get_logger(__name__)
    logger.info("provisioning_started", branch="feature/x")
"""

from .logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
