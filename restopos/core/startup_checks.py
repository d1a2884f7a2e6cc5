from __future__ import annotations

import logging

from restopos.core import config

logger = logging.getLogger(__name__)


def validate_runtime_environment() -> None:
    """Refuse to start a production app with development credentials."""
    if not config.IS_PROD:
        return
    if not config.JWT_SECRET_KEY or config.JWT_SECRET_KEY == config.DEV_JWT_SECRET_KEY:
        logger.critical("JWT_SECRET_KEY is not set in production")
        raise RuntimeError("JWT_SECRET_KEY must be set in production environment")
    if config.SEED_DEMO_DATA:
        logger.critical("SEED_DEMO_DATA is enabled in production")
        raise RuntimeError("Demo data seeding is forbidden in production environment")
