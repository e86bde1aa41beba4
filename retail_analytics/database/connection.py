"""
Database Connection Management

Synchronous SQLAlchemy 2.0 engine for reading the retailer's source tables.
Report runs are short batch jobs: the caller creates an engine, checks it
answers, loads the tables and disposes of it.
"""

from typing import Optional

import structlog
from sqlalchemy import Engine, create_engine, text

from retail_analytics.config import get_settings

logger = structlog.get_logger(__name__)


def create_engine_from_settings(url: Optional[str] = None) -> Engine:
    """
    Create an engine for the configured source database.

    Args:
        url: Override the URL built from settings
    """
    settings = get_settings()
    engine = create_engine(
        url or settings.database.sync_url,
        echo=settings.database.echo,
        pool_pre_ping=True,
    )
    logger.info("Database engine created", url=engine.url.render_as_string(hide_password=True))
    return engine


def check_connection(engine: Engine) -> bool:
    """
    Check that the database answers a trivial query.

    Returns:
        bool: True if healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False
