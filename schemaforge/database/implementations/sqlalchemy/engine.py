"""Database engine factory for SQLAlchemy connections."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from schemaforge.config import Settings
from schemaforge.log import get_logger
from schemaforge.types import Environment

logger = get_logger(__name__)


def setup_database_url(
    environment: Environment,
    database_url: str | None = None,
    sqlite_path: Path | None = None,
) -> str:
    """Construct database URL based on environment configuration.

    Args:
        environment: Environment type
        database_url: Explicit SQLAlchemy URL. Wins over everything else.
        sqlite_path: SQLite file used when no URL is given.

    Returns:
        Database connection URL
    """
    if database_url:
        return database_url

    if sqlite_path is not None:
        sqlite_path = Path(sqlite_path)
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{sqlite_path}"

    if environment == Environment.TESTING:
        return "sqlite:///:memory:"

    if environment == Environment.PRODUCTION:
        db_path = Path("db", "schemaforge.db")
    elif environment == Environment.DEVELOPMENT:
        db_path = Path("db", "schemaforge.dev.db")
    else:
        raise ValueError(f"Unknown environment: {environment}")

    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def create_database_engine(settings: Settings) -> Engine:
    """Create database engine based on environment configuration.

    Args:
        settings: Settings providing the URL or SQLite path

    Returns:
        Configured SQLAlchemy engine
    """
    database_url = setup_database_url(
        settings.environment, settings.database_url, settings.sqlite_path
    )
    url = make_url(database_url)
    logger.info(f"Creating database engine for: {url.render_as_string()}")

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.sqlite_timeout,
            },
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
    )
