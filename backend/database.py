"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect
from sqlmodel import SQLModel, create_engine, Session

from backend.config import settings

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False; PostgreSQL does not
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def _run_migrations(bind=None):
    """Run lightweight schema migrations for columns added after first deploy."""
    from sqlalchemy import text

    bind = bind or engine
    inspector = inspect(bind)

    if "user" not in inspector.get_table_names():
        return

    columns = {col["name"] for col in inspector.get_columns("user")}
    if "is_admin" not in columns:
        logger.info("Migrating: adding user.is_admin")
        with bind.connect() as conn:
            conn.execute(
                text('ALTER TABLE "user" ADD COLUMN is_admin BOOLEAN NOT NULL DEFAULT FALSE')
            )
            conn.commit()


def create_db_and_tables(bind=None):
    """Create all tables. Called on startup."""
    import backend.models  # noqa: F401  (populate metadata)

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    _run_migrations(bind)


def get_session() -> Session:
    """Dependency that yields a database session."""
    with Session(engine) as session:
        yield session
