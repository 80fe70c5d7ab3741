from collections.abc import Callable, Generator

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from preventa.config import get_settings

settings = get_settings()

# Convert postgresql:// to postgresql+psycopg2:// if needed
database_url = settings.database_url
if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+psycopg2://", 1)

if database_url.startswith("sqlite"):
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SessionFactory = Callable[[], Session]


def get_session_factory() -> SessionFactory:
    """Dependency for services that open their own sessions off the event loop."""
    return SessionLocal


def get_db(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Run database migrations to ensure schema is up to date."""
    import os

    from alembic import command
    from alembic.config import Config

    backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    alembic_ini = os.path.join(backend_dir, "alembic.ini")

    if os.path.exists(alembic_ini):
        alembic_cfg = Config(alembic_ini)
        alembic_cfg.set_main_option("script_location", os.path.join(backend_dir, "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
        command.upgrade(alembic_cfg, "head")
    else:
        # Fallback to create_all for development without alembic.ini
        from preventa.models import Base

        Base.metadata.create_all(bind=engine)
