# exam_portal/database/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from exam_portal.config import settings
from exam_portal.models.storage_models import Base


def build_engine(database_url: str) -> Engine:
    """Create an engine for the key-value storage table.

    In-memory SQLite needs a single shared connection, otherwise every
    session would see its own empty database.
    """
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return create_engine(database_url, **options)
    return create_engine(database_url)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None):
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
