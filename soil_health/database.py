"""
Database engine and session management.

Sessions are handed to routers through the ``get_db`` dependency.
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from soil_health.config import DATABASE_URL

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None, seed: bool = False) -> None:
    """Create all tables and optionally load the sample data set."""
    from soil_health.models import database_models  # noqa: F401
    from soil_health.seed import seed_sample_data

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ensured")

    if seed:
        session = sessionmaker(bind=bind)()
        try:
            seed_sample_data(session)
        finally:
            session.close()
