from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from patient_fhir.config import settings

_engine_options = (
    {} if settings.DATABASE_URL.startswith("sqlite") else {"pool_pre_ping": True, "pool_size": 5}
)
engine = create_engine(settings.DATABASE_URL, **_engine_options)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def get_db():
    """FastAPI dependency that yields a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
