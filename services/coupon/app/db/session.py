from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from services.coupon.app.db.connection import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # repositories run queries from worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(settings.COUPON_DATABASE_URL, **_engine_options(settings.COUPON_DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope():
    """Session for one repository call; uncommitted work is rolled back on error."""
    session: Session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
