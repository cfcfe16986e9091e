import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from marketplace.core.config import settings

logger = logging.getLogger(__name__)

_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

# The engine is the entry point to the database. It's configured with the
# database URL and handles the connection pooling.
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)

# One session per HTTP request.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Set in Session.info while a unit of work is open.
UNIT_OF_WORK_KEY = "unit_of_work"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always closed, even if the endpoint raised.
        db.close()


def in_unit_of_work(db: Session) -> bool:
    return bool(db.info.get(UNIT_OF_WORK_KEY))


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a multi-row transition as a single transaction.

    Everything written inside the block is committed once at the end; any
    exception rolls the whole block back and is re-raised.
    """
    db.info[UNIT_OF_WORK_KEY] = True
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        logger.debug("Unit of work rolled back")
        raise
    finally:
        db.info.pop(UNIT_OF_WORK_KEY, None)
