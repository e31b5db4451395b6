# medistore/data/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from medistore.utils.settings import DATABASE_URL, DB_ECHO, DB_STATEMENT_TIMEOUT_MS

Base = declarative_base()


def build_engine(url: str = DATABASE_URL) -> Engine:
    if url.startswith("sqlite"):
        #tests / local dev, sqlite ignores FOR UPDATE, conditional updates still hold
        return create_engine(url, echo=DB_ECHO, connect_args={"check_same_thread": False})

    #every statement gets a server-side timeout, a stuck lock wait aborts the transaction
    return create_engine(
        url,
        echo=DB_ECHO,
        pool_pre_ping=True,
        connect_args={"options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"},
    )


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Unit of work: commit when the block exits normally, rollback on any
    exception (which is re-raised). Repos only flush, never commit.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
