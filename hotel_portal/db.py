from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

class Base(DeclarativeBase):
    pass


def use_immediate_transactions(engine: Engine) -> None:
    """
    Start every SQLite transaction with BEGIN IMMEDIATE.
    Writers hold the database lock from the booking conflict check until commit.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)
if settings.DATABASE_URL.startswith("sqlite"):
    use_immediate_transactions(engine)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_schema():
    """Create missing tables. Development convenience; Alembic owns real migrations."""
    from . import models  # noqa: F401  registers mappers

    Base.metadata.create_all(bind=engine)
