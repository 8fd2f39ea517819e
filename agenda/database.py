from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from agenda.core import config


Base = declarative_base()


def enable_sqlite_write_locking(engine: Engine) -> Engine:
    """Start every SQLite transaction with BEGIN IMMEDIATE.

    pysqlite defers locking until the first write, which lets two bookings
    read the same free slot. Taking the write lock at BEGIN serializes them.
    """

    @event.listens_for(engine, 'connect')
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def _begin_immediate(connection) -> None:
        connection.exec_driver_sql('BEGIN IMMEDIATE')

    return engine


def build_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith('sqlite'):
        engine = create_engine(url, echo=echo, connect_args={'check_same_thread': False})
        return enable_sqlite_write_locking(engine)
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
