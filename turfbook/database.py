import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Explicitly constructed persistence client.

    Owns the SQLAlchemy engine and session factory. Callers create one per
    process, call ``connect()`` at startup and ``disconnect()`` at shutdown,
    and hand sessions to the services.
    """

    def __init__(self, url: Optional[str] = None, log_slow_queries: Optional[bool] = None):
        self.url = url or config.DATABASE_URL
        self.log_slow_queries = (
            config.DB_LOG_SLOW_QUERIES if log_slow_queries is None else log_slow_queries
        )
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> dict:
        if self.url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # Every session must see the same in-memory database
                options["poolclass"] = StaticPool
            return options

        return {
            "pool_pre_ping": True,  # Test connections before using
            "pool_recycle": config.DB_POOL_RECYCLE,
            "pool_size": config.DB_POOL_SIZE,
            "max_overflow": config.DB_MAX_OVERFLOW,
            "pool_timeout": config.DB_POOL_TIMEOUT,
        }

    def connect(self) -> "Database":
        if self.engine is not None:
            return self

        try:
            self.engine = create_engine(self.url, echo=False, **self._engine_options())
            logger.info("✅ Database engine created successfully")
        except Exception as e:
            logger.error(f"❌ Failed to create database engine: {e}")
            raise

        if self.log_slow_queries:
            self._install_slow_query_logging(self.engine)

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self

    @staticmethod
    def _install_slow_query_logging(engine: Engine) -> None:
        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > config.DB_SLOW_QUERY_THRESHOLD:
                logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

        logger.info(f"📊 Slow query logging enabled (threshold: {config.DB_SLOW_QUERY_THRESHOLD}s)")

    def create_all(self) -> None:
        from . import models  # noqa: F401  registers the tables on Base

        self._require_engine()
        Base.metadata.create_all(bind=self.engine, checkfirst=True)
        logger.info("Database tables created successfully")

    def session(self) -> Session:
        self._require_engine()
        return self._session_factory()

    def get_session(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on any error"""
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def disconnect(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    def _require_engine(self) -> None:
        if self.engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
