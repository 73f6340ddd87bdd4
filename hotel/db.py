import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlmodel import Session, SQLModel, create_engine

from . import models  # noqa: F401  (registers tables on SQLModel.metadata)

load_dotenv()

log = logging.getLogger(__name__)

DEFAULT_URL = "sqlite:///./hotel.db"


def _enable_sqlite_fks(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


class Database:
    """Owns the engine; one instance per process, handed to the request handlers."""

    def __init__(self, url: Optional[str] = None, foreign_keys: Optional[bool] = None):
        self.url = url or os.getenv("DATABASE_URL") or DEFAULT_URL
        if foreign_keys is None:
            foreign_keys = os.getenv("SQLITE_FOREIGN_KEYS", "on") == "on"

        kwargs = {"pool_pre_ping": True}
        if self.url.startswith("sqlite"):
            # handlers run on the threadpool
            kwargs["connect_args"] = {"check_same_thread": False}
        self.engine: Engine = create_engine(self.url, **kwargs)

        if self.url.startswith("sqlite") and foreign_keys:
            event.listen(self.engine, "connect", _enable_sqlite_fks)

    def init_db(self) -> None:
        SQLModel.metadata.create_all(self.engine)
        log.info("[db] tables ready on %s", self.engine.url.render_as_string())

    def reset(self) -> None:
        """Drop every table and create them again."""
        SQLModel.metadata.drop_all(self.engine)
        SQLModel.metadata.create_all(self.engine)
        log.warning("[db] all tables dropped and recreated")

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def session(self) -> Iterator[Session]:
        s = Session(self.engine)
        try:
            yield s
        finally:
            s.close()

    def dispose(self) -> None:
        self.engine.dispose()
