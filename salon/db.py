# salon/db.py

import logging

from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from .data import DB_URL
from .errors import PersistenceError
from .models import Snapshot, utcnow

logger = logging.getLogger(__name__)


def make_engine(url: str = DB_URL):
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}  # required for SQLite + FastAPI threadpool
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty database
            return create_engine(url, echo=False, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(url, echo=False, connect_args=connect_args)
    return create_engine(url, echo=False)


class KeyValueStorage:
    """Durable key -> JSON array storage.

    `save`/`save_many` either write every given key or raise PersistenceError;
    callers apply their in-memory change only after a successful write.
    """

    def __init__(self, engine=None):
        self.engine = engine if engine is not None else make_engine()
        SQLModel.metadata.create_all(self.engine)

    def load(self, key: str) -> Optional[List[dict]]:
        with Session(self.engine) as session:
            row = session.get(Snapshot, key)
            if row is None:
                return None
            return list(row.payload)

    def save(self, key: str, collection: List[dict]) -> None:
        self.save_many({key: collection})

    def save_many(self, collections: Dict[str, List[dict]]) -> None:
        try:
            with Session(self.engine) as session:
                for key, collection in collections.items():
                    row = session.get(Snapshot, key)
                    if row is None:
                        row = Snapshot(key=key, payload=list(collection))
                    else:
                        row.payload = list(collection)
                        row.updated_at = utcnow()
                    session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception(f"Failed to persist {', '.join(collections)}")
            raise PersistenceError(collections.keys(), exc) from exc

    def close(self) -> None:
        self.engine.dispose()
