"""Durable key/value storage for client state (the browser's localStorage, here)."""
from __future__ import annotations

from typing import Optional, Protocol

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from models import Base, StoredValue


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class SQLStorage:
    def __init__(self, url: str = "sqlite:///storefront.db"):
        self.engine = create_engine(url)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)

    def get_item(self, key: str) -> Optional[str]:
        with self.Session() as db:
            row = db.get(StoredValue, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self.Session() as db:
            row = db.get(StoredValue, key)
            if row is None:
                db.add(StoredValue(key=key, value=str(value)))
            else:
                row.value = str(value)
            db.commit()

    def remove_item(self, key: str) -> None:
        with self.Session() as db:
            row = db.get(StoredValue, key)
            if row is not None:
                db.delete(row)
                db.commit()

    def clear(self) -> None:
        with self.Session() as db:
            db.query(StoredValue).delete()
            db.commit()
