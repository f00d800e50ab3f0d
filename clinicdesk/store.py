# clinicdesk/store.py
"""Persisted key-value store of named collections.

Every service reads a whole collection, mutates it in memory and writes the
whole collection back. There is no locking around that cycle: the store
assumes a single writer, so two overlapping requests touching the same
collection can lose an update.
"""
import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from . import models

logger = logging.getLogger(__name__)

CollectionName = Union[models.Collection, str]


class StoreError(Exception):
    pass


def _key(name: CollectionName) -> str:
    return name.value if isinstance(name, models.Collection) else str(name)


class CollectionStore(ABC):
    """Persistence interface handed to every service at construction."""

    @abstractmethod
    def load(self, name: CollectionName) -> List[Dict[str, Any]]:
        """Return the current contents of a collection (empty list when unset)."""

    @abstractmethod
    def save(self, name: CollectionName, items: List[Dict[str, Any]]) -> None:
        """Replace the contents of a collection."""

    def is_empty(self, name: CollectionName) -> bool:
        return not self.load(name)


class InMemoryStore(CollectionStore):
    """Dictionary-backed store used by tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, List[Dict[str, Any]]] = None):
        self._data: Dict[str, List[Dict[str, Any]]] = {}
        for name, items in (initial or {}).items():
            self.save(name, items)

    def load(self, name: CollectionName) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._data.get(_key(name), []))

    def save(self, name: CollectionName, items: List[Dict[str, Any]]) -> None:
        # Round-trip through JSON so nothing unserialisable slips past tests
        self._data[_key(name)] = json.loads(json.dumps(items))


class SQLAlchemyStore(CollectionStore):
    """Stores each collection as one JSON document in the `collections` table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load(self, name: CollectionName) -> List[Dict[str, Any]]:
        db = self.session_factory()
        try:
            row = db.get(models.StoredCollection, _key(name))
            return list(row.payload) if row and row.payload else []
        except SQLAlchemyError as e:
            logger.error(f"Error loading collection '{_key(name)}': {e}")
            raise StoreError(f"Database error: {e}")
        finally:
            db.close()

    def save(self, name: CollectionName, items: List[Dict[str, Any]]) -> None:
        db = self.session_factory()
        try:
            row = db.get(models.StoredCollection, _key(name))
            if row is None:
                row = models.StoredCollection(name=_key(name), payload=items)
                db.add(row)
            else:
                row.payload = items
                flag_modified(row, "payload")
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving collection '{_key(name)}': {e}")
            raise StoreError(f"Database error: {e}")
        finally:
            db.close()
