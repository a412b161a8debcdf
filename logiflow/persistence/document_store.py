"""Document store collaborator.

Records are JSON-compatible dicts grouped into named collections and keyed by
a generated identity string. Any storage failure surfaces as StoreUnavailable.
"""

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _new_document_id() -> str:
    return uuid.uuid4().hex


def _sorted(records: List[Record], order_by: Optional[str], descending: bool) -> List[Record]:
    if order_by is None:
        return list(reversed(records)) if descending else records
    # Records missing the field sort first ascending
    present = [r for r in records if r.get(order_by) is not None]
    missing = [r for r in records if r.get(order_by) is None]
    present.sort(key=lambda r: r[order_by], reverse=descending)
    return present + missing if descending else missing + present


class DocumentStore(ABC):
    """Document database interface."""

    @abstractmethod
    def create(self, collection: str, record: Record) -> str:
        """Store ``record`` in ``collection`` and return its generated id."""

    @abstractmethod
    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Record]:
        """Return every record in ``collection``, each with its ``id``."""

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Optional[Record]:
        """Return one record, or None if it does not exist."""


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store guarded by a lock."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.Lock()

    def create(self, collection: str, record: Record) -> str:
        try:
            stored = json.loads(json.dumps(record))
        except (TypeError, ValueError) as e:
            raise StoreUnavailable("Record is not JSON-serializable", {"collection": collection}) from e

        document_id = _new_document_id()
        with self._lock:
            self._collections.setdefault(collection, {})[document_id] = stored
        logger.debug(f"Created {collection}/{document_id}")
        return document_id

    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Record]:
        with self._lock:
            items = list(self._collections.get(collection, {}).items())
        records = [{"id": doc_id, **copy.deepcopy(record)} for doc_id, record in items]
        return _sorted(records, order_by, descending)

    def get(self, collection: str, document_id: str) -> Optional[Record]:
        with self._lock:
            record = self._collections.get(collection, {}).get(document_id)
        if record is None:
            return None
        return {"id": document_id, **copy.deepcopy(record)}


class JsonFileDocumentStore(DocumentStore):
    """
    Document store persisted as one ``<collection>.json`` file per collection.

    Each file holds a JSON object mapping document id to record, in creation
    order.

    Example Usage:
        store = JsonFileDocumentStore("data/")
        order_id = store.create("orders", {"customerId": "c-1"})
        orders = store.list("orders", order_by="createdAt", descending=True)
    """

    def __init__(self, base_dir: Path | str):
        """Initialize the store.

        Args:
            base_dir: Directory holding the collection files (created on first write)
        """
        self.base_dir = Path(base_dir)
        self._lock = threading.Lock()

    def _path(self, collection: str) -> Path:
        return self.base_dir / f"{collection}.json"

    def _load(self, collection: str) -> Dict[str, Record]:
        path = self._path(collection)
        if not path.exists():
            return {}
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StoreUnavailable("Failed to read collection", {"collection": collection}) from e
        if not isinstance(data, dict):
            raise StoreUnavailable("Collection file is not a JSON object", {"collection": collection})
        return data

    def create(self, collection: str, record: Record) -> str:
        document_id = _new_document_id()
        path = self._path(collection)
        with self._lock:
            documents = self._load(collection)
            documents[document_id] = record
            try:
                self.base_dir.mkdir(parents=True, exist_ok=True)
                payload = json.dumps(documents, indent=2)
                tmp_path = path.with_suffix(".json.tmp")
                with open(tmp_path, 'w') as f:
                    f.write(payload)
                tmp_path.replace(path)
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Failed to write {path}: {e}")
                raise StoreUnavailable("Failed to write collection", {"collection": collection}) from e
        logger.debug(f"Created {collection}/{document_id} in {path}")
        return document_id

    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Record]:
        with self._lock:
            documents = self._load(collection)
        records = [{"id": doc_id, **record} for doc_id, record in documents.items()]
        return _sorted(records, order_by, descending)

    def get(self, collection: str, document_id: str) -> Optional[Record]:
        with self._lock:
            record = self._load(collection).get(document_id)
        if record is None:
            return None
        return {"id": document_id, **record}
