import json
import os
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from ...domain.errors import StoreError
from ...domain.models import Listing
from ...domain.ports import ErrorCallback, ListingFeedPort, ListingStorePort, SnapshotCallback

COLLECTION = "training_posts"


def collection_path(data_dir: str, app_id: str) -> str:
    return os.path.abspath(os.path.join(data_dir, "artifacts", app_id, "public", "data", f"{COLLECTION}.json"))


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


def _timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    created = datetime.fromisoformat(str(value))
    # stored timestamps are UTC; older files may lack the offset
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


def _to_listing(doc: Dict) -> Listing:
    return Listing(
        id=str(doc["id"]),
        summary=_text(doc.get("summary")),
        application_period=_text(doc.get("applicationPeriod")),
        training_period=_text(doc.get("trainingPeriod")),
        target=_text(doc.get("target")),
        created_at=_timestamp(doc.get("createdAt")),
    )


class JsonListingStore(ListingStorePort, ListingFeedPort):
    """Listing collection kept in one JSON file, with in-process change listeners."""

    def __init__(self, data_dir: str, app_id: str) -> None:
        self.path = collection_path(data_dir, app_id)
        self._subscribers: List[Tuple[SnapshotCallback, ErrorCallback]] = []

    def _load_docs(self) -> List[Dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e

    def _save_docs(self, docs: List[Dict]) -> None:
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            tmp = self.path + ".tmp"
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(docs, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"cannot write {self.path}: {e}") from e

    def load(self) -> List[Listing]:
        docs = self._load_docs()
        try:
            listings = [_to_listing(d) for d in docs]
            return sorted(listings, key=lambda l: l.created_at or datetime.min.replace(tzinfo=timezone.utc))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StoreError(f"malformed document in {self.path}: {e}") from e

    def _emit(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> None:
        try:
            snapshot = self.load()
        except StoreError as e:
            on_error(e)
            return
        on_snapshot(snapshot)

    def _publish(self) -> None:
        for on_snapshot, on_error in list(self._subscribers):
            self._emit(on_snapshot, on_error)

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Callable[[], None]:
        entry = (on_snapshot, on_error)
        self._subscribers.append(entry)
        print(f"[store] Subscribed to {self.path} ({len(self._subscribers)} listeners).")
        self._emit(on_snapshot, on_error)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)
                print(f"[store] Unsubscribed from {self.path}.")

        return unsubscribe

    async def create(self, fields: Dict[str, str]) -> Listing:
        docs = self._load_docs()
        doc = {
            **fields,
            "id": uuid.uuid4().hex,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        docs.append(doc)
        self._save_docs(docs)
        print(f"[store] Created {doc['id']}.")
        self._publish()
        return _to_listing(doc)

    async def delete(self, listing_id: str) -> None:
        docs = self._load_docs()
        remaining = [d for d in docs if d.get("id") != listing_id]
        if len(remaining) == len(docs):
            print(f"[store] {listing_id} already gone.")
            return
        self._save_docs(remaining)
        print(f"[store] Deleted {listing_id}.")
        self._publish()

