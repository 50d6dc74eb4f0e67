from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional
from .models import ExtractedNotice, Listing, Notice

SnapshotCallback = Callable[[List[Listing]], None]
ErrorCallback = Callable[[Exception], None]


class ListingFeedPort(ABC):
    @abstractmethod
    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Callable[[], None]:
        """Register for full snapshots; returns the unsubscribe function."""
        ...


class ListingStorePort(ABC):
    @abstractmethod
    async def create(self, fields: Dict[str, str]) -> Listing:
        ...

    @abstractmethod
    async def delete(self, listing_id: str) -> None:
        ...


class MarkerStorePort(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class ExtractorPort(ABC):
    @abstractmethod
    async def extract(self, png_bytes: bytes) -> ExtractedNotice:
        ...


class PageRendererPort(ABC):
    @abstractmethod
    def render_first_page(self, pdf_bytes: bytes) -> bytes:
        ...


class NotifierPort(ABC):
    @abstractmethod
    async def notify(self, notice: Notice) -> None:
        ...
