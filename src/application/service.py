import asyncio
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Set
from ..domain.classifier import ALL_TARGETS, classify, unique_targets
from ..domain.errors import BoardError
from ..domain.models import DeleteResult, Listing, Notice
from ..domain.ports import (
    ExtractorPort,
    ListingFeedPort,
    ListingStorePort,
    MarkerStorePort,
    NotifierPort,
    PageRendererPort,
)
from ..domain.sweeper import CLEANUP_INTERVAL, format_marker, parse_marker, sweep

BoardView = Callable[["BoardService"], None]


def is_pdf(filename: str, data: bytes) -> bool:
    return filename.lower().endswith(".pdf") or data[:4] == b"%PDF"


class BoardService:
    def __init__(
        self,
        feed: ListingFeedPort,
        store: ListingStorePort,
        markers: MarkerStorePort,
        notifier: NotifierPort,
        extractor: ExtractorPort | None = None,
        renderer: PageRendererPort | None = None,
        app_id: str = "default-app-id",
        cleanup_interval: timedelta = CLEANUP_INTERVAL,
        clock: Callable[[], datetime] = datetime.now,
        view: BoardView | None = None,
    ) -> None:
        self.feed = feed
        self.store = store
        self.markers = markers
        self.notifier = notifier
        self.extractor = extractor
        self.renderer = renderer
        self.app_id = app_id
        self.cleanup_interval = cleanup_interval
        self.clock = clock
        self.view = view
        self.listings: List[Listing] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._closed = False
        self._cleanup_running = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def marker_key(self) -> str:
        return f"cleanupRan_{self.app_id}"

    # --- feed ---

    def start(self) -> None:
        self._closed = False
        self._unsubscribe = self.feed.subscribe(self.handle_snapshot, self.handle_feed_error)

    def close(self) -> None:
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_snapshot(self, listings: List[Listing]) -> None:
        if self._closed:
            return
        self.listings = list(listings)
        print(f"[board] Snapshot received with {len(self.listings)} listings.")
        if self.view is not None:
            self.view(self)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.run_cleanup())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def handle_feed_error(self, error: Exception) -> None:
        if self._closed:
            return
        print(f"[board] Feed error: {error}")
        self._notify_later(Notice(f"Failed to load listings: {error}", "error"))

    def _notify_later(self, notice: Notice) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.notifier.notify(notice))
            return
        task = loop.create_task(self.notifier.notify(notice))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # --- display ---

    def board(self, filter_target: str = ALL_TARGETS, search_term: str = "", now: datetime | None = None) -> Dict[str, List[Listing]]:
        return classify(self.listings, now or self.clock(), filter_target, search_term)

    def targets(self) -> List[str]:
        return unique_targets(self.listings)

    # --- cleanup ---

    async def run_cleanup(self, now: datetime | None = None) -> List[DeleteResult]:
        if self._cleanup_running:
            return []
        self._cleanup_running = True
        try:
            now = now or self.clock()
            last_run = parse_marker(self.markers.get(self.marker_key))
            plan = sweep(self.listings, now, last_run, self.cleanup_interval)
            if not plan.should_update_marker:
                return []

            results: List[DeleteResult] = []
            if plan.ids_to_delete:
                print(f"[cleanup] Deleting {len(plan.ids_to_delete)} expired listings…")
                outcomes = await asyncio.gather(
                    *(self.store.delete(listing_id) for listing_id in plan.ids_to_delete),
                    return_exceptions=True,
                )
                for listing_id, outcome in zip(plan.ids_to_delete, outcomes):
                    if isinstance(outcome, Exception):
                        print(f"[cleanup] Failed to delete {listing_id}: {outcome}")
                        results.append(DeleteResult(listing_id, ok=False, error=str(outcome)))
                    else:
                        results.append(DeleteResult(listing_id, ok=True))

            try:
                self.markers.set(self.marker_key, format_marker(now))
            except OSError as e:
                print(f"[cleanup] Could not record cleanup run: {e}")
            print("[cleanup] Expired listings cleanup complete.")
            return results
        finally:
            self._cleanup_running = False

    # --- user actions ---

    async def upload_pdf(self, filename: str, pdf_bytes: bytes) -> Listing | None:
        if not is_pdf(filename, pdf_bytes):
            await self.notifier.notify(Notice("Only PDF files can be uploaded.", "info"))
            return None
        if self.renderer is None or self.extractor is None:
            await self.notifier.notify(Notice("PDF processing is not available yet. Please try again later.", "info"))
            return None

        try:
            print(f"[board] Rendering first page of {filename}…")
            png = await asyncio.to_thread(self.renderer.render_first_page, pdf_bytes)
            print("[board] Extracting notice fields…")
            extracted = await self.extractor.extract(png)
            listing = await self.store.create(
                {
                    "summary": extracted.summary,
                    "applicationPeriod": extracted.application_period,
                    "trainingPeriod": extracted.training_period,
                    "target": extracted.target,
                }
            )
        except BoardError as e:
            print(f"[board] Upload of {filename} failed: {e}")
            await self.notifier.notify(Notice(f"Could not add the notice: {e}", "error"))
            return None

        print(f"[board] Created listing {listing.id} from {filename}.")
        await self.notifier.notify(Notice("Training notice added.", "info"))
        return listing

    async def delete_listing(self, listing_id: str) -> bool:
        try:
            await self.store.delete(listing_id)
        except BoardError as e:
            print(f"[board] Delete of {listing_id} failed: {e}")
            await self.notifier.notify(Notice(f"Delete failed: {e}", "error"))
            return False
        await self.notifier.notify(Notice("Listing deleted.", "info"))
        return True
