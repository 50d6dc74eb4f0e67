import asyncio
import os
import sys
from datetime import datetime, timedelta
from typing import List
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from src.adapters.extractor.gemini_extractor import GeminiExtractor
from src.adapters.extractor.openai_extractor import OpenAIExtractor
from src.adapters.notifier.console_notifier import ConsoleNotifier
from src.adapters.notifier.discord_notifier import DiscordNotifier
from src.adapters.renderer.pdfplumber_renderer import PdfPlumberRenderer
from src.adapters.state.json_marker_store import JsonMarkerStore
from src.adapters.store.json_listing_store import JsonListingStore
from src.application.service import BoardService
from src.domain.classifier import is_past
from src.infrastructure.config import settings


def render_board(service: BoardService) -> None:
    now = datetime.now()
    groups = service.board(now=now)
    if not groups:
        print("[board] No matching training notices.")
        return
    for target, listings in groups.items():
        print(f"\n== {target} ({len(listings)})")
        for l in listings:
            closed = "  [Application closed]" if is_past(l, now) else ""
            posted = l.created_at.astimezone().strftime("%Y-%m-%d") if l.created_at else "unknown"
            print(f"- {l.summary or 'No information'}{closed}")
            print(f"    application: {l.application_period or 'No information'} | training: {l.training_period or 'No information'} | posted: {posted}")


def build_extractor():
    try:
        extractor = GeminiExtractor() if settings.extractor == "gemini" else OpenAIExtractor()
        print(f"[main] {type(extractor).__name__} initialized.")
        return extractor
    except Exception as e:
        print(f"[main] Extractor not available: {e}")
        return None


def build_service() -> BoardService:
    store = JsonListingStore(settings.data_dir, settings.app_id)
    notifier = DiscordNotifier() if DiscordNotifier.configured() else ConsoleNotifier()
    return BoardService(
        feed=store,
        store=store,
        markers=JsonMarkerStore(settings.data_dir),
        notifier=notifier,
        extractor=build_extractor(),
        renderer=PdfPlumberRenderer(settings.render_scale),
        app_id=settings.app_id,
        cleanup_interval=timedelta(hours=settings.cleanup_interval_hours),
        view=render_board,
    )


async def upload_files(service: BoardService, paths: List[str]) -> None:
    for path in paths:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            print(f"[main] Cannot read {path}: {e}")
            continue
        await service.upload_pdf(os.path.basename(path), data)


async def main():
    service = build_service()
    service.start()
    await upload_files(service, sys.argv[1:])

    scheduler = AsyncIOScheduler()
    scheduler.add_job(service.run_cleanup, "interval", minutes=settings.check_interval_minutes, id="cleanup")
    scheduler.start()

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        scheduler.shutdown(wait=False)
        service.close()


if __name__ == "__main__":
    asyncio.run(main())
