import asyncio
import os
from typing import Optional
import discord
from dotenv import load_dotenv
from ...domain.models import Notice
from ...domain.ports import NotifierPort

# Ensure .env is loaded even if infrastructure.config isn't imported yet
load_dotenv()

MESSAGE_LIMIT = 1900


def split_into_chunks(text: str, limit: int = MESSAGE_LIMIT) -> list[str]:
    chunks: list[str] = []
    remaining = text
    while remaining:
        if len(remaining) <= limit:
            chunks.append(remaining)
            break
        # try to split at a newline before the limit
        cut = remaining.rfind("\n", 0, limit)
        if cut == -1 or cut < limit * 0.6:  # if no good break, hard cut
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    return chunks


def format_notice(notice: Notice) -> str:
    title = "Error" if notice.is_error else "Notice"
    return f"**{title}**\n{notice.message}"


class DiscordNotifier(NotifierPort):
    """Posts board notices to a staff channel; connects per notice and closes afterwards."""

    def __init__(self) -> None:
        intents = discord.Intents.none()
        intents.guilds = True
        self.client = discord.Client(intents=intents)
        self._ready = asyncio.Event()
        self._token: Optional[str] = os.getenv("DISCORD_TOKEN")
        self._guild_id = self._int_env("DISCORD_GUILD_ID")
        self._channel_id = self._int_env("DISCORD_CHANNEL_ID")
        self._client_task: Optional[asyncio.Task] = None

        @self.client.event
        async def on_ready():
            print(f"[discord] Logged in as {self.client.user}")
            self._ready.set()

    @staticmethod
    def _int_env(name: str) -> int:
        try:
            return int(os.getenv(name, "0"))
        except ValueError:
            return 0

    @classmethod
    def configured(cls) -> bool:
        return bool(os.getenv("DISCORD_TOKEN")) and bool(cls._int_env("DISCORD_GUILD_ID")) and bool(cls._int_env("DISCORD_CHANNEL_ID"))

    async def _ensure_started(self) -> None:
        if not self._token or not self._guild_id or not self._channel_id:
            raise RuntimeError("DISCORD_TOKEN, DISCORD_GUILD_ID, DISCORD_CHANNEL_ID must be set")
        if self._client_task is None or self._client_task.done():
            print("[discord] Starting client in background…")
            if self.client.is_closed():
                self.client.clear()
            self._ready.clear()
            self._client_task = asyncio.create_task(self.client.start(self._token))
        await self._ready.wait()

    async def _send(self, content: str) -> None:
        guild = self.client.get_guild(self._guild_id)
        if guild is None:
            print(f"[discord] get_guild({self._guild_id}) returned None; trying fetch_guild…")
            guild = await self.client.fetch_guild(self._guild_id)
        channel = guild.get_channel(self._channel_id) if guild else None
        if channel is None:
            print(f"[discord] channel not found in cache; trying fetch_channel({self._channel_id})…")
            channel = await self.client.fetch_channel(self._channel_id)
        chunks = split_into_chunks(content)
        total = len(chunks)
        for idx, chunk in enumerate(chunks, 1):
            prefix = "" if total == 1 else f"(part {idx}/{total})\n"
            await channel.send(prefix + chunk)
        print(f"[discord] Sent {total} message(s) to {self._channel_id}.")

    async def notify(self, notice: Notice) -> None:
        try:
            await self._ensure_started()
            await self._send(format_notice(notice))
        except Exception as e:
            # notices are best effort
            print(f"[discord] Error sending notice: {e}")
        finally:
            try:
                await self.client.close()
            except Exception as e:
                print(f"[discord] Error closing client: {e}")
            await asyncio.sleep(0)
            if self._client_task and not self._client_task.done():
                self._client_task.cancel()
            self._client_task = None
