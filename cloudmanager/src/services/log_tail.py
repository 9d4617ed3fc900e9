"""
Live tailing of an environment log through byte-range polling.

The storage behind the tail URL rotates files at UTC midnight. Range polling
cannot see the rotation (the old file just stops growing and keeps answering
416), so close to midnight the tail URL is resolved again and the offset is
reset when the new file is smaller than what was already read.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import BinaryIO, Callable, Optional

from cloudmanager.src.config import Settings, get_settings
from cloudmanager.src.constants import Rel
from cloudmanager.src.models import Environment
from cloudmanager.src.services.environments import list_log_downloads
from cloudmanager.src.services.errors import LogNotFound, NoTailableLog, TailRequestFailed
from cloudmanager.src.services.transport import ApiClient

logger = logging.getLogger(__name__)

class TailState(str, Enum):
    RESOLVING = "resolving"
    STREAMING = "streaming"
    WAITING_FOR_MORE = "waiting_for_more"
    ROLLOVER_CHECK = "rollover_check"

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def is_near_utc_midnight(now: datetime, window: timedelta = timedelta(minutes=5)) -> bool:
    """True if `now` is within `window` of UTC midnight, before or after."""
    now = now.astimezone(timezone.utc)
    since_midnight = now - now.replace(hour=0, minute=0, second=0, microsecond=0)
    return since_midnight <= window or since_midnight >= timedelta(days=1) - window

class LogTailEngine:
    """
    Tails one service/name log of an environment into a byte sink.

    There is no successful end state: `run` returns only when `stop` is set
    and raises on a fatal status. Task cancellation is honoured at every
    request and sleep.
    """

    def __init__(
        self,
        client: ApiClient,
        environment: Environment,
        service: str,
        name: str,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        settings = settings or get_settings()
        self.client = client
        self.environment = environment
        self.service = service
        self.name = name
        self.backoff = settings.tail_backoff_seconds
        self.window = timedelta(minutes=settings.rollover_window_minutes)
        self.clock = clock

        self.state = TailState.RESOLVING
        self.url: Optional[str] = None
        self.offset = 0

    async def resolve_tail_url(self) -> str:
        downloads = await list_log_downloads(
            self.client, self.environment, self.service, self.name, days=1
        )
        if not downloads:
            raise NoTailableLog(
                f"No logs available in {self.environment.id} for program {self.environment.program_id}"
            )

        tail_links = downloads[0].link_array(Rel.LOGS_TAIL)
        if not tail_links:
            raise NoTailableLog(
                f"No logs for tailing available in {self.environment.id} "
                f"for program {self.environment.program_id}"
            )
        return tail_links[0].href

    async def content_length(self, url: str) -> int:
        res = await self.client.head_storage(url)
        if not res.is_success:
            raise TailRequestFailed(
                "Could not get initial size", str(res.url), res.status_code, res.reason_phrase
            )
        return int(res.headers.get("content-length", 0))

    async def _sleep(self, stop: Optional[asyncio.Event]):
        if stop is None:
            await asyncio.sleep(self.backoff)
            return
        try:
            await asyncio.wait_for(stop.wait(), timeout=self.backoff)
        except asyncio.TimeoutError:
            pass

    async def _resolve(self) -> TailState:
        self.url = await self.resolve_tail_url()
        self.offset = await self.content_length(self.url)
        logger.info(f"Tailing {self.service}/{self.name} from byte {self.offset}")
        return TailState.STREAMING

    async def _stream(self, sink: BinaryIO) -> TailState:
        headers = {"Range": f"bytes={self.offset}-"}
        async with self.client.stream_storage(self.url, headers=headers) as res:
            if res.status_code == 206:
                received = 0
                async for chunk in res.aiter_bytes():
                    sink.write(chunk)
                    received += len(chunk)
                length = res.headers.get("content-length")
                self.offset += int(length) if length is not None else received
                return TailState.STREAMING

            if res.status_code == 416:
                return TailState.WAITING_FOR_MORE

            if res.status_code == 404:
                raise LogNotFound("Logs not found!", str(res.url), res.status_code, res.reason_phrase)

            raise TailRequestFailed(
                "Cannot get tail logs", str(res.url), res.status_code, res.reason_phrase
            )

    async def _wait_for_more(self, stop: Optional[asyncio.Event]) -> TailState:
        await self._sleep(stop)
        if is_near_utc_midnight(self.clock(), self.window):
            return TailState.ROLLOVER_CHECK
        return TailState.STREAMING

    async def _check_rollover(self, stop: Optional[asyncio.Event]) -> TailState:
        self.url = await self.resolve_tail_url()
        size = await self.content_length(self.url)
        if size < self.offset:
            logger.info(f"Log rolled over, restarting {self.service}/{self.name} at byte {size}")
            self.offset = size
        else:
            # Same file; keep request volume down around midnight
            await self._sleep(stop)
        return TailState.STREAMING

    async def run(self, sink: BinaryIO, stop: Optional[asyncio.Event] = None):
        self.state = TailState.RESOLVING

        while True:
            if stop is not None and stop.is_set():
                logger.info(f"Stopped tailing {self.service}/{self.name} at byte {self.offset}")
                return

            if self.state is TailState.RESOLVING:
                self.state = await self._resolve()
            elif self.state is TailState.STREAMING:
                self.state = await self._stream(sink)
            elif self.state is TailState.WAITING_FOR_MORE:
                self.state = await self._wait_for_more(stop)
            elif self.state is TailState.ROLLOVER_CHECK:
                self.state = await self._check_rollover(stop)
