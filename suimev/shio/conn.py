"""The websocket connection to the Shio feed and the collector reading from it."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from suimev.shio.types import ShioItem, parse_shio_item

log = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
RETRY_DELAY = 5.0

_background: set[asyncio.Task] = set()


class ShioConnection:
    """Relays bids to the feed and feed messages to a queue of items."""

    def __init__(self, wss_url: str, num_retries: int = DEFAULT_RETRIES, retry_delay: float = RETRY_DELAY) -> None:
        self.wss_url = wss_url
        self.num_retries = num_retries
        self.retry_delay = retry_delay
        self.bids: asyncio.Queue[Any] = asyncio.Queue()
        self.items: asyncio.Queue[ShioItem] = asyncio.Queue()

    def handle_text(self, text: str) -> ShioItem | None:
        """Queue the item carried by a text message; bad JSON is logged and dropped."""
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            log.error("error parsing json: %s", exc)
            return None
        item = parse_shio_item(value)
        self.items.put_nowait(item)
        return item

    async def run(self) -> None:
        """Keep the feed connected; raises ConnectionError once the retries are used up."""
        retry_count = 0
        while True:
            try:
                ws = await websockets.connect(self.wss_url)
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                log.error("fail to connect to ws server: %s", exc)
                if retry_count == self.num_retries:
                    raise ConnectionError(
                        f"fail to connect to ws server after {self.num_retries} retries"
                    ) from exc
                await asyncio.sleep(self.retry_delay)
                retry_count += 1
                continue

            retry_count = 0
            try:
                await self._serve(ws)
            finally:
                await ws.close()

    async def _serve(self, ws: Any) -> None:
        bid_task: asyncio.Future | None = None
        recv_task: asyncio.Future | None = None
        try:
            while True:
                if bid_task is None:
                    bid_task = asyncio.ensure_future(self.bids.get())
                if recv_task is None:
                    recv_task = asyncio.ensure_future(ws.recv())
                done, _ = await asyncio.wait({bid_task, recv_task}, return_when=asyncio.FIRST_COMPLETED)

                if bid_task in done:
                    bid = bid_task.result()
                    bid_task = None
                    try:
                        await ws.send(json.dumps(bid, separators=(",", ":")))
                    except ConnectionClosed as exc:
                        log.error("fail to send message to ws server: %s", exc)
                        return

                if recv_task in done:
                    finished, recv_task = recv_task, None
                    try:
                        message = finished.result()
                    except ConnectionClosedOK as exc:
                        raise RuntimeError(f"unexpected websocket message: close {exc}") from exc
                    except ConnectionClosed as exc:
                        log.error("error receiving websocket message: %s", exc)
                        return
                    if isinstance(message, (bytes, bytearray)):
                        raise RuntimeError(f"unexpected websocket message: binary {bytes(message)!r}")
                    self.handle_text(message)
        finally:
            for task in (bid_task, recv_task):
                if task is not None and not task.done():
                    task.cancel()


def _forget(task: asyncio.Task) -> None:
    _background.discard(task)
    if not task.cancelled() and task.exception() is not None:
        log.error("shio connection stopped: %s", task.exception())


async def new_shio_conn(
    wss_url: str, num_retries: int = DEFAULT_RETRIES
) -> tuple[asyncio.Queue[Any], asyncio.Queue[ShioItem]]:
    """Start a feed connection in the background; return its bid and item queues."""
    connection = ShioConnection(wss_url, num_retries)
    task = asyncio.get_running_loop().create_task(connection.run(), name="shio-conn")
    _background.add(task)
    task.add_done_callback(_forget)
    return connection.bids, connection.items


class ShioCollector:
    """Streams the items received from the feed."""

    def __init__(self, receiver: asyncio.Queue[ShioItem]) -> None:
        self.receiver = receiver

    @classmethod
    async def new_without_executor(cls, wss_url: str, num_retries: int | None = None) -> "ShioCollector":
        log.warning("only reading from shio feed, not sending any bids")
        _, receiver = await new_shio_conn(wss_url, DEFAULT_RETRIES if num_retries is None else num_retries)
        return cls(receiver)

    def name(self) -> str:
        return "ShioCollector"

    async def get_event_stream(self) -> AsyncIterator[ShioItem]:
        while True:
            yield await self.receiver.get()