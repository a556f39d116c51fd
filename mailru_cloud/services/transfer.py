"""
Transfer engine: block-wise streaming with progress reporting and cancellation.

Every upload and download goes through ``iter_blocks``: uploads hand it to
httpx as the request body (``ProgressableContent``), downloads drain it into
a sink (``copy_stream``).
"""

import inspect
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import BinaryIO, Protocol

import structlog

from mailru_cloud.core.cancellation import CancellationToken
from mailru_cloud.core.size import Size
from mailru_cloud.exceptions import TransferCancelledError

logger = structlog.get_logger(__name__)

DEFAULT_BLOCK_SIZE = 8192


@dataclass(frozen=True, kw_only=True)
class ProgressEvent:
    """
    One progress notification.

    Attributes:
        percentage: Integer percentage, floor of 100 * transferred / total.
        total: Declared length of the transfer (the real length on the final event).
        transferred: Bytes moved so far.
    """

    percentage: int
    total: Size
    transferred: Size


ProgressCallback = Callable[[ProgressEvent], Awaitable[None] | None]
Source = BinaryIO | AsyncIterable[bytes]


class Sink(Protocol):
    def write(self, data: bytes, /) -> object: ...


class ProgressTracker:
    """
    Throttles progress notifications.

    Emits a synthetic 0% event on start, then an event each time the integer
    percentage grows while the transferred count stays within the declared
    length, then a final 100% event whose total is the real byte count. The
    final event is skipped when 100% was already reported, so consecutive
    duplicates are never emitted.

    Untracked transfers (unknown length, or shorter than one block) only get
    the 0% and 100% events.
    """

    def __init__(
        self,
        declared_length: int | None,
        on_progress: ProgressCallback | None = None,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        self._declared_length = declared_length or 0
        self._on_progress = on_progress
        self._tracked = declared_length is not None and declared_length >= block_size
        self._last: ProgressEvent | None = None

    @property
    def last_event(self) -> ProgressEvent | None:
        return self._last

    async def start(self) -> None:
        await self._emit(0, self._declared_length, 0)

    async def advance(self, transferred: int) -> None:
        if not self._tracked or transferred > self._declared_length:
            return
        percentage = transferred * 100 // self._declared_length
        if self._last is not None and percentage <= self._last.percentage:
            return
        await self._emit(percentage, self._declared_length, transferred)

    async def finish(self, transferred: int) -> None:
        if self._last is not None and self._last.percentage == 100:
            return
        await self._emit(100, transferred, transferred)

    async def _emit(self, percentage: int, total: int, transferred: int) -> None:
        event = ProgressEvent(
            percentage=percentage, total=Size(total), transferred=Size(transferred)
        )
        self._last = event
        if self._on_progress is None:
            return
        result = self._on_progress(event)
        if inspect.isawaitable(result):
            await result


async def iter_blocks(
    source: Source,
    declared_length: int | None,
    *,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
    exact: bool = False,
) -> AsyncIterator[bytes]:
    """
    Yield the source block by block, reporting progress as blocks are consumed.

    The cancellation token is checked before every read. On cancellation the
    source is closed and TransferCancelledError is raised.

    Args:
        source: Binary file object or async iterator of bytes.
        declared_length: Expected length in bytes, None if unknown.
        on_progress: Callback receiving ProgressEvent, awaited if it returns
            an awaitable.
        cancel_token: Cancellation signal.
        block_size: Read size for file objects.
        exact: Stop after ``declared_length`` bytes, leaving the rest of the
            source unread. Used for request bodies sent with a Content-Length.

    Yields:
        Blocks of at most ``block_size`` bytes for file sources, the
        iterator's own chunks otherwise.

    Raises:
        TransferCancelledError: If the token was cancelled before a block read.
        ValueError: If ``exact`` is set and the source ends early.
    """
    token = cancel_token or CancellationToken()
    tracker = ProgressTracker(declared_length, on_progress, block_size=block_size)
    await tracker.start()

    limit = declared_length if exact else None
    transferred = 0
    async with aclosing(_read(source, block_size, limit)) as reader:
        try:
            while True:
                token.raise_if_cancelled(transferred)
                block = await anext(reader, None)
                if block is None:
                    break
                yield block
                transferred += len(block)
                await tracker.advance(transferred)
        except TransferCancelledError:
            await _close(source)
            logger.info("Transfer cancelled", transferred=transferred)
            raise

    await tracker.finish(transferred)
    logger.debug("Transfer complete", transferred=transferred, declared_length=declared_length)


async def copy_stream(
    source: Source,
    declared_length: int | None,
    sink: Sink,
    *,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> int:
    """
    Copy a source into a writable sink.

    Partial output is left on the sink when the copy is cancelled or fails.

    Returns:
        Number of bytes written.

    Raises:
        TransferCancelledError: If the token was cancelled before a block read.

    Example:
        ```python
        with open("out.bin", "wb") as f:
            await copy_stream(response.aiter_bytes(), length, f, on_progress=print)
        ```
    """
    written = 0
    blocks = iter_blocks(
        source,
        declared_length,
        on_progress=on_progress,
        cancel_token=cancel_token,
        block_size=block_size,
    )
    async with aclosing(blocks):
        async for block in blocks:
            sink.write(block)
            written += len(block)
    return written


class ProgressableContent:
    """
    Streaming request body for uploads.

    httpx pulls the blocks one at a time, so the payload is never buffered
    in memory. Exactly ``length`` bytes are sent; send it with a matching
    Content-Length header.
    """

    def __init__(
        self,
        source: BinaryIO,
        length: int,
        *,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        self._source = source
        self._length = length
        self._on_progress = on_progress
        self._cancel_token = cancel_token
        self._block_size = block_size

    @property
    def length(self) -> int:
        return self._length

    def __aiter__(self) -> AsyncIterator[bytes]:
        return iter_blocks(
            self._source,
            self._length,
            on_progress=self._on_progress,
            cancel_token=self._cancel_token,
            block_size=self._block_size,
            exact=True,
        )


async def _read(source: Source, block_size: int, limit: int | None = None) -> AsyncIterator[bytes]:
    remaining = limit
    if isinstance(source, AsyncIterable):
        async for chunk in source:
            if remaining is not None:
                chunk = chunk[:remaining]
                remaining -= len(chunk)
            if chunk:
                yield chunk
            if remaining == 0:
                break
    else:
        while remaining is None or remaining > 0:
            size = block_size if remaining is None else min(block_size, remaining)
            block = source.read(size)
            if not block:
                break
            if remaining is not None:
                remaining -= len(block)
            yield block

    if remaining:
        msg = f"Source ended {remaining} bytes before the declared length {limit}"
        raise ValueError(msg)


async def _close(source: Source) -> None:
    if isinstance(source, AsyncIterable):
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
        return
    source.close()
