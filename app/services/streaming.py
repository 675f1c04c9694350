# services/streaming.py
"""
Response Stream Adapter.

Turns whatever a chat engine returns for a streaming call into an async
iterator of UTF-8 bytes for `StreamingResponse`. Supported sources, checked in
order:
  - `async_response_gen()` / `async_response_gen` (async token generator)
  - `response_gen` (sync token generator)
  - any async iterable, then any sync iterable
  - a plain `str` / `bytes` answer (single chunk)

Items may be strings, bytes, dicts or event objects carrying `delta`,
`response` or `text`. Chunks are passed through in order; empty ones are skipped.
"""
import logging
from typing import Any, AsyncIterator, Iterable

from fastapi.concurrency import iterate_in_threadpool

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("delta", "response", "text", "content")


def chunk_text(item: Any) -> str:
    """Extract the text carried by one streamed item."""
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    if isinstance(item, bytes):
        return item.decode("utf-8", errors="replace")
    for name in _TEXT_FIELDS:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if isinstance(value, str):
            return value
    return ""


def _token_source(response: Any) -> Any:
    gen = getattr(response, "async_response_gen", None)
    if gen is not None:
        return gen() if callable(gen) else gen
    gen = getattr(response, "response_gen", None)
    if gen is not None:
        return gen() if callable(gen) else gen
    return response


async def _aiter(source: Any) -> AsyncIterator[Any]:
    if isinstance(source, (str, bytes, dict)):
        yield source
    elif hasattr(source, "__aiter__"):
        async for item in source:
            yield item
    elif isinstance(source, Iterable):
        async for item in iterate_in_threadpool(iter(source)):
            yield item
    else:
        yield source


async def iter_response_text(response: Any) -> AsyncIterator[str]:
    """
    Iterate the text chunks of a chat engine response, in emission order.

    The underlying generator is closed when iteration stops early (e.g. client disconnect).
    """
    source = _token_source(response)
    items = _aiter(source)
    try:
        async for item in items:
            text = chunk_text(item)
            if text:
                yield text
    finally:
        await items.aclose()
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
        elif hasattr(source, "close") and not isinstance(source, (str, bytes)):
            # A sync generator may still be inside next() on a worker thread.
            if not getattr(source, "gi_running", False):
                source.close()


async def stream_response(response: Any) -> AsyncIterator[bytes]:
    """
    Encode a chat engine response as a byte stream.

    A failure raised by the engine mid-stream is logged and re-raised so the
    server aborts the chunked body instead of ending it as if complete.
    """
    texts = iter_response_text(response)
    try:
        async for text in texts:
            yield text.encode("utf-8")
    except Exception:
        logger.exception("Chat engine stream failed")
        raise
    finally:
        await texts.aclose()


async def prefetch(stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    """
    Pull the first chunk of `stream` now and return an iterator replaying it.

    Errors raised before the first chunk surface to the caller, while a response
    status can still be chosen.
    """
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        return _replay(None, stream)
    return _replay(first, stream)


async def _replay(first: Any, stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    try:
        if first is not None:
            yield first
        async for chunk in stream:
            yield chunk
    finally:
        await stream.aclose()
