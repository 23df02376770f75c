"""StreamReassembler: rebuilds assistant text from an SSE byte stream.

The LLM gateway streams newline-delimited frames::

    data: {"choices":[{"delta":{"content":"Hel"}}]}

    data: {"choices":[{"delta":{"content":"lo"}}]}

    data: [DONE]

Network chunks do not respect line boundaries, so bytes are decoded
incrementally and buffered until a newline arrives. A complete line that
fails to parse as JSON was split inside a record (a raw newline in a string
value): it is pushed back onto the buffer together with its newline and
processing of the current chunk stops. On the next chunk the scan for the end
of that record resumes after the pushed-back newline, so the record is
re-read whole instead of being dropped. A continuation line that itself starts
with ``data: `` is indistinguishable from a new frame: the pushed-back
fragment is then dropped and its delta is lost.

Usage:
    async for delta in iter_text_deltas(response.aiter_bytes()):
        turn.apply_assistant_text(accumulated := accumulated + delta)
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import structlog

from cofounder.domain.conversation import ConversationTurn

logger = structlog.get_logger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def extract_delta(frame: Any) -> str | None:
    """Return ``choices[0].delta.content`` from a parsed frame, if present."""
    try:
        content = frame["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class StreamReassembler:
    """Incremental SSE line reassembler and delta accumulator.

    ``feed`` processes one network chunk and returns the text deltas it
    completed, in arrival order. ``finish`` drains what is left once the
    stream ends. ``text`` is the concatenation of every delta so far.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        # Offset past a pushed-back record; the next line end is searched from here
        self._rescan_from = 0
        self._parts: list[str] = []
        self.done = False

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, chunk: bytes | str) -> list[str]:
        if self.done:
            return []
        self._buffer += chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        return self._drain(final=False)

    def finish(self) -> list[str]:
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        return self._drain(final=True)

    def _drain(self, final: bool) -> list[str]:
        deltas: list[str] = []

        while not self.done:
            newline_index = self._buffer.find("\n", self._rescan_from)
            if newline_index == -1:
                if not final or not self._buffer:
                    break
                newline_index = len(self._buffer)

            if self._rescan_from:
                continuation = self._buffer[self._rescan_from:newline_index]
                if continuation.startswith(DATA_PREFIX):
                    # A new frame begins: the pushed-back text was not a split record
                    logger.warning("sse_fragment_dropped", fragment_preview=self._buffer[: self._rescan_from][:200])
                    self._buffer = self._buffer[self._rescan_from:]
                    self._rescan_from = 0
                    continue

            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1:]
            self._rescan_from = 0

            if line.endswith("\r"):
                line = line[:-1]
            if line.startswith(":") or line.strip() == "":
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                self.done = True
                break

            try:
                frame = json.loads(payload, strict=False)
            except json.JSONDecodeError:
                if final and not self._buffer:
                    logger.warning("sse_incomplete_frame_at_end", fragment_preview=line[:200])
                    break
                self._buffer = line + "\n" + self._buffer
                self._rescan_from = len(line) + 1
                if final:
                    continue
                break

            delta = extract_delta(frame)
            if delta:
                self._parts.append(delta)
                deltas.append(delta)

        return deltas


async def iter_text_deltas(
    byte_stream: AsyncIterable[bytes],
    reassembler: StreamReassembler | None = None,
) -> AsyncIterator[str]:
    """Lazy, finite, non-restartable sequence of text deltas from an SSE byte stream.

    Stops at ``[DONE]`` or when the stream ends. Closing this generator early
    (the caller abandoned the stream) closes the underlying byte stream.
    """
    if reassembler is None:
        reassembler = StreamReassembler()
    try:
        async for chunk in byte_stream:
            for delta in reassembler.feed(chunk):
                yield delta
            if reassembler.done:
                break
        else:
            for delta in reassembler.finish():
                yield delta
    finally:
        aclose = getattr(byte_stream, "aclose", None)
        if aclose is not None:
            await aclose()


async def collect_text(byte_stream: AsyncIterable[bytes]) -> str:
    """Drain a stream and return the full assistant text ("" for an empty stream)."""
    reassembler = StreamReassembler()
    async for _ in iter_text_deltas(byte_stream, reassembler):
        pass
    return reassembler.text


async def stream_into_turn(byte_stream: AsyncIterable[bytes], turn: ConversationTurn) -> str:
    """Apply each delta to ``turn`` as it arrives; return the accumulated text."""
    text = ""
    async for delta in iter_text_deltas(byte_stream):
        text += delta
        turn.apply_assistant_text(text)
    return text
