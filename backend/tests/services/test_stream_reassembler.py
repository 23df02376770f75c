"""Tests for SSE stream reassembly with push-back recovery."""

import json

import pytest

from cofounder.domain.conversation import ConversationTurn
from cofounder.services.stream_reassembler import (
    StreamReassembler,
    collect_text,
    extract_delta,
    iter_text_deltas,
    stream_into_turn,
)

pytestmark = pytest.mark.unit


class ClosingStream:
    """Byte stream that records whether it was closed."""

    def __init__(self, *chunks: bytes):
        self.chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self):
        self.closed = True


class TestExtractDelta:
    def test_content_present(self):
        assert extract_delta({"choices": [{"delta": {"content": "hi"}}]}) == "hi"

    @pytest.mark.parametrize(
        "frame",
        [{}, {"choices": []}, {"choices": [{"delta": {}}]}, {"choices": [{"delta": {"content": None}}]}, "text"],
    )
    def test_content_absent(self, frame):
        assert extract_delta(frame) is None


class TestStreamReassembler:
    async def test_deltas_concatenate_in_order(self, make_sse, chunked):
        text = await collect_text(chunked(make_sse("Hel", "lo", ", founder")))

        assert text == "Hello, founder"

    async def test_frames_split_across_arbitrary_chunks(self, make_sse, chunked):
        body = make_sse("one ", "two ", "three")
        pieces = [body[i:i + 7] for i in range(0, len(body), 7)]

        assert await collect_text(chunked(*pieces)) == "one two three"

    async def test_raw_newline_inside_string_is_recovered(self, chunked):
        chunks = (
            b'data: {"choices":[{"delta":{"content":"a',
            b'\nb"}}]}\n\n',
            b"data: [DONE]\n\n",
        )

        assert await collect_text(chunked(*chunks)) == "a\nb"

    async def test_continuation_starting_with_data_prefix_is_lost(self, make_frame, chunked):
        # The second line of the split record looks like a new frame
        chunks = (
            b'data: {"choices":[{"delta":{"content":"a\n',
            b'data: b"}}]}\n\n' + make_frame("next").encode() + b"data: [DONE]\n\n",
        )

        assert await collect_text(chunked(*chunks)) == "next"

    def test_pushed_back_record_completes_on_next_feed(self):
        reassembler = StreamReassembler()

        assert reassembler.feed(b'data: {"choices":[{"delta":{"content":"line one\n') == []
        assert reassembler.feed(b'line two"}}]}\n\n') == ["line one\nline two"]
        assert reassembler.feed(b"data: [DONE]\n\n") == []
        assert reassembler.done is True

    async def test_empty_stream(self, chunked):
        assert await collect_text(chunked()) == ""

    async def test_only_done(self, chunked):
        assert await collect_text(chunked(b"data: [DONE]\n\n")) == ""

    async def test_nothing_after_done_is_read(self, make_frame, chunked):
        chunks = (make_frame("kept").encode(), b"data: [DONE]\n\n", make_frame("ignored").encode())

        assert await collect_text(chunked(*chunks)) == "kept"

    async def test_comments_blank_lines_and_other_fields_skipped(self, make_frame, chunked):
        body = ": keepalive\n\nevent: message\n" + make_frame("ok") + "data: [DONE]\n\n"

        assert await collect_text(chunked(body.encode())) == "ok"

    async def test_crlf_line_endings(self, chunked):
        frame = json.dumps({"choices": [{"delta": {"content": "crlf"}}]})
        body = f"data: {frame}\r\n\r\ndata: [DONE]\r\n\r\n".encode()

        assert await collect_text(chunked(body)) == "crlf"

    async def test_frames_without_content_contribute_nothing(self, chunked):
        body = (
            'data: {"choices":[{"delta":{"role":"assistant"}}]}\n\n'
            'data: {"choices":[{"delta":{"content":"x"}}]}\n\n'
            'data: {"choices":[{"delta":{},"finish_reason":"stop"}]}\n\n'
        )

        assert await collect_text(chunked(body.encode())) == "x"

    async def test_multibyte_utf8_split_across_chunks(self, make_sse, chunked):
        body = make_sse("₹1,499 ✓")
        # json.dumps escapes non-ascii; build an unescaped utf-8 frame as well
        raw = 'data: {"choices":[{"delta":{"content":"₹1,499"}}]}\n\n'.encode("utf-8")
        cut = raw.index("₹".encode("utf-8")) + 1

        assert await collect_text(chunked(raw[:cut], raw[cut:])) == "₹1,499"
        assert await collect_text(chunked(body)) == "₹1,499 ✓"

    async def test_trailing_frame_without_newline(self, chunked):
        body = b'data: {"choices":[{"delta":{"content":"tail"}}]}'

        assert await collect_text(chunked(body)) == "tail"

    async def test_truncated_frame_at_end_is_dropped(self, make_frame, chunked):
        body = make_frame("kept").encode() + b'data: {"choices":[{"delta":{"content":"cut'

        assert await collect_text(chunked(body)) == "kept"

    async def test_unparseable_fragment_does_not_swallow_next_frame(self, make_frame, chunked):
        body = b"data: {not json\n" + make_frame("next").encode() + b"data: [DONE]\n\n"

        assert await collect_text(chunked(body)) == "next"


class TestIterTextDeltas:
    async def test_yields_each_delta(self, make_sse, chunked):
        deltas = [delta async for delta in iter_text_deltas(chunked(make_sse("a", "b", "c")))]

        assert deltas == ["a", "b", "c"]

    async def test_closing_early_closes_byte_stream(self, make_sse):
        stream = ClosingStream(make_sse("first", done=False), make_sse("second"))
        deltas = iter_text_deltas(stream)

        assert await deltas.__anext__() == "first"
        await deltas.aclose()

        assert stream.closed is True

    async def test_exhausting_closes_byte_stream(self, make_sse):
        stream = ClosingStream(make_sse("only"))

        assert await collect_text(stream) == "only"
        assert stream.closed is True

    async def test_stream_into_turn_updates_in_place(self, make_sse, chunked):
        snapshots = []

        class RecordingTurn(ConversationTurn):
            def apply_assistant_text(self, text):
                snapshots.append(text)
                super().apply_assistant_text(text)

        turn = RecordingTurn()
        turn.add_user_message("hi")
        text = await stream_into_turn(chunked(make_sse("Hi", " there")), turn)

        assert text == "Hi there"
        assert snapshots == ["Hi", "Hi there"]
        assert turn.messages[-1] == {"role": "assistant", "content": "Hi there"}
        assert len(turn.messages) == 2
