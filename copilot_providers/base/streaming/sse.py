"""Incremental decoder for ``text/event-stream`` bodies.

Only ``data:`` lines matter; blank lines, comments and other fields are
ignored. ``data: [DONE]`` ends the stream. Input may arrive in arbitrary
chunks (partial lines, partial UTF-8 sequences); complete lines are emitted as
soon as they are available and an unterminated last line is flushed at EOF.
"""
from __future__ import annotations

import codecs
from typing import Iterable, Iterator, List, Union

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class SSEDecoder:
    """Feed raw chunks, get back ``data`` payload strings."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        """True once the ``[DONE]`` marker has been seen."""
        return self._done

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        if self._done:
            return []
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return self._collect(lines)

    def flush(self) -> List[str]:
        """Process whatever is buffered as a final line (EOF)."""
        if self._done:
            return []
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return self._collect([tail])

    def _collect(self, lines: Iterable[str]) -> List[str]:
        out: List[str] = []
        for raw in lines:
            payload = parse_line(raw)
            if payload is None:
                continue
            if payload == DONE_MARKER:
                self._done = True
                break
            out.append(payload)
        return out


def parse_line(raw: str) -> Union[str, None]:
    """Return the payload of a ``data:`` line, or ``None`` for anything else."""
    line = raw.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    return payload[1:] if payload.startswith(" ") else payload


def iter_frames(chunks: Iterable[Union[bytes, str]]) -> Iterator[str]:
    """Yield ``data`` payloads from a chunk iterator until ``[DONE]`` or EOF."""
    decoder = SSEDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
        if decoder.done:
            return
    yield from decoder.flush()


__all__ = ["SSEDecoder", "iter_frames", "parse_line", "DATA_PREFIX", "DONE_MARKER"]
