"""
Streaming Reassembler

Re-parses a growing reply buffer as chunks arrive and decides when an
updated output map should be emitted.

Emission rules:
- values are merged monotonically: once a field resolves to a non-None
  value it never reverts to None
- at most one emission per debounce window, and only when the merged map
  differs (by value, with NaN equal to NaN) from the previous emission
- the first resolved map is emitted as soon as it appears
- finish() always produces a final map, even inside an open window

The reassembler is a plain state machine (WAITING -> EMITTING -> DONE); the
async driver lives in promptsig.core.predictor.
"""

import logging
import math
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence

from ..core.fields import Field
from ..parsing.delimited_parser import MarkerScanner, resolve_fields

logger = logging.getLogger(__name__)


def _same_value(a: Any, b: Any) -> bool:
    # NaN never equals itself, but an unchanged "nan" field is no change
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _same_map(a: Dict[str, Any], b: Dict[str, Any]) -> bool:
    return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)


class StreamState(str, Enum):
    """Lifecycle of a streaming session"""
    WAITING = "waiting"      # nothing emitted yet
    EMITTING = "emitting"    # at least one update emitted
    DONE = "done"            # final map produced


class StreamReassembler:
    """
    Reassembles typed output maps from a stream of text chunks.

    Usage:
        reassembler = StreamReassembler(fields, debounce_ms=100)
        for chunk in chunks:
            update = reassembler.feed(chunk)
            if update is not None:
                show(update)
        show(reassembler.finish())
    """

    def __init__(
        self,
        fields: Sequence[Field],
        debounce_ms: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if debounce_ms < 0:
            raise ValueError(f"debounce_ms must not be negative, got {debounce_ms}")

        self.fields = tuple(fields)
        self.window = debounce_ms / 1000.0
        self._clock = clock
        self._scanner = MarkerScanner()
        self._empty = {f.name: None for f in self.fields}
        self._latest: Dict[str, Any] = dict(self._empty)
        self._last_emitted: Dict[str, Any] = dict(self._empty)
        self._last_emit_at: Optional[float] = None
        self.state = StreamState.WAITING
        self.chunks_received = 0
        self.emissions = 0

    @property
    def buffer(self) -> str:
        return self._scanner.text

    @property
    def latest(self) -> Dict[str, Any]:
        """Most recent merged map, emitted or not"""
        return dict(self._latest)

    @property
    def pending(self) -> bool:
        """True when the latest map has not been emitted yet"""
        return self.state != StreamState.DONE and not _same_map(self._latest, self._last_emitted)

    def seconds_until_ready(self) -> float:
        """Time left in the current debounce window (0 when an emission may happen now)"""
        if self._last_emit_at is None:
            return 0.0
        return max(0.0, self.window - (self._clock() - self._last_emit_at))

    def feed(self, chunk: str) -> Optional[Dict[str, Any]]:
        """
        Append a chunk and re-parse the buffer.

        Returns:
            The map to emit now, or None when nothing should be emitted
        """
        if self.state == StreamState.DONE:
            raise RuntimeError("Cannot feed a finished stream")

        self.chunks_received += 1
        self._scanner.feed(chunk)
        self._merge()
        return self.poll()

    def poll(self) -> Optional[Dict[str, Any]]:
        """Emit the pending map if the debounce window allows it"""
        if not self.pending or self.seconds_until_ready() > 0:
            return None
        return self._emit()

    def finish(self) -> Dict[str, Any]:
        """Final parse of the full buffer; always returns the resolved map"""
        if self.state == StreamState.DONE:
            return dict(self._last_emitted)

        self._merge(final=True)
        result = self._emit()
        self.state = StreamState.DONE
        logger.debug(
            f"Stream finished after {self.chunks_received} chunks, "
            f"{self.emissions} emissions, {len(self.buffer)} chars"
        )
        return result

    def _merge(self, final: bool = False) -> None:
        for parsed in resolve_fields(self._scanner, self.fields, hold_partial=not final):
            if parsed.value is None:
                continue
            # A marker whose text has not arrived yet is still unresolved
            if not final and parsed.raw == "":
                continue
            self._latest[parsed.name] = parsed.value

    def _emit(self) -> Dict[str, Any]:
        self._last_emitted = dict(self._latest)
        self._last_emit_at = self._clock()
        self.emissions += 1
        if self.state == StreamState.WAITING:
            self.state = StreamState.EMITTING
        return dict(self._latest)
