"""
Delimited-Output Parser

Extracts each output field's text from a model reply using
`[[ ## <name> ## ]]` marker lines, then coerces it to the field's type.

A field's raw value is everything after its marker's line break up to the
next marker line (a line that opens with `[[ ##`) or the end of the text,
with surrounding whitespace trimmed and internal newlines kept.

Parsing is total: malformed or partial replies never raise. A field whose
marker is absent (or not yet followed by a line break) resolves to None.

Markers are found by MarkerScanner in a single pass over the text. The
scanner can be fed incrementally; each feed only rescans the last line,
which is the only place a marker can still be incomplete.
"""

import bisect
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..core.fields import Field, FieldType, Module, NormalizedModule
from ..schema.normalizer import normalize_module
from .coercion import coerce_value

logger = logging.getLogger(__name__)

# A full marker, or just an opener whose name has not arrived yet
_MARKER_RE = re.compile(
    r"\[\[[ \t]*##(?:[ \t]*(?P<name>[^\n]*?)[ \t]*##[ \t]*\]\])?"
)

# An unterminated last line that may still grow into an opener
_PARTIAL_OPENER_RE = re.compile(r"[ \t]*\[(?:\[[ \t]*#?)?")


class ParseOutcome(str, Enum):
    """How a single output field resolved"""
    PARSED = "parsed"
    COERCION_FALLBACK = "coercion_fallback"   # numeric text kept as a string
    MISSING = "missing"                       # no marker for the field


@dataclass(frozen=True)
class ParsedField:
    """Parse result for one output field"""
    name: str
    type: FieldType
    raw: Optional[str]
    value: Any
    outcome: ParseOutcome


@dataclass(frozen=True)
class Marker:
    """Position of a marker (or bare opener) within the scanned text"""
    start: int
    end: int
    name: Optional[str]
    line_start: bool


class MarkerScanner:
    """
    Records marker positions in a growing text buffer.

    Usage:
        scanner = MarkerScanner()
        scanner.feed("[[ ## answer ## ]]\\nPar")
        scanner.feed("is")
        scanner.raw_values(["answer"])   # {"answer": "Paris"}
    """

    def __init__(self, text: str = ""):
        self._text = ""
        self._markers: List[Marker] = []
        self._resume = 0
        if text:
            self.feed(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def markers(self) -> List[Marker]:
        return list(self._markers)

    def feed(self, chunk: str) -> None:
        """Append text and update marker positions"""
        if not chunk:
            return
        self._text += chunk
        text = self._text

        # Markers never span lines, so only the last line can change
        while self._markers and self._markers[-1].start >= self._resume:
            self._markers.pop()

        for match in _MARKER_RE.finditer(text, self._resume):
            start = match.start()
            self._markers.append(Marker(
                start=start,
                end=match.end(),
                name=match.group("name"),
                line_start=start == 0 or text[start - 1] == "\n",
            ))

        self._resume = text.rfind("\n") + 1

    def raw_values(self, names: Iterable[str], hold_partial: bool = False) -> Dict[str, Optional[str]]:
        """
        Raw (trimmed, uncoerced) text for each requested field name.

        With hold_partial, an unterminated last line that could still become
        a marker opener (`[`, `[[`, `[[ #`) bounds the value like a marker
        line would. Streaming uses this so half an opener never shows up in
        the previous field's text.
        """
        # First marker line per name; a mid-line marker only when no line has one
        first: Dict[str, Marker] = {}
        for marker in self._markers:
            if marker.name is None:
                continue
            current = first.get(marker.name)
            if current is None or (marker.line_start and not current.line_start):
                first[marker.name] = marker
        boundaries = [m.start for m in self._markers if m.line_start]

        if hold_partial and _PARTIAL_OPENER_RE.fullmatch(self._text, self._resume):
            boundaries.append(self._resume)

        values = {}
        for name in names:
            marker = first.get(name)
            values[name] = None if marker is None else self._value_after(marker, boundaries)
        return values

    def _value_after(self, marker: Marker, boundaries: Sequence[int]) -> Optional[str]:
        text = self._text
        pos = marker.end
        while pos < len(text) and text[pos] in " \t\r":
            pos += 1
        if pos >= len(text) or text[pos] != "\n":
            return None

        idx = bisect.bisect_right(boundaries, marker.start)
        end = boundaries[idx] if idx < len(boundaries) else len(text)
        return text[pos + 1:end].strip()


def output_fields(outputs) -> Sequence[Field]:
    """Accept a field list, a Module, a NormalizedModule or a module mapping"""
    if isinstance(outputs, (Module, NormalizedModule, Mapping)):
        return normalize_module(outputs).outputs
    return [f if isinstance(f, Field) else Field.from_dict(f) for f in outputs]


def resolve_fields(
    scanner: MarkerScanner,
    fields: Sequence[Field],
    hold_partial: bool = False,
) -> List[ParsedField]:
    """Coerce the scanner's current raw values for the given fields"""
    raw_values = scanner.raw_values((f.name for f in fields), hold_partial=hold_partial)

    results = []
    for f in fields:
        raw = raw_values[f.name]
        if raw is None:
            results.append(ParsedField(f.name, f.type, None, None, ParseOutcome.MISSING))
            continue

        value, fell_back = coerce_value(raw, f.type)
        if fell_back:
            logger.debug(f"Field {f.name!r} ({f.type.value}) kept raw text {raw[:40]!r}")
            outcome = ParseOutcome.COERCION_FALLBACK
        else:
            outcome = ParseOutcome.PARSED
        results.append(ParsedField(f.name, f.type, raw, value, outcome))
    return results


def parse_fields(reply: Optional[str], outputs) -> List[ParsedField]:
    """
    Parse a reply into per-field results, including how each resolved.

    Args:
        reply: Model reply text (None is treated as empty)
        outputs: Output fields, or a module to take them from

    Returns:
        One ParsedField per output field, in declaration order
    """
    return resolve_fields(MarkerScanner(reply or ""), output_fields(outputs))


def parse_output(reply: Optional[str], outputs) -> Dict[str, Any]:
    """
    Parse a reply into a typed output map.

    Args:
        reply: Model reply text
        outputs: Output fields, or a module to take them from

    Returns:
        Dict of field name to typed value (None when the field is missing),
        in declaration order

    Example:
        parse_output("[[ ## n ## ]]\\nabc", [Field("n", "int")])  # {"n": "abc"}
    """
    return {pf.name: pf.value for pf in parse_fields(reply, outputs)}
