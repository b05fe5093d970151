from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


ALTERNATION_MARKER = "[or]"
ESCAPED_ALTERNATION = "\\[or]"
_ESCAPED_OR_PLACEHOLDER = "\uffff"
_ALTERNATION_SPLIT = re.compile(r"\s*\[or\]\s*")
_WILDCARD_MARKER = re.compile(r"\[(num|cjk)\]")


class WildcardKind(str, Enum):
    NUMBER = "num"
    CJK_CHAR = "cjk"

    @property
    def marker(self) -> str:
        return f"[{self.value}]"


WILDCARD_PATTERNS = {
    WildcardKind.NUMBER: "([0-9]+)",
    WildcardKind.CJK_CHAR: "([\u4e00-\u9fff])",
}


class PatternCompileError(ValueError):
    pass


@dataclass(frozen=True)
class CompiledPattern:
    pattern: re.Pattern[str]
    wildcard_order: tuple[WildcardKind, ...]


def split_alternatives(search: str) -> list[str]:
    protected = search.replace(ESCAPED_ALTERNATION, _ESCAPED_OR_PLACEHOLDER)
    segments: list[str] = []
    for segment in _ALTERNATION_SPLIT.split(protected):
        if not segment:
            continue
        segments.append(segment.replace(_ESCAPED_OR_PLACEHOLDER, ALTERNATION_MARKER))
    return segments


def _segment_to_regex(segment: str, wildcard_order: list[WildcardKind]) -> str:
    # re.split with one group alternates literal text and wildcard kinds.
    parts = _WILDCARD_MARKER.split(segment)
    pieces: list[str] = []
    for index, part in enumerate(parts):
        if index % 2 == 0:
            pieces.append(re.escape(part))
            continue
        kind = WildcardKind(part)
        wildcard_order.append(kind)
        pieces.append(WILDCARD_PATTERNS[kind])
    return "".join(pieces)


def compile_pattern(search: str) -> CompiledPattern:
    """Compile a search term (line marker already stripped) into a matcher.

    Every alternative is matched literally apart from its wildcard markers,
    which become capturing groups numbered left to right across all
    alternatives.
    """
    segments = split_alternatives(search)
    if not segments:
        raise PatternCompileError(f"No searchable alternatives in {search!r}")

    wildcard_order: list[WildcardKind] = []
    processed = [_segment_to_regex(segment, wildcard_order) for segment in segments]
    try:
        pattern = re.compile("|".join(processed))
    except re.error as exc:
        raise PatternCompileError(f"Invalid pattern for {search!r}: {exc}") from exc

    if pattern.groups != len(wildcard_order):
        raise PatternCompileError(
            f"Pattern for {search!r} has {pattern.groups} groups, "
            f"expected {len(wildcard_order)}"
        )
    return CompiledPattern(pattern=pattern, wildcard_order=tuple(wildcard_order))
