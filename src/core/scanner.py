from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from src.core.matchers import CompiledMatcher
from src.core.segments import Segment, SegmentKind


@dataclass(frozen=True)
class MatchCandidate:
    start: int
    length: int
    text: str
    groups: tuple[str | None, ...]

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class PriorityRange:
    line_start: int
    line_end: int
    matcher: CompiledMatcher
    match: MatchCandidate


def iter_lines(source: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` of each line, terminator included."""
    position = 0
    length = len(source)
    while position < length:
        newline = source.find("\n", position)
        end = length if newline == -1 else newline + 1
        yield position, end
        position = end


def trailing_terminator(text: str) -> str:
    if text.endswith("\r\n"):
        return "\r\n"
    if text.endswith("\n"):
        return "\n"
    return ""


def find_priority_ranges(
    source: str,
    line_matchers: Sequence[CompiledMatcher],
) -> list[PriorityRange]:
    ranges: list[PriorityRange] = []
    if not line_matchers:
        return ranges
    for start, end in iter_lines(source):
        line = source[start:end]
        for matcher in line_matchers:
            found = matcher.pattern.search(line)
            if found is None:
                continue
            ranges.append(
                PriorityRange(
                    line_start=start,
                    line_end=end,
                    matcher=matcher,
                    match=MatchCandidate(
                        start=start,
                        length=end - start,
                        text=line,
                        groups=found.groups(),
                    ),
                )
            )
            break
    return ranges


def _segment_kind(matcher: CompiledMatcher) -> SegmentKind:
    return SegmentKind.REPLACED if matcher.is_replacement else SegmentKind.ADDED


def render_priority_range(priority: PriorityRange) -> Segment:
    matcher = priority.matcher
    content = matcher.render(priority.match.text, priority.match.groups)
    if matcher.is_replacement:
        terminator = trailing_terminator(priority.match.text)
        # An explicit line delete also drops the terminator; other empty
        # replacements leave a blank line behind.
        keep_terminator = bool(content) or not matcher.is_delete
        if terminator and keep_terminator and not content.endswith("\n"):
            content += terminator
    return Segment(_segment_kind(matcher), content)


class _CandidateCache:
    """Next match per text matcher, refreshed only once the cursor passes it."""

    _EXHAUSTED = object()

    def __init__(self, source: str, matchers: Sequence[CompiledMatcher]) -> None:
        self.source = source
        self.matchers = matchers
        self._slots: list[object] = [None] * len(matchers)

    def candidate(self, index: int, cursor: int) -> MatchCandidate | None:
        cached = self._slots[index]
        if cached is self._EXHAUSTED:
            return None
        if isinstance(cached, MatchCandidate) and cached.start >= cursor:
            return cached
        found = self.matchers[index].pattern.search(self.source, cursor)
        if found is None:
            self._slots[index] = self._EXHAUSTED
            return None
        fresh = MatchCandidate(
            start=found.start(),
            length=found.end() - found.start(),
            text=found.group(0),
            groups=found.groups(),
        )
        self._slots[index] = fresh
        return fresh


def scan(source: str, matchers: Sequence[CompiledMatcher]) -> Iterator[Segment]:
    """Scan ``source`` once and yield classified segments in order.

    Line-mode matchers claim whole lines first. Text-mode matches are then
    chosen leftmost, longest at the same start, and earliest rule on a full
    tie; a text match may not reach into a claimed line.
    """
    if not source:
        return
    if not matchers:
        yield Segment(SegmentKind.ORIGINAL, source)
        return

    priority_ranges = find_priority_ranges(
        source, [matcher for matcher in matchers if matcher.is_line_mode]
    )
    text_matchers = [matcher for matcher in matchers if not matcher.is_line_mode]
    cache = _CandidateCache(source, text_matchers)
    source_length = len(source)
    cursor = 0
    priority_index = 0

    while cursor < source_length:
        pending = (
            priority_ranges[priority_index]
            if priority_index < len(priority_ranges)
            else None
        )
        if pending is not None and cursor == pending.line_start:
            yield render_priority_range(pending)
            cursor = pending.line_end
            priority_index += 1
            continue

        limit = pending.line_start if pending is not None else source_length
        best_index = -1
        best: MatchCandidate | None = None
        for index in range(len(text_matchers)):
            candidate = cache.candidate(index, cursor)
            if candidate is None:
                continue
            if candidate.start >= limit or candidate.end > limit:
                continue
            if (
                best is None
                or candidate.start < best.start
                or (candidate.start == best.start and candidate.length > best.length)
            ):
                best = candidate
                best_index = index

        if best is None:
            if limit > cursor:
                yield Segment(SegmentKind.ORIGINAL, source[cursor:limit])
            cursor = limit
            continue

        if best.start > cursor:
            yield Segment(SegmentKind.ORIGINAL, source[cursor:best.start])
        matcher = text_matchers[best_index]
        yield Segment(_segment_kind(matcher), matcher.render(best.text, best.groups))
        cursor = best.end
