from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from src.core.matchers import RuleCompilationWarning


class SegmentKind(str, Enum):
    ORIGINAL = "original"
    ADDED = "added"
    REPLACED = "replaced"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    text: str


@dataclass
class EvaluationResult:
    segments: list[Segment] = field(default_factory=list)
    match_count: int = 0
    replace_count: int = 0
    warnings: list[RuleCompilationWarning] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)


def assemble(
    segments: Iterable[Segment],
    warnings: Iterable[RuleCompilationWarning] = (),
) -> EvaluationResult:
    result = EvaluationResult(warnings=list(warnings))
    for segment in segments:
        if segment.kind is SegmentKind.ADDED:
            result.match_count += 1
        elif segment.kind is SegmentKind.REPLACED:
            result.replace_count += 1
        result.segments.append(segment)
    return result
