from __future__ import annotations

import html
from collections.abc import Iterable
from datetime import datetime
from pathlib import PurePath

from src.core.segments import Segment, SegmentKind


SEGMENT_CSS_CLASSES = {
    SegmentKind.ORIGINAL: "diff-original",
    SegmentKind.ADDED: "diff-add",
    SegmentKind.REPLACED: "diff-replace",
}


def to_plain_text(segments: Iterable[Segment]) -> str:
    return "".join(segment.text for segment in segments)


def to_html(segments: Iterable[Segment]) -> str:
    return "".join(
        f'<span class="{SEGMENT_CSS_CLASSES[segment.kind]}">'
        f"{html.escape(segment.text)}</span>"
        for segment in segments
    )


def result_filename(source_name: str | None, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%y%m%d-%H%M")
    base = PurePath(source_name).stem if source_name else ""
    return f"TMS-{base or 'result'}_{stamp}.txt"
