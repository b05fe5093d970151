from __future__ import annotations

import re
import unittest

from src.core.matchers import CompiledMatcher, build_matchers
from src.core.rule_parser import Rule
from src.core.scanner import find_priority_ranges, iter_lines, scan, trailing_terminator
from src.core.segments import Segment, SegmentKind


def _raw_matcher(pattern: str, line_mode: bool = False) -> CompiledMatcher:
    search = f"[line]{pattern}" if line_mode else pattern
    return CompiledMatcher(
        rule=Rule(raw_search=search, raw_replace=search, is_line_mode=line_mode),
        pattern=re.compile(pattern),
        wildcard_order=(),
    )


class ScannerTests(unittest.TestCase):
    def test_iter_lines_keeps_terminators(self) -> None:
        source = "a\r\nbb\n\nc"

        lines = [source[start:end] for start, end in iter_lines(source)]

        self.assertEqual(lines, ["a\r\n", "bb\n", "\n", "c"])

    def test_trailing_terminator(self) -> None:
        self.assertEqual(trailing_terminator("x\r\n"), "\r\n")
        self.assertEqual(trailing_terminator("x\n"), "\n")
        self.assertEqual(trailing_terminator("x\r"), "")

    def test_first_line_rule_claims_each_line(self) -> None:
        matchers = build_matchers("[line]a///A\n[line]b///B").matchers

        ranges = find_priority_ranges("ab\nb\nc\n", matchers)

        self.assertEqual(
            [(r.line_start, r.line_end, r.matcher.rule.raw_replace) for r in ranges],
            [(0, 3, "A"), (3, 5, "B")],
        )

    def test_empty_matcher_list_yields_whole_source(self) -> None:
        self.assertEqual(
            list(scan("abc", [])),
            [Segment(SegmentKind.ORIGINAL, "abc")],
        )

    def test_empty_source_yields_nothing(self) -> None:
        self.assertEqual(list(scan("", build_matchers("a").matchers)), [])

    def test_gaps_between_matches_are_original(self) -> None:
        segments = list(scan("x cat y dog z", build_matchers("cat\ndog///DOG").matchers))

        self.assertEqual(
            segments,
            [
                Segment(SegmentKind.ORIGINAL, "x "),
                Segment(SegmentKind.ADDED, "cat"),
                Segment(SegmentKind.ORIGINAL, " y "),
                Segment(SegmentKind.REPLACED, "DOG"),
                Segment(SegmentKind.ORIGINAL, " z"),
            ],
        )

    def test_text_match_straddling_claimed_line_is_discarded(self) -> None:
        matchers = [_raw_matcher("b\nX"), _raw_matcher("Y", line_mode=True)]

        segments = list(scan("ab\nXY\n", matchers))

        self.assertEqual(
            segments,
            [
                Segment(SegmentKind.ORIGINAL, "ab\n"),
                Segment(SegmentKind.ADDED, "XY\n"),
            ],
        )

    def test_text_match_ending_at_claimed_line_is_kept(self) -> None:
        matchers = [_raw_matcher("b\n"), _raw_matcher("Y", line_mode=True)]

        segments = list(scan("ab\nXY\n", matchers))

        self.assertEqual(
            segments,
            [
                Segment(SegmentKind.ORIGINAL, "a"),
                Segment(SegmentKind.ADDED, "b\n"),
                Segment(SegmentKind.ADDED, "XY\n"),
            ],
        )

    def test_text_matches_resume_after_claimed_line(self) -> None:
        matchers = build_matchers("[line]skip\nab///AB").matchers

        segments = list(scan("ab\nskip ab\nab", matchers))

        self.assertEqual(
            segments,
            [
                Segment(SegmentKind.REPLACED, "AB"),
                Segment(SegmentKind.ORIGINAL, "\n"),
                Segment(SegmentKind.ADDED, "skip ab\n"),
                Segment(SegmentKind.REPLACED, "AB"),
            ],
        )


if __name__ == "__main__":
    unittest.main()
