from __future__ import annotations

from dataclasses import dataclass


COMMENT_MARKER = "///"
SEPARATOR = "///"
LINE_MARKER = "[line]"
DELETE_SENTINEL = "[del]"


@dataclass(frozen=True)
class Rule:
    raw_search: str
    raw_replace: str
    is_replacement: bool = False
    is_line_mode: bool = False
    is_delete: bool = False
    line_number: int = 0
    source_line: str = ""

    @property
    def search_body(self) -> str:
        """Search text with the leading line marker removed."""
        if self.is_line_mode:
            return self.raw_search[len(LINE_MARKER):].strip()
        return self.raw_search


def parse_rule_line(line: str, line_number: int = 0) -> Rule | None:
    trimmed = line.strip()
    if not trimmed or trimmed.startswith(COMMENT_MARKER):
        return None

    search = trimmed
    replace = trimmed
    is_replacement = False
    is_delete = False

    sep_index = trimmed.find(SEPARATOR)
    if sep_index != -1:
        search = trimmed[:sep_index].strip()
        replace = trimmed[sep_index + len(SEPARATOR):].strip()
        if replace == DELETE_SENTINEL:
            replace = ""
            is_delete = True
        is_replacement = True

    if not search:
        return None

    is_line_mode = search.startswith(LINE_MARKER)
    if is_line_mode and not search[len(LINE_MARKER):].strip():
        return None

    return Rule(
        raw_search=search,
        raw_replace=replace,
        is_replacement=is_replacement,
        is_line_mode=is_line_mode,
        is_delete=is_delete,
        line_number=line_number,
        source_line=trimmed,
    )


def parse_rules(rule_text: str) -> list[Rule]:
    rules: list[Rule] = []
    for line_number, line in enumerate(rule_text.split("\n"), start=1):
        rule = parse_rule_line(line, line_number)
        if rule is not None:
            rules.append(rule)
    return rules
