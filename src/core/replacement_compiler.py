from __future__ import annotations

import itertools
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from src.core.pattern_compiler import WildcardKind
from src.core.rule_parser import LINE_MARKER


_WHOLE_LINE_TOKEN = "$$LINE$$"
_LONE_DOLLAR = re.compile(r"\$(?![0-9])")
_WILDCARD_TOKEN = re.compile(r"\[(num|cjk)\]")
_TEMPLATE_TOKEN = re.compile(r"(\$\$LINE\$\$)|(\$\$)|\$([0-9]+)")
_TRAILING_TERMINATOR = re.compile(r"\r?\n\Z")


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class CaptureRef:
    index: int


@dataclass(frozen=True)
class WholeLineRef:
    pass


TemplateToken = Union[Literal, CaptureRef, WholeLineRef]


def _append_literal(tokens: list[TemplateToken], text: str) -> None:
    if not text:
        return
    if tokens and isinstance(tokens[-1], Literal):
        tokens[-1] = Literal(tokens[-1].text + text)
        return
    tokens.append(Literal(text))


def escape_dollars(raw_replace: str) -> str:
    return _LONE_DOLLAR.sub("$$", raw_replace)


def expand_wildcard_echoes(text: str, wildcard_order: Sequence[WildcardKind]) -> str:
    if not wildcard_order:
        return text
    counter = itertools.count()

    def _echo(match: re.Match[str]) -> str:
        index = next(counter)
        if index < len(wildcard_order) and wildcard_order[index] == WildcardKind(match.group(1)):
            return f"${index + 1}"
        return match.group(0)

    return _WILDCARD_TOKEN.sub(_echo, text)


def tokenize_template(text: str) -> tuple[TemplateToken, ...]:
    tokens: list[TemplateToken] = []
    position = 0
    for match in _TEMPLATE_TOKEN.finditer(text):
        _append_literal(tokens, text[position:match.start()])
        position = match.end()
        if match.group(1) is not None:
            tokens.append(WholeLineRef())
        elif match.group(2) is not None:
            _append_literal(tokens, "$")
        else:
            tokens.append(CaptureRef(int(match.group(3))))
    _append_literal(tokens, text[position:])
    return tuple(tokens)


def compile_replacement(
    raw_replace: str,
    wildcard_order: Sequence[WildcardKind],
    is_line_mode: bool = False,
) -> tuple[TemplateToken, ...]:
    """Build the replacement template for a replacing rule.

    Lone ``$`` signs are doubled so they stay literal. The i-th
    ``[num]``/``[cjk]`` token becomes ``$<i+1>`` only when the i-th captured
    wildcard has the same kind. For line-mode rules that capture nothing,
    ``[line]`` becomes the whole-line token. The rewritten string is then
    split into template tokens.
    """
    text = expand_wildcard_echoes(escape_dollars(raw_replace), wildcard_order)
    if is_line_mode and not wildcard_order and LINE_MARKER in text:
        text = text.replace(LINE_MARKER, _WHOLE_LINE_TOKEN)
    return tokenize_template(text)


def strip_line_terminator(text: str) -> str:
    return _TRAILING_TERMINATOR.sub("", text, count=1)


def render_template(
    template: Sequence[TemplateToken],
    matched_text: str,
    groups: Sequence[str | None],
) -> str:
    parts: list[str] = []
    for token in template:
        if isinstance(token, Literal):
            parts.append(token.text)
        elif isinstance(token, CaptureRef):
            index = token.index - 1
            if 0 <= index < len(groups) and groups[index] is not None:
                parts.append(groups[index])
        else:
            parts.append(strip_line_terminator(matched_text))
    return "".join(parts)
