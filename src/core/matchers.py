from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from src.core.pattern_compiler import PatternCompileError, WildcardKind, compile_pattern
from src.core.replacement_compiler import TemplateToken, compile_replacement, render_template
from src.core.rule_parser import Rule, parse_rules


logger = logging.getLogger("tms.matchers")


@dataclass(frozen=True)
class RuleCompilationWarning:
    line_number: int
    rule_text: str
    message: str


@dataclass(frozen=True)
class CompiledMatcher:
    rule: Rule
    pattern: re.Pattern[str]
    wildcard_order: tuple[WildcardKind, ...]
    replacement_template: tuple[TemplateToken, ...] = ()

    @property
    def is_line_mode(self) -> bool:
        return self.rule.is_line_mode

    @property
    def is_replacement(self) -> bool:
        return self.rule.is_replacement

    @property
    def is_delete(self) -> bool:
        return self.rule.is_delete

    def render(self, matched_text: str, groups: tuple[str | None, ...]) -> str:
        if not self.is_replacement:
            return matched_text
        return render_template(self.replacement_template, matched_text, groups)


@dataclass
class MatcherSet:
    matchers: list[CompiledMatcher] = field(default_factory=list)
    warnings: list[RuleCompilationWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.matchers)


def compile_rule(rule: Rule) -> CompiledMatcher:
    compiled = compile_pattern(rule.search_body)
    template: tuple[TemplateToken, ...] = ()
    if rule.is_replacement:
        template = compile_replacement(
            rule.raw_replace,
            compiled.wildcard_order,
            is_line_mode=rule.is_line_mode,
        )
    return CompiledMatcher(
        rule=rule,
        pattern=compiled.pattern,
        wildcard_order=compiled.wildcard_order,
        replacement_template=template,
    )


def build_matchers(rule_text: str) -> MatcherSet:
    result = MatcherSet()
    for rule in parse_rules(rule_text or ""):
        try:
            result.matchers.append(compile_rule(rule))
        except PatternCompileError as exc:
            logger.warning(
                "Skipping rule on line %s (%r): %s",
                rule.line_number,
                rule.source_line,
                exc,
            )
            result.warnings.append(
                RuleCompilationWarning(
                    line_number=rule.line_number,
                    rule_text=rule.source_line,
                    message=str(exc),
                )
            )
    return result
