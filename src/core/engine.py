from __future__ import annotations

import logging

from src.core.matchers import MatcherSet, build_matchers
from src.core.scanner import scan
from src.core.segments import EvaluationResult, assemble


logger = logging.getLogger("tms.engine")


class EvaluationFailure(RuntimeError):
    pass


class MatcherCache:
    """Compiled rules reused across scans until the rule text changes."""

    def __init__(self) -> None:
        self._rule_text: str | None = None
        self._matchers: MatcherSet | None = None

    def get(self, rule_text: str) -> MatcherSet:
        if self._matchers is not None and rule_text == self._rule_text:
            logger.debug("Matcher cache hit. rules=%s", len(self._matchers))
            return self._matchers
        matchers = build_matchers(rule_text)
        logger.debug(
            "Matcher cache rebuilt. rules=%s warnings=%s",
            len(matchers),
            len(matchers.warnings),
        )
        self._rule_text = rule_text
        self._matchers = matchers
        return matchers

    def invalidate(self) -> None:
        self._rule_text = None
        self._matchers = None


def evaluate(
    source_text: str | None,
    rule_text: str | None,
    cache: MatcherCache | None = None,
) -> EvaluationResult:
    if not source_text:
        return EvaluationResult()

    rules = rule_text or ""
    matcher_set = cache.get(rules) if cache is not None else build_matchers(rules)
    try:
        result = assemble(scan(source_text, matcher_set.matchers), matcher_set.warnings)
    except Exception as exc:
        logger.exception("Evaluation failed")
        raise EvaluationFailure(f"Evaluation failed: {exc}") from exc

    logger.info(
        "Evaluation finished. rules=%s matches=%s replacements=%s",
        len(matcher_set),
        result.match_count,
        result.replace_count,
    )
    return result
