"""Ordered pattern matching over the text of a single file.

Rules run in table order. A value is accepted once per file: the first
rule to match it owns it, and later rules never see it again, whatever
their type. The catch-all rules (generic endpoints, quoted strings)
check the accepted set explicitly before classifying a value.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from .models import Finding, FindingType, PatternRule
from .patterns import default_pattern_table

logger = logging.getLogger(__name__)

_CATCH_ALL_TYPES = {FindingType.ENDPOINT, FindingType.HARDCODED_STRING}


class PatternMatcher:
    """Runs an ordered pattern table against file contents."""

    name = "pattern_matcher"

    def __init__(self, rules: Sequence[PatternRule] | None = None) -> None:
        self._rules = tuple(rules) if rules is not None else default_pattern_table()

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        return self._rules

    def scan(self, content: str, file_name: str) -> list[Finding]:
        findings: list[Finding] = []
        accepted: set[str] = set()

        for rule in self._rules:
            for match in rule.regex.finditer(content):
                value = _extract(match, rule.capture).strip()
                if not value:
                    continue
                # Catch-all rules never reclassify a value a more specific
                # rule already owns. Kept separate from the general check below.
                if rule.type in _CATCH_ALL_TYPES and value in accepted:
                    continue
                if value in accepted:
                    continue

                findings.append(Finding(
                    value=value,
                    type=rule.type,
                    risk=rule.risk,
                    file_name=file_name,
                ))
                accepted.add(value)

        logger.debug("%s: %d findings", file_name, len(findings))
        return findings


def scan(content: str, file_name: str) -> list[Finding]:
    """Scan text with the bundled pattern table."""
    return PatternMatcher().scan(content, file_name)


def _extract(match, capture: int) -> str:
    # An unmatched or empty group falls back to the whole match.
    return match.group(capture) or match.group(0)
