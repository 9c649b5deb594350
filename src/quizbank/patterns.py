from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern

from .cache import PatternCache
from .exceptions import InvalidPatternError
from .models import Template, wire_key

logger = logging.getLogger(__name__)

FIELD_FLAGS: Dict[str, int] = {
    'question_split_pattern': re.IGNORECASE,
    'question_number_pattern': re.IGNORECASE,
    'option_pattern': 0,
    'correct_answer_line_pattern': re.IGNORECASE,
    'correct_answer_extract_pattern': re.IGNORECASE,
    'explanation_pattern': re.IGNORECASE | re.DOTALL,
    'discussion_date_pattern': re.IGNORECASE,
}

FALLBACK_NUMBER_RE = re.compile(r'^(\d+)[).:\s]+(.*)$')
FALLBACK_ANSWER_RE = re.compile(r'Answers?\s*[:-]\s*([A-F](?:[\s,]*[A-F])*)\b', re.IGNORECASE)
FALLBACK_EXPLANATION_RE = re.compile(r'(?:Explanation|解析)\s*[:：-](.*)$', re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class CompiledTemplate:
    template: Template
    split: Optional[Pattern[str]]
    number: Optional[Pattern[str]]
    option: Optional[Pattern[str]]
    answer_line: Optional[Pattern[str]]
    answer_extract: Optional[Pattern[str]]
    explanation: Optional[Pattern[str]]
    discussion_date: Optional[Pattern[str]]

    @property
    def has_discussion(self) -> bool:
        return self.template.has_discussion


def check_pattern(pattern: Optional[str], flags: int = 0) -> Optional[str]:
    """Return the compile error for ``pattern``, or None when it is usable."""
    if not pattern:
        return None
    try:
        re.compile(pattern, flags)
    except re.error as exc:
        return str(exc)
    return None


def _safe_compile(template: Template, attr: str) -> Optional[Pattern[str]]:
    pattern = getattr(template, attr)
    if not pattern:
        return None
    try:
        return re.compile(pattern, FIELD_FLAGS[attr])
    except re.error as exc:
        logger.warning(
            "Template %r field %s does not compile (%s); treating it as no match",
            template.name,
            wire_key(attr),
            exc,
        )
        return None


def compile_template(template: Template) -> CompiledTemplate:
    return CompiledTemplate(
        template=template,
        split=_safe_compile(template, 'question_split_pattern'),
        number=_safe_compile(template, 'question_number_pattern'),
        option=_safe_compile(template, 'option_pattern'),
        answer_line=_safe_compile(template, 'correct_answer_line_pattern'),
        answer_extract=_safe_compile(template, 'correct_answer_extract_pattern'),
        explanation=_safe_compile(template, 'explanation_pattern'),
        discussion_date=_safe_compile(template, 'discussion_date_pattern'),
    )


_CACHE: PatternCache[CompiledTemplate] = PatternCache()


def get_compiled(template: Template, cache: Optional[PatternCache[CompiledTemplate]] = None) -> CompiledTemplate:
    store = cache if cache is not None else _CACHE
    return store.get(template.fingerprint(), lambda: compile_template(template))


def validate_template(template: Template) -> None:
    for attr, pattern in template.pattern_fields():
        error = check_pattern(pattern, FIELD_FLAGS[attr])
        if error:
            raise InvalidPatternError(wire_key(attr), pattern, error)


__all__ = [
    'CompiledTemplate',
    'FALLBACK_ANSWER_RE',
    'FALLBACK_EXPLANATION_RE',
    'FALLBACK_NUMBER_RE',
    'FIELD_FLAGS',
    'check_pattern',
    'compile_template',
    'get_compiled',
    'validate_template',
]
