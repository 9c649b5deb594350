from __future__ import annotations

import re
from typing import List, Match, NamedTuple, Optional, Pattern, Sequence

from .models import OPTION_LABELS, Option
from .patterns import FALLBACK_ANSWER_RE, FALLBACK_EXPLANATION_RE
from .preprocess import clean_line

_NON_LABEL = re.compile(r'[^A-F]', re.IGNORECASE)


class OptionLine(NamedTuple):
    index: int
    label: str
    match: Match[str]


def find_option_lines(lines: Sequence[str], option_regex: Optional[Pattern[str]]) -> List[OptionLine]:
    if option_regex is None or option_regex.groups < 1:
        return []
    found: List[OptionLine] = []
    seen = set()
    for idx, line in enumerate(lines):
        match = option_regex.search(line)
        if not match or not match.group(1):
            continue
        label = match.group(1).strip().upper()
        # repeated or out-of-range labels stay continuation text
        if label not in OPTION_LABELS or len(label) != 1 or label in seen:
            continue
        seen.add(label)
        found.append(OptionLine(idx, label, match))
    return found


def extract_options(lines: Sequence[str], option_lines: Sequence[OptionLine]) -> List[Option]:
    options: List[Option] = []
    for pos, current in enumerate(option_lines):
        end = option_lines[pos + 1].index if pos + 1 < len(option_lines) else len(lines)
        first_line = lines[current.index]
        match = current.match
        first_part = (first_line[:match.start()] + first_line[match.end():]).strip()
        rest = ' '.join(lines[current.index + 1:end])
        text = ' '.join(part for part in (first_part, rest) if part)
        options.append(Option(label=current.label, text=text))
    return options


def extract_correct_answers(lines: Sequence[str], answer_regex: Optional[Pattern[str]], answer_line: Optional[str] = None) -> List[str]:
    """Read answer letters, preferring the answer line on its own.

    The whole block joined with spaces is only searched when the answer line
    alone does not match, e.g. when the letters wrap onto the next line.
    """
    match = None
    if answer_line:
        match = _answer_match(answer_line, answer_regex)
    if match is None:
        match = _answer_match(' '.join(lines), answer_regex)
    if match is None:
        return []
    return list(_NON_LABEL.sub('', match.group(1)).upper())


def extract_explanation(lines: Sequence[str], explanation_regex: Optional[Pattern[str]]) -> Optional[str]:
    joined = '\n'.join(lines)
    match = _first_group_match(joined, explanation_regex) or FALLBACK_EXPLANATION_RE.search(joined)
    if not match or not match.group(1):
        return None
    cleaned = [clean_line(line) for line in match.group(1).split('\n')]
    cleaned = [line for line in cleaned if line]
    if not cleaned:
        return None
    return ' '.join(cleaned)


def _answer_match(text: str, answer_regex: Optional[Pattern[str]]) -> Optional[Match[str]]:
    match = _first_group_match(text, answer_regex) or FALLBACK_ANSWER_RE.search(text)
    return match if match and match.group(1) else None


def _first_group_match(text: str, regex: Optional[Pattern[str]]) -> Optional[Match[str]]:
    if regex is None or regex.groups < 1:
        return None
    return regex.search(text)


__all__ = [
    'OptionLine',
    'extract_correct_answers',
    'extract_explanation',
    'extract_options',
    'find_option_lines',
]
