from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

from .models import SuggestedTemplate
from .templates import DISCUSSION_DATE_PATTERN

logger = logging.getLogger(__name__)

MANUAL_INPUT_HINT = 'Not recognized; manual input required'

_LETTERS = r'([A-F](?:[\s,]*[A-F])*)\b'
_CJK_LETTERS = r'([A-F](?:[\s,，]*[A-F])*)'


@dataclass(frozen=True)
class PatternFamily:
    detect: Pattern[str]
    fields: Dict[str, str]
    hint: str


QUESTION_FAMILIES: List[PatternFamily] = [
    PatternFamily(
        re.compile(r'(?:Topic\s+\d+\s*)?Question\s*#?\d+', re.M),
        {
            'question_split_pattern': r'(?:^|\n)(?:Topic\s+\d+\s*)?Question\s*#?\d+',
            'question_number_pattern': r'(?:Topic\s+\d+\s*)?Question\s*#?(\d+)\s*[:.)-]?\s*(.*)$',
        },
        'ExamTopics style: "Question #N" or "Topic X Question #N"',
    ),
    PatternFamily(
        re.compile(r'NEW QUESTION \d+', re.M),
        {
            'question_split_pattern': r'(?:^|\n)NEW QUESTION \d+',
            'question_number_pattern': r'NEW QUESTION (\d+)\s*[:.)-]?\s*(.*)$',
        },
        '"NEW QUESTION N" style',
    ),
    PatternFamily(
        re.compile(r'^Q\s*[.:]?\s*\d+', re.M),
        {
            'question_split_pattern': r'(?:^|\n)Q\s*[.:]?\s*\d+',
            'question_number_pattern': r'Q\s*[.:]?\s*(\d+)[:.)-]?\s*(.*)$',
        },
        '"Q. N" / "Q N" style',
    ),
    PatternFamily(
        re.compile(r'^\d+\)\s+', re.M),
        {
            'question_split_pattern': r'(?:^|\n)\d+\)\s+',
            'question_number_pattern': r'^(\d+)\)\s+(.*)$',
        },
        '"N) text" style',
    ),
    PatternFamily(
        re.compile(r'^\d+\.\s+\S', re.M),
        {
            'question_split_pattern': r'(?:^|\n)\d+\.\s+',
            'question_number_pattern': r'^(\d+)\.\s+(.*)$',
        },
        '"N. text" style',
    ),
    PatternFamily(
        re.compile(r'第\s*\d+\s*题', re.M),
        {
            'question_split_pattern': r'(?:^|\n)第\s*\d+\s*题',
            'question_number_pattern': r'第\s*(\d+)\s*题[:.：]?\s*(.*)$',
        },
        'Chinese "第N题" style',
    ),
]

OPTION_FAMILIES: List[PatternFamily] = [
    PatternFamily(
        re.compile(r'^[A-F][).:][ \t]+', re.M),
        {'option_pattern': r'^([A-F])[).:]\s+'},
        '"A. " / "A) " / "A: " options',
    ),
    PatternFamily(
        re.compile(r'^\([A-F]\)[ \t]+', re.M),
        {'option_pattern': r'^\(([A-F])\)\s+'},
        '"(A) text" options',
    ),
    PatternFamily(
        re.compile(r'^[A-F]、', re.M),
        {'option_pattern': r'^([A-F])、\s*'},
        'Chinese "A、" options',
    ),
]

ANSWER_FAMILIES: List[PatternFamily] = [
    PatternFamily(
        re.compile(r'Correct\s*Answers?\s*[:：-]', re.I | re.M),
        {
            'correct_answer_line_pattern': r'Correct\s*Answers?\s*[:：]',
            'correct_answer_extract_pattern': r'Correct\s*Answers?\s*[:-]\s*' + _LETTERS,
        },
        '"Correct Answer:" style',
    ),
    PatternFamily(
        re.compile(r'^Answer\s*[:：]', re.I | re.M),
        {
            'correct_answer_line_pattern': r'Answer\s*[:：]',
            'correct_answer_extract_pattern': r'Answer\s*[:：]\s*' + _LETTERS,
        },
        '"Answer:" style',
    ),
    PatternFamily(
        re.compile(r'正确答案\s*[:：]', re.M),
        {
            'correct_answer_line_pattern': r'正确答案\s*[:：]',
            'correct_answer_extract_pattern': r'正确答案\s*[:：]\s*' + _CJK_LETTERS,
        },
        'Chinese "正确答案：" style',
    ),
    PatternFamily(
        re.compile(r'答案\s*[:：]', re.M),
        {
            'correct_answer_line_pattern': r'答案\s*[:：]',
            'correct_answer_extract_pattern': r'答案\s*[:：]\s*' + _CJK_LETTERS,
        },
        'Chinese "答案：" style',
    ),
]

EXPLANATION_FAMILIES: List[PatternFamily] = [
    PatternFamily(
        re.compile(r'Explanation\s*[:-]', re.I | re.M),
        {'explanation_pattern': r'Explanation\s*[:-](.*)$'},
        '"Explanation:" style',
    ),
    PatternFamily(
        re.compile(r'解[析释]\s*[:：]', re.M),
        {'explanation_pattern': r'解[析释]\s*[:：](.*)$'},
        'Chinese "解析：" style',
    ),
    PatternFamily(
        re.compile(r'Analysis\s*[:：-]', re.I | re.M),
        {'explanation_pattern': r'Analysis\s*[:-](.*)$'},
        '"Analysis:" style',
    ),
]

# (hint key, families) in detection order
FIELD_GROUPS: List[Tuple[str, List[PatternFamily]]] = [
    ('question_split_pattern', QUESTION_FAMILIES),
    ('option_pattern', OPTION_FAMILIES),
    ('correct_answer_line_pattern', ANSWER_FAMILIES),
    ('explanation_pattern', EXPLANATION_FAMILIES),
]

_RELATIVE_DATE = re.compile(r'\d+\s+(?:year|month|week|day|hour|minute)s?\s+ago', re.I)


def analyze_sample(sample_text: str) -> SuggestedTemplate:
    """Propose template patterns for a short sample by trying known layouts in order."""
    sample = sample_text or ''
    result = SuggestedTemplate()

    for hint_key, families in FIELD_GROUPS:
        family = next((f for f in families if f.detect.search(sample)), None)
        if family is None:
            result.hints[hint_key] = MANUAL_INPUT_HINT
            result.manual_fields.update(families[0].fields)
            continue
        for attr, pattern in family.fields.items():
            setattr(result, attr, pattern)
        result.hints[hint_key] = f'Detected {family.hint}'

    if _RELATIVE_DATE.search(sample):
        result.has_discussion = True
        result.discussion_date_pattern = DISCUSSION_DATE_PATTERN
        result.hints['has_discussion'] = 'Detected discussion timestamps such as "2 months ago"'
    else:
        result.has_discussion = False
        result.hints['has_discussion'] = 'No discussion thread detected'

    logger.debug("Sample analysis needs manual input for: %s", ', '.join(sorted(result.manual_fields)) or 'nothing')
    return result


__all__ = ['MANUAL_INPUT_HINT', 'PatternFamily', 'analyze_sample']
