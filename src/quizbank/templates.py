from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Union

from .models import Template
from .patterns import validate_template

logger = logging.getLogger(__name__)

DISCUSSION_DATE_PATTERN = (
    r'(\d+\s+(?:year|month|week|day|hour)s?,\s*)*\d+\s+(?:year|month|week|day|hour)s?\s+ago'
)

# ExamTopics layout: "Topic 1 Question #12", "A. ...", "Correct Answer: B",
# followed by a comment thread anchored on "2 years, 1 month ago".
BUILTIN_TEMPLATE = Template(
    name='ExamTopics (builtin)',
    is_builtin=True,
    question_split_pattern=r'(?:^|\n)(?:Topic\s+\d+\s*)?Question\s*#?\d+',
    question_number_pattern=r'(?:Topic\s+\d+\s*)?Question\s*#?(\d+)\s*[:.)-]?\s*(.*)$',
    option_pattern=r'^([A-F])[).:]\s+',
    correct_answer_line_pattern=r'Correct\s*Answers?\s*[:：]',
    correct_answer_extract_pattern=r'Correct\s*Answers?\s*[:-]\s*([A-F](?:[\s,]*[A-F])*)\b',
    explanation_pattern=r'Explanation\s*[:-](.*)$',
    has_discussion=True,
    discussion_date_pattern=DISCUSSION_DATE_PATTERN,
)


def duplicate_template(template: Template) -> Template:
    return replace(template, name=f'{template.name} (copy)', is_builtin=False)


def load_template(path: Union[str, Path]) -> Template:
    with open(path, 'r', encoding='utf-8') as fh:
        data = json.load(fh)
    template = Template.from_dict(data)
    validate_template(template)
    logger.debug("Loaded template %r from %s", template.name, path)
    return template


def save_template(template: Template, path: Union[str, Path]) -> None:
    validate_template(template)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open('w', encoding='utf-8') as fh:
        json.dump(template.to_dict(), fh, ensure_ascii=False, indent=2)


__all__ = [
    'BUILTIN_TEMPLATE',
    'DISCUSSION_DATE_PATTERN',
    'duplicate_template',
    'load_template',
    'save_template',
]
