from __future__ import annotations

import logging
from typing import List, Match, Optional, Tuple

from .discussion import clean_discussion, reconstruct_comments
from .extractors import (extract_correct_answers, extract_explanation, extract_options,
                         find_option_lines)
from .models import Question
from .patterns import FALLBACK_NUMBER_RE, CompiledTemplate

logger = logging.getLogger(__name__)


def _split_answer_line(lines: List[str], compiled: CompiledTemplate) -> Tuple[List[str], Optional[str], List[str]]:
    if compiled.answer_line is not None:
        for idx, line in enumerate(lines):
            if compiled.answer_line.search(line):
                return lines[:idx], line, lines[idx + 1:]
    return lines, None, []


def _match_header(first_line: str, compiled: CompiledTemplate) -> Optional[Match[str]]:
    if compiled.number is not None:
        match = compiled.number.search(first_line)
        if match:
            return match
    return FALLBACK_NUMBER_RE.search(first_line)


def _group(match: Match[str], index: int) -> Optional[str]:
    if match.re.groups < index:
        return None
    return match.group(index)


def _parse_number(match: Optional[Match[str]]) -> Optional[int]:
    if match is None:
        return None
    raw = _group(match, 1)
    try:
        return int(raw.strip()) if raw else None
    except ValueError:
        return None


def parse_block(block: str, compiled: CompiledTemplate) -> Optional[Question]:
    """Turn one question block into a Question, or None when it is unusable."""
    lines = [line.strip() for line in block.split('\n') if line.strip()]
    if not lines:
        return None

    qa_lines, answer_line, discussion_lines = _split_answer_line(lines, compiled)
    if not qa_lines:
        logger.debug("Dropping block with no question text before the answer line")
        return None

    header = _match_header(qa_lines[0], compiled)
    option_lines = find_option_lines(qa_lines, compiled.option)
    if not option_lines:
        logger.debug("Dropping block without options: %.60s", qa_lines[0])
        return None

    first_option = option_lines[0].index
    if header is not None:
        rest = (_group(header, 2) or '').strip()
        text_lines = [rest] if rest else []
        text_lines.extend(qa_lines[1:first_option])
    else:
        text_lines = qa_lines[:first_option]

    question = Question(
        number=_parse_number(header),
        text=' '.join(text_lines),
        options=extract_options(qa_lines, option_lines),
        correct_answers=extract_correct_answers(lines, compiled.answer_extract, answer_line),
        explanation=extract_explanation(lines, compiled.explanation),
    )

    if compiled.has_discussion and discussion_lines:
        question.discussion = clean_discussion('\n'.join(discussion_lines).strip()) or None
        if question.discussion and compiled.discussion_date is not None:
            question.comments = reconstruct_comments(question.discussion, compiled.discussion_date)
    return question


__all__ = ['parse_block']
