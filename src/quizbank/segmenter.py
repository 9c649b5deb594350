from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern

logger = logging.getLogger(__name__)

_PARAGRAPH_GAP = re.compile(r'\n{2,}')


def split_blocks(text: str, split_regex: Optional[Pattern[str]]) -> List[str]:
    """Cut normalized text into one block per question.

    Each block runs from one split match to the next. When the split pattern
    is missing or never matches, blank-line gaps are used instead.
    """
    matches = list(split_regex.finditer(text)) if split_regex is not None else []
    if not matches:
        logger.debug("Split pattern matched nothing; falling back to paragraph gaps")
        return split_paragraphs(text)

    blocks: List[str] = []
    for idx, match in enumerate(matches):
        start = match.start()
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        block = text[start:end].strip()
        if block:
            blocks.append(block)
    return blocks


def split_paragraphs(text: str) -> List[str]:
    return [chunk.strip() for chunk in _PARAGRAPH_GAP.split(text) if chunk.strip()]
