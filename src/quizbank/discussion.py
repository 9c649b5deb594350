"""Rebuild a comment thread from the free text that follows an answer line.

Comments have no delimiter other than a loose timestamp phrase ("2 years, 1
month ago"). The author and badge for a comment sit either before the
timestamp on the same line or on the line(s) just above it, so those lines
have to be taken back out of the text collected for the previous comment.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from .models import Comment

logger = logging.getLogger(__name__)

USER_ICON = '👤'
ANONYMOUS = 'Anonymous'
HIGHLY_VOTED = 'Highly Voted'
MOST_RECENT = 'Most Recent'

# Font Awesome private-use glyphs left behind by PDF text extraction
_GLYPHS = (
    ('\uf147', ''),
    ('\uf007', USER_ICON + ' '),
    ('\uf086', '💬 '),
    ('\uf0a3', '• '),
    ('\uf164', ''),  # thumbs-up; votes come from "upvoted N times"
)

_ICON_ONLY = re.compile(r'^[\s👤]*$')
_LEADING_ICONS = re.compile(r'^[👤\s]+')
_USER_NOISE = re.compile(r'[|≡]')
_SELECTED_ANSWER = re.compile(r'Selected Answer:[ \t]*([A-F](?:[ \t,]*[A-F])*)\b', re.IGNORECASE)
_VOTES = re.compile(r'upvoted\s+(\d+)\s+times?$', re.IGNORECASE)


def clean_discussion(text: str) -> str:
    for glyph, replacement in _GLYPHS:
        text = text.replace(glyph, replacement)
    return text.strip()


def _has_badge(line: str) -> bool:
    return HIGHLY_VOTED in line or MOST_RECENT in line


def _clean_user(user: str) -> str:
    cleaned = _USER_NOISE.sub('', _LEADING_ICONS.sub('', user)).strip()
    return cleaned or ANONYMOUS


@dataclass
class _CommentDraft:
    user: str
    date: str
    is_highly_voted: bool = False
    is_most_recent: bool = False

    def finalize(self, body_lines: List[str]) -> Comment:
        content = '\n'.join(body_lines).strip()
        selected: Optional[str] = None
        votes: Optional[int] = None

        selected_match = _SELECTED_ANSWER.search(content)
        if selected_match:
            selected = selected_match.group(1).strip()
            content = _SELECTED_ANSWER.sub('', content, count=1).strip()

        vote_match = _VOTES.search(content)
        if vote_match:
            votes = int(vote_match.group(1))
            content = _VOTES.sub('', content, count=1).strip()

        return Comment(
            user=self.user,
            date=self.date,
            content=content,
            selected_answer=selected,
            vote_count=votes,
            is_highly_voted=self.is_highly_voted,
            is_most_recent=self.is_most_recent,
        )


class DiscussionScanner:
    """Single-pass scanner over discussion lines.

    ``pending_lines`` holds every line seen since the last timestamp and
    ``active`` is the comment whose timestamp was seen last. A timestamp line
    first reclaims the author/badge lines from ``pending_lines``; whatever is
    left is the body of ``active``.
    """

    def __init__(self, date_regex: Pattern[str]):
        self.date_regex = date_regex
        self.pending_lines: List[str] = []
        self.active: Optional[_CommentDraft] = None
        self.comments: List[Comment] = []

    def feed(self, raw_line: str) -> None:
        line = clean_discussion(raw_line)
        if not line:
            return
        match = self.date_regex.search(line)
        if not match:
            self.pending_lines.append(line)
            return
        self._start_comment(match.group(0), line[:match.start()].strip())

    def finish(self) -> List[Comment]:
        if self.active is not None:
            self.comments.append(self.active.finalize(self.pending_lines))
            self.active = None
            self.pending_lines = []
        return self.comments

    def _start_comment(self, date: str, prefix: str) -> None:
        draft = _CommentDraft(user=ANONYMOUS, date=date)
        if prefix:
            self._apply_badges(draft, prefix)
            user = prefix.replace(HIGHLY_VOTED, '').replace(MOST_RECENT, '')
        else:
            user = self._claim_author_lines(draft)

        while self.pending_lines and _ICON_ONLY.match(self.pending_lines[-1]):
            self.pending_lines.pop()
        draft.user = _clean_user(user)

        if self.active is not None:
            self.comments.append(self.active.finalize(self.pending_lines))
        self.active = draft
        self.pending_lines = []

    def _claim_author_lines(self, draft: _CommentDraft) -> str:
        if not self.pending_lines:
            return ''
        last = self.pending_lines.pop()
        if not _has_badge(last):
            return last
        self._apply_badges(draft, last)
        return self.pending_lines.pop() if self.pending_lines else ''

    @staticmethod
    def _apply_badges(draft: _CommentDraft, text: str) -> None:
        draft.is_highly_voted = HIGHLY_VOTED in text
        draft.is_most_recent = MOST_RECENT in text


def reconstruct_comments(text: str, date_regex: Optional[Pattern[str]]) -> List[Comment]:
    if date_regex is None or not text:
        return []
    scanner = DiscussionScanner(date_regex)
    for line in text.split('\n'):
        scanner.feed(line.strip())
    comments = scanner.finish()
    logger.debug("Reconstructed %d comments from discussion text", len(comments))
    return comments


__all__ = [
    'ANONYMOUS',
    'DiscussionScanner',
    'clean_discussion',
    'reconstruct_comments',
]
