from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .exceptions import InvalidPatternError, InvalidUploadError

OPTION_LABELS = 'ABCDEF'

# snake_case attribute -> camelCase wire key
_TEMPLATE_KEYS: Dict[str, str] = {
    'name': 'name',
    'is_builtin': 'isBuiltin',
    'question_split_pattern': 'questionSplitPattern',
    'question_number_pattern': 'questionNumberPattern',
    'option_pattern': 'optionPattern',
    'correct_answer_line_pattern': 'correctAnswerLinePattern',
    'correct_answer_extract_pattern': 'correctAnswerExtractPattern',
    'explanation_pattern': 'explanationPattern',
    'has_discussion': 'hasDiscussion',
    'discussion_date_pattern': 'discussionDatePattern',
}

PATTERN_FIELDS: Tuple[str, ...] = (
    'question_split_pattern',
    'question_number_pattern',
    'option_pattern',
    'correct_answer_line_pattern',
    'correct_answer_extract_pattern',
    'explanation_pattern',
    'discussion_date_pattern',
)

REQUIRED_PATTERN_FIELDS: Tuple[str, ...] = PATTERN_FIELDS[:5]


def wire_key(attr: str) -> str:
    return _TEMPLATE_KEYS.get(attr, attr)


def attr_from_wire(key: str) -> str:
    for attr, camel in _TEMPLATE_KEYS.items():
        if camel == key:
            return attr
    return key


def _read_key(data: Dict[str, Any], attr: str) -> Any:
    camel = _TEMPLATE_KEYS[attr]
    if camel in data:
        return data[camel]
    return data.get(attr)


@dataclass(frozen=True)
class Template:
    name: str
    question_split_pattern: str
    question_number_pattern: str
    option_pattern: str
    correct_answer_line_pattern: str
    correct_answer_extract_pattern: str
    explanation_pattern: Optional[str] = None
    has_discussion: bool = False
    discussion_date_pattern: Optional[str] = None
    is_builtin: bool = False

    def pattern_fields(self) -> Iterator[Tuple[str, Optional[str]]]:
        for attr in PATTERN_FIELDS:
            yield attr, getattr(self, attr)

    def fingerprint(self) -> str:
        parts = [self.name, str(self.is_builtin), str(self.has_discussion)]
        parts.extend(value or '' for _, value in self.pattern_fields())
        return hashlib.sha256('\x1f'.join(parts).encode('utf-8')).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {wire_key(f.name): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Template':
        missing = [attr for attr in REQUIRED_PATTERN_FIELDS if not _read_key(data, attr)]
        if missing:
            raise InvalidPatternError(wire_key(missing[0]), None, 'required field is empty')
        return cls(
            name=str(_read_key(data, 'name') or 'Untitled template'),
            question_split_pattern=_read_key(data, 'question_split_pattern'),
            question_number_pattern=_read_key(data, 'question_number_pattern'),
            option_pattern=_read_key(data, 'option_pattern'),
            correct_answer_line_pattern=_read_key(data, 'correct_answer_line_pattern'),
            correct_answer_extract_pattern=_read_key(data, 'correct_answer_extract_pattern'),
            explanation_pattern=_read_key(data, 'explanation_pattern') or None,
            has_discussion=bool(_read_key(data, 'has_discussion')),
            discussion_date_pattern=_read_key(data, 'discussion_date_pattern') or None,
            is_builtin=bool(_read_key(data, 'is_builtin')),
        )


@dataclass
class Option:
    label: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'label': self.label, 'text': self.text}


@dataclass
class Comment:
    user: str
    date: str
    content: str
    selected_answer: Optional[str] = None
    vote_count: Optional[int] = None
    is_highly_voted: bool = False
    is_most_recent: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'user': self.user,
            'date': self.date,
            'content': self.content,
            'isHighlyVoted': self.is_highly_voted,
            'isMostRecent': self.is_most_recent,
        }
        if self.selected_answer is not None:
            data['selectedAnswer'] = self.selected_answer
        if self.vote_count is not None:
            data['voteCount'] = self.vote_count
        return data


@dataclass
class Question:
    number: Optional[int]
    text: str
    options: List[Option] = field(default_factory=list)
    correct_answers: List[str] = field(default_factory=list)
    explanation: Optional[str] = None
    discussion: Optional[str] = None
    comments: Optional[List[Comment]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'number': self.number,
            'text': self.text,
            'options': [option.to_dict() for option in self.options],
            'correctAnswers': list(self.correct_answers),
        }
        if self.explanation is not None:
            data['explanation'] = self.explanation
        if self.discussion is not None:
            data['discussion'] = self.discussion
        if self.comments is not None:
            data['comments'] = [comment.to_dict() for comment in self.comments]
        return data


@dataclass
class Exam:
    title: str
    questions: List[Question] = field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def to_dict(self) -> Dict[str, Any]:
        return {'title': self.title, 'questions': [q.to_dict() for q in self.questions]}


@dataclass
class SuggestedTemplate:
    """Best-effort template draft produced from a text sample.

    Fields that could not be determined stay ``None`` and are listed in
    ``manual_fields``; ``hints`` carries a human-readable note per field.
    """

    question_split_pattern: Optional[str] = None
    question_number_pattern: Optional[str] = None
    option_pattern: Optional[str] = None
    correct_answer_line_pattern: Optional[str] = None
    correct_answer_extract_pattern: Optional[str] = None
    explanation_pattern: Optional[str] = None
    has_discussion: Optional[bool] = None
    discussion_date_pattern: Optional[str] = None
    hints: Dict[str, str] = field(default_factory=dict)
    manual_fields: Set[str] = field(default_factory=set)

    def needs_manual_input(self, attr: str) -> bool:
        return attr in self.manual_fields

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for attr in PATTERN_FIELDS + ('has_discussion',):
            value = getattr(self, attr)
            if value is not None:
                data[wire_key(attr)] = value
        data['hints'] = {wire_key(key): value for key, value in self.hints.items()}
        return data

    def to_template(self, name: str) -> Template:
        payload: Dict[str, Any] = {attr: getattr(self, attr) for attr in PATTERN_FIELDS}
        payload['name'] = name
        payload['has_discussion'] = bool(self.has_discussion)
        return Template.from_dict(payload)


@dataclass(frozen=True)
class UploadedFile:
    buffer: bytes
    original_name: str

    @property
    def stem(self) -> str:
        return Path(self.original_name).stem

    @classmethod
    def coerce(cls, value: Any) -> 'UploadedFile':
        if isinstance(value, cls):
            candidate = value
        else:
            buffer = getattr(value, 'buffer', None)
            name = getattr(value, 'original_name', None) or getattr(value, 'originalname', None)
            if isinstance(value, dict):
                buffer = value.get('buffer')
                name = value.get('original_name') or value.get('originalname')
            if not isinstance(buffer, (bytes, bytearray)) or not isinstance(name, str):
                raise InvalidUploadError('Uploaded file is empty or malformed')
            candidate = cls(buffer=bytes(buffer), original_name=name)
        if not candidate.buffer:
            raise InvalidUploadError('Uploaded file is empty')
        return candidate


__all__ = [
    'OPTION_LABELS',
    'PATTERN_FIELDS',
    'REQUIRED_PATTERN_FIELDS',
    'Template',
    'Option',
    'Comment',
    'Question',
    'Exam',
    'SuggestedTemplate',
    'UploadedFile',
    'attr_from_wire',
    'wire_key',
]
