"""Template-driven exam question bank parser."""

from .detector import analyze_sample
from .exceptions import EmptyInputError, InvalidPatternError, ParseError
from .models import Comment, Exam, Option, Question, SuggestedTemplate, Template, UploadedFile
from .parser import ExamParser, parse, parse_document
from .patterns import validate_template
from .suggest import validate_suggestion
from .templates import BUILTIN_TEMPLATE

__all__ = [
    'BUILTIN_TEMPLATE',
    'Comment',
    'EmptyInputError',
    'Exam',
    'ExamParser',
    'InvalidPatternError',
    'Option',
    'ParseError',
    'Question',
    'SuggestedTemplate',
    'Template',
    'UploadedFile',
    'analyze_sample',
    'parse',
    'parse_document',
    'validate_suggestion',
    'validate_template',
]
