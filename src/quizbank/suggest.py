from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from .config import ParserConfig, get_config
from .detector import MANUAL_INPUT_HINT
from .exceptions import SuggestionError
from .llm_client import LLMClient
from .models import PATTERN_FIELDS, REQUIRED_PATTERN_FIELDS, SuggestedTemplate, attr_from_wire, wire_key
from .patterns import FIELD_FLAGS, check_pattern

logger = logging.getLogger(__name__)

INVALID_PATTERN_HINT = '⚠ Invalid pattern, please fix manually: {pattern}'

SUGGEST_SYSTEM_PROMPT = (
    "You are a regular-expression expert. The user supplies sample text from an exam question bank. "
    "Work out its layout and return Python regular expressions for parsing it, as one JSON object with: "
    "questionSplitPattern (matches where each question starts), "
    "questionNumberPattern (applied to a question's first line; group 1 = number, group 2 = remaining text), "
    "optionPattern (matches an option line such as 'A. text'; group 1 = option letter), "
    "correctAnswerLinePattern (locates the line holding the correct answer), "
    "correctAnswerExtractPattern (group 1 = the answer letters), "
    "explanationPattern (group 1 = explanation text), "
    "hasDiscussion (boolean, whether the text contains a comment thread), "
    "discussionDatePattern (timestamp pattern that starts each comment, when hasDiscussion is true), "
    "hints (object mapping each field name to a short note). "
    "Return only the JSON object, without markdown fences or any other text."
)

SUGGEST_SCHEMA = (
    '{"questionSplitPattern":"string","questionNumberPattern":"string","optionPattern":"string",'
    '"correctAnswerLinePattern":"string","correctAnswerExtractPattern":"string",'
    '"explanationPattern":"string","hasDiscussion":false,"discussionDatePattern":"string",'
    '"hints":{"field":"string"}}'
)


def validate_suggestion(payload: Dict[str, Any]) -> SuggestedTemplate:
    """Keep every compilable pattern field of an external suggestion.

    Fields that fail to compile are cleared and flagged in ``hints`` so the
    rest of the suggestion stays usable.
    """
    result = SuggestedTemplate()
    raw_hints = payload.get('hints')
    if isinstance(raw_hints, dict):
        for key, value in raw_hints.items():
            if isinstance(value, str):
                result.hints[attr_from_wire(str(key))] = value

    for attr in PATTERN_FIELDS:
        value = payload.get(wire_key(attr), payload.get(attr))
        if not isinstance(value, str) or not value:
            if attr in REQUIRED_PATTERN_FIELDS:
                result.manual_fields.add(attr)
                result.hints.setdefault(attr, MANUAL_INPUT_HINT)
            continue
        error = check_pattern(value, FIELD_FLAGS[attr])
        if error:
            logger.warning("Suggested %s does not compile (%s): %s", wire_key(attr), error, value)
            result.hints[attr] = INVALID_PATTERN_HINT.format(pattern=value)
            result.manual_fields.add(attr)
            continue
        setattr(result, attr, value)

    discussion = payload.get(wire_key('has_discussion'), payload.get('has_discussion'))
    if isinstance(discussion, bool):
        result.has_discussion = discussion
    return result


class TemplateSuggester:
    def __init__(self, client: Optional[LLMClient] = None, config: Optional[ParserConfig] = None, *, model: Optional[str] = None):
        self.config = config or get_config()
        if client is None:
            try:
                client = LLMClient(self.config.llm)
            except RuntimeError as exc:
                raise SuggestionError(str(exc)) from exc
        self.client = client
        self.model = model

    def suggest(self, sample_text: str) -> SuggestedTemplate:
        sample = (sample_text or '').strip()[: self.config.sample_chars]
        prompt = (
            "Here is sample text from a question bank. Analyse it and return the regular "
            "expressions needed to parse it as JSON:\n\n" + sample
        )
        try:
            payload = self.client.generate_structured(
                prompt,
                model=self.model,
                schema_hint=SUGGEST_SCHEMA,
                system=SUGGEST_SYSTEM_PROMPT,
                temperature=0.0,
            )
        except (requests.RequestException, ValueError) as exc:
            raise SuggestionError(f'AI template suggestion failed: {exc}') from exc
        if not isinstance(payload, dict):
            raise SuggestionError(f'AI template suggestion returned {type(payload).__name__}, expected an object')
        return validate_suggestion(payload)

    def test_connection(self) -> Tuple[bool, str]:
        try:
            self.client.generate_text('Hello', model=self.model, max_tokens=5, use_cache=False)
        except requests.HTTPError as err:
            status = err.response.status_code if err.response is not None else '?'
            body = err.response.text[:200] if err.response is not None else ''
            return False, f'Connection failed ({status}): {body}'
        except requests.RequestException as exc:
            return False, f'Connection error: {exc}'
        return True, 'Connection succeeded'


__all__ = ['INVALID_PATTERN_HINT', 'TemplateSuggester', 'validate_suggestion']
