from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .cache import DiskCache
from .config import LLMConfig, get_config

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'https://openrouter.ai/api/v1/chat/completions'
_FENCE = '```'


def chat_endpoint(url: Optional[str]) -> str:
    """Accept a base URL, a ``/chat`` URL or a full chat-completions URL."""
    url = (url or DEFAULT_ENDPOINT).strip().strip("'\"").rstrip('/')
    if url.endswith('/chat/completions'):
        return url
    if url.endswith('/chat'):
        return f'{url}/completions'
    return f'{url}/chat/completions'


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Pull the outermost JSON object out of a model reply, fenced or not."""
    body = (text or '').strip()
    if body.startswith(_FENCE):
        body = body.split('\n', 1)[-1]
        if body.rstrip().endswith(_FENCE):
            body = body.rstrip()[:-len(_FENCE)]
    start, end = body.find('{'), body.rfind('}')
    if start == -1 or end <= start:
        return None
    try:
        value = json.loads(body[start:end + 1])
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


@dataclass
class ChatReply:
    text: str
    raw: Dict[str, Any]
    usage: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'ChatReply':
        usage = {
            key: int(value)
            for key, value in (data.get('usage') or {}).items()
            if isinstance(value, (int, float))
        }
        return cls(text=_message_text(data), raw=data, usage=usage)


def _message_text(data: Dict[str, Any]) -> str:
    choices = data.get('choices') or []
    if not choices or not isinstance(choices[0], dict):
        return ''
    content = (choices[0].get('message') or {}).get('content')
    if isinstance(content, list):
        return ''.join(part.get('text', '') for part in content if isinstance(part, dict))
    return content if isinstance(content, str) else choices[0].get('text', '')


class LLMClient:
    """Chat-completions client used to ask a model for template patterns.

    Replies are cached on disk by request payload. Rate limits (HTTP 429) and
    network errors are retried with exponential backoff; other HTTP errors
    propagate to the caller.
    """

    def __init__(self, config: Optional[LLMConfig] = None, *, api_url: Optional[str] = None, api_key: Optional[str] = None, model: Optional[str] = None):
        cfg = config or get_config().llm
        api_key = api_key or cfg.api_key
        if not api_key:
            raise RuntimeError("QUIZBANK_LLM_API_KEY is not set in environment or .env")
        self.api_url = chat_endpoint(api_url or cfg.api_url)
        self.model = model or cfg.model
        self.timeout = cfg.request_timeout
        self.max_retries = max(1, cfg.max_retries)
        self.backoff = cfg.retry_backoff
        self.cache = DiskCache('llm')
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })
        if cfg.app_title:
            self.session.headers['X-Title'] = cfg.app_title

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        delay = 1.0
        for attempt in range(1, self.max_retries + 1):
            last_attempt = attempt == self.max_retries
            try:
                response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
            except requests.HTTPError as err:
                status = err.response.status_code if err.response is not None else None
                if status != 429 or last_attempt:
                    raise
                logger.info("Rate limited by %s; retrying in %.1fs", self.api_url, delay)
            except requests.RequestException as exc:
                if last_attempt:
                    raise
                logger.info("Request to %s failed (%s); retrying in %.1fs", self.api_url, exc, delay)
            time.sleep(delay)
            delay *= self.backoff
        raise RuntimeError('unreachable: retry loop exited without a response')

    def _complete(self, payload: Dict[str, Any], use_cache: bool) -> ChatReply:
        key = DiskCache.make_key(json.dumps(payload, sort_keys=True, ensure_ascii=False)) if use_cache else None
        if key:
            cached = self.cache.load(key)
            if isinstance(cached, dict):
                logger.debug("Using cached reply %s", key[:12])
                return ChatReply.from_response(cached)
        data = self._post(payload)
        if key:
            self.cache.save(key, data)
        return ChatReply.from_response(data)

    def generate_text(self, prompt: str, *, model: Optional[str] = None, max_tokens: int = 800, temperature: float = 0.2, system: Optional[str] = None, json_mode: bool = False, use_cache: bool = True) -> ChatReply:
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({'role': 'system', 'content': system})
        messages.append({'role': 'user', 'content': prompt})
        payload: Dict[str, Any] = {
            'model': model or self.model,
            'messages': messages,
            'max_tokens': max_tokens,
            'temperature': temperature,
        }
        if json_mode:
            payload['response_format'] = {'type': 'json_object'}
        return self._complete(payload, use_cache)

    def generate_structured(self, prompt: str, *, model: Optional[str] = None, schema_hint: Optional[str] = None, system: Optional[str] = None, temperature: float = 0.0, max_tokens: int = 1200) -> Dict[str, Any]:
        if schema_hint:
            prompt = f"{prompt}\n\nReturn strictly one JSON object with schema: {schema_hint}."
        reply = self.generate_text(prompt, model=model, max_tokens=max_tokens, temperature=temperature, system=system, json_mode=True)
        parsed = parse_json_object(reply.text)
        if parsed is None:
            raise ValueError('LLM response is not a JSON object. Received: %s' % reply.text[:200])
        return parsed


__all__ = ['ChatReply', 'LLMClient', 'chat_endpoint', 'parse_json_object']
