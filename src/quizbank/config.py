import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class LLMConfig:
    api_key: Optional[str] = os.getenv('QUIZBANK_LLM_API_KEY') or os.getenv('OPENROUTER_API_KEY')
    api_url: str = os.getenv('QUIZBANK_LLM_API_URL', 'https://openrouter.ai/api/v1/chat/completions')
    model: str = os.getenv('QUIZBANK_LLM_MODEL', 'deepseek/deepseek-chat')
    app_title: str = os.getenv('QUIZBANK_APP_TITLE', 'quizbank')
    request_timeout: int = int(os.getenv('QUIZBANK_LLM_TIMEOUT', '120'))
    max_retries: int = int(os.getenv('QUIZBANK_LLM_MAX_RETRIES', '3'))
    retry_backoff: float = float(os.getenv('QUIZBANK_LLM_RETRY_BACKOFF', '1.5'))


@dataclass(frozen=True)
class CacheConfig:
    root: str = os.getenv('QUIZBANK_CACHE_DIR', '.quizbank_cache')
    ttl_seconds: Optional[int] = field(default=None)
    pattern_cache_size: int = int(os.getenv('QUIZBANK_PATTERN_CACHE_SIZE', '64'))


@dataclass(frozen=True)
class ParserConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    workers: int = int(os.getenv('QUIZBANK_WORKERS', '4'))
    sample_chars: int = int(os.getenv('QUIZBANK_SAMPLE_CHARS', '6000'))
    pdf_max_pages: Optional[int] = int(os.environ['QUIZBANK_PDF_MAX_PAGES']) if os.getenv('QUIZBANK_PDF_MAX_PAGES') else None


def get_config() -> ParserConfig:
    return ParserConfig()
