import re

_URL_PATTERN = re.compile(r'https?://\S+')


def clean_line(line: str) -> str:
    trimmed = line.strip()
    if not trimmed:
        return ''
    return _URL_PATTERN.sub('', trimmed).strip()


def normalize_text(raw: str) -> str:
    """Unify line endings, drop URLs and blank lines."""
    text = (raw or '').replace('\r\n', '\n').replace('\r', '\n')
    lines = (clean_line(line) for line in text.split('\n'))
    return '\n'.join(line for line in lines if line)
