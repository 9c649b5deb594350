import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List

from .models import Exam


def _natural_key(path: Path) -> List[Any]:
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r'(\d+)', path.as_posix())]


def render_exam(exam: Exam, out_path: str) -> None:
    os.makedirs(os.path.dirname(out_path) or '.', exist_ok=True)
    with open(out_path, 'w', encoding='utf-8') as fh:
        json.dump(exam.to_dict(), fh, ensure_ascii=False, indent=2)


def render_index(out_dir: str, index_path: str) -> None:
    """Summarize every exported exam under ``out_dir`` into one index file."""
    out_path = Path(out_dir)
    if not out_path.exists():
        raise FileNotFoundError(f"Output directory {out_dir} does not exist")

    index_file = Path(index_path).resolve()
    entries: List[Dict[str, Any]] = []
    for exam_file in sorted(out_path.rglob('*.json'), key=_natural_key):
        if exam_file.resolve() == index_file:
            continue
        with exam_file.open('r', encoding='utf-8') as fh:
            data = json.load(fh)
        if not isinstance(data, dict) or 'questions' not in data:
            continue
        entries.append({
            'file': exam_file.relative_to(out_path).as_posix(),
            'title': data.get('title', exam_file.stem),
            'questionCount': len(data.get('questions') or []),
        })

    Path(index_path).write_text(json.dumps({'exams': entries}, ensure_ascii=False, indent=2), encoding='utf-8')
