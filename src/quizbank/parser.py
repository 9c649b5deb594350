from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .blocks import parse_block
from .config import ParserConfig, get_config
from .exceptions import EmptyInputError, UnsupportedDocumentError
from .export import render_exam, render_index
from .models import Exam, Question, Template, UploadedFile
from .patterns import get_compiled
from .pdf_utils import extract_text, is_text_pdf, read_document
from .preprocess import normalize_text
from .segmenter import split_blocks
from .templates import BUILTIN_TEMPLATE

logger = logging.getLogger(__name__)

ZERO_QUESTIONS_HINT = (
    "No questions were recognized. Verify that the selected template matches "
    "the document format (question header, option and answer line patterns)."
)


class ExamParser:
    def __init__(self, template: Optional[Template] = None, config: Optional[ParserConfig] = None):
        self.config = config or get_config()
        self.template = template or BUILTIN_TEMPLATE
        self.concurrency = max(1, self.config.workers)
        self._out_dir: Optional[Path] = None
        self._rendered_rel_paths: List[str] = []
        self._render_lock = threading.Lock()

    # region text ----------------------------------------------------------------------------------
    def parse(self, raw_text: str, template: Optional[Template] = None, *, title: str = '') -> Exam:
        template = template or self.template
        normalized = normalize_text(raw_text)
        if not normalized:
            raise EmptyInputError('No extractable text found in the document')

        compiled = get_compiled(template)
        blocks = split_blocks(normalized, compiled.split)
        logger.info("Split %r into %d block(s) using template %r", title or 'document', len(blocks), template.name)

        questions: List[Question] = []
        for block in blocks:
            question = parse_block(block, compiled)
            if question is not None:
                questions.append(question)

        dropped = len(blocks) - len(questions)
        if dropped:
            logger.debug("Skipped %d unparseable block(s)", dropped)
        if not questions:
            logger.warning("%s (template %r)", ZERO_QUESTIONS_HINT, template.name)
        return Exam(title=title, questions=questions)

    def parse_document(self, upload: Any, template: Optional[Template] = None) -> Exam:
        document = UploadedFile.coerce(upload)
        text = extract_text(document.buffer, limit=self.config.pdf_max_pages)
        if not text.strip():
            raise EmptyInputError(f'No text could be extracted from {document.original_name}')
        return self.parse(text, template, title=document.stem)

    def parse_many(self, documents: Sequence[Tuple[str, str]], template: Optional[Template] = None) -> List[Exam]:
        """Parse ``(title, raw_text)`` pairs concurrently, keeping input order."""
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            futures = [pool.submit(self.parse, text, template, title=title) for title, text in documents]
            return [future.result() for future in futures]

    # endregion ------------------------------------------------------------------------------------

    # region files ---------------------------------------------------------------------------------
    def parse_file(self, path: str, template: Optional[Template] = None) -> Exam:
        source = Path(path)
        logger.info("Parsing %s", source)
        if source.suffix.lower() == '.pdf' and not is_text_pdf(str(source)):
            logger.warning("%s looks like a scanned PDF; only embedded text is parsed", source)
        return self.parse(read_document(source, limit=self.config.pdf_max_pages), template, title=source.stem)

    def _reset_render_state(self, out_dir: Path) -> None:
        self._out_dir = out_dir
        self._out_dir.mkdir(parents=True, exist_ok=True)
        self._rendered_rel_paths = []

    def _render(self, exam: Exam, stem: str) -> str:
        with self._render_lock:
            out_path = self._out_dir / f"{stem}.json"
            render_exam(exam, str(out_path))
            self._rendered_rel_paths.append(out_path.relative_to(self._out_dir).as_posix())
            return str(out_path)

    def _write_index(self) -> str:
        index_path = self._out_dir / 'index.json'
        render_index(str(self._out_dir), str(index_path))
        return str(index_path)

    def process_inputs(self, inputs: List[str], out_dir: str, template: Optional[Template] = None) -> List[str]:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.process_inputs_async(inputs, out_dir, template))
        else:
            raise RuntimeError('process_inputs cannot be used when an event loop is running; use await process_inputs_async instead.')

    async def process_inputs_async(self, inputs: List[str], out_dir: str, template: Optional[Template] = None) -> List[str]:
        self._reset_render_state(Path(out_dir))
        semaphore = asyncio.Semaphore(self.concurrency)

        async def dispatch(inp: str) -> List[str]:
            async with semaphore:
                return await asyncio.to_thread(self._process_and_render_input, inp, template)

        tasks = [asyncio.create_task(dispatch(inp)) for inp in inputs]
        generated_paths: List[str] = []
        for task in asyncio.as_completed(tasks):
            generated_paths.extend(await task)

        index_path = self._write_index()
        generated_paths.append(index_path)
        logger.info("Rendered %d exam(s) to %s", len(self._rendered_rel_paths), out_dir)
        return generated_paths

    def _process_and_render_input(self, inp: str, template: Optional[Template]) -> List[str]:
        inp = inp.strip()
        if not inp:
            logger.warning("Skipping empty input entry")
            return []
        try:
            exam = self.parse_file(inp, template)
        except (EmptyInputError, UnsupportedDocumentError) as exc:
            logger.error("Skipping %s: %s", inp, exc)
            return []
        return [self._render(exam, Path(inp).stem)]

    # endregion ------------------------------------------------------------------------------------


def parse(raw_text: str, template: Optional[Template] = None, *, title: str = '') -> Exam:
    return ExamParser(template).parse(raw_text, title=title)


def parse_document(upload: Any, template: Optional[Template] = None) -> Exam:
    return ExamParser(template).parse_document(upload)


__all__ = ['ExamParser', 'ZERO_QUESTIONS_HINT', 'parse', 'parse_document']
