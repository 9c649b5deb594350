import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .detector import analyze_sample
from .exceptions import QuizbankError
from .parser import ZERO_QUESTIONS_HINT, ExamParser
from .pdf_utils import read_document
from .suggest import TemplateSuggester
from .templates import BUILTIN_TEMPLATE, load_template

logger = logging.getLogger(__name__)


def _parse_inputs(values: List[str]) -> List[str]:
    inputs: List[str] = []
    supported_extensions = {'.pdf', '.txt'}

    for value in values:
        if value.startswith('@'):
            with open(value[1:], 'r', encoding='utf-8') as fh:
                inputs.extend([line.strip() for line in fh if line.strip()])
        else:
            path = Path(value)
            if path.is_dir():
                for ext in sorted(supported_extensions):
                    inputs.extend([str(p) for p in sorted(path.rglob(f'*{ext}'))])
            else:
                inputs.append(value)
    return inputs


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _read_sample(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    return Path(path).read_text(encoding='utf-8')


def _diagnostic(text: str) -> str:
    lines = [line.strip() for line in text.splitlines() if line.strip()][:5]
    sample = '\n'.join(f'- {line[:80]}' for line in lines) if lines else '- (no text)'
    return f"{ZERO_QUESTIONS_HINT}\n\nFirst lines of the document:\n{sample}"


def _cmd_parse(args: argparse.Namespace) -> int:
    template = load_template(args.template) if args.template else BUILTIN_TEMPLATE
    parser = ExamParser(template)
    inputs = _parse_inputs(args.input)
    if args.out:
        results = parser.process_inputs(inputs, args.out)
        print('Generated exam files:')
        for path in results:
            print(f' - {path}')
        return 0

    exit_code = 0
    for inp in inputs:
        text = read_document(inp, limit=parser.config.pdf_max_pages)
        exam = parser.parse(text, title=Path(inp).stem)
        if not exam.questions:
            print(_diagnostic(text), file=sys.stderr)
            exit_code = 1
        _print_json(exam.to_dict())
    return exit_code


def _cmd_analyze(args: argparse.Namespace) -> int:
    _print_json(analyze_sample(_read_sample(args.sample)).to_dict())
    return 0


def _cmd_suggest(args: argparse.Namespace) -> int:
    suggester = TemplateSuggester(model=args.model)
    if args.check:
        ok, message = suggester.test_connection()
        print(message)
        return 0 if ok else 1
    if not args.sample:
        raise QuizbankError('suggest requires a SAMPLE file unless --check is given')
    _print_json(suggester.suggest(_read_sample(args.sample)).to_dict())
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    template = load_template(args.template)
    print(f'Template "{template.name}" is valid.')
    return 0


def _cmd_builtin(_args: argparse.Namespace) -> int:
    _print_json(BUILTIN_TEMPLATE.to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Parse exam question banks into structured JSON using pattern templates.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable info-level logging output.')
    parser.add_argument('--debug', action='store_true', help='Enable debug-level logging output.')
    sub = parser.add_subparsers(dest='command', required=True)

    parse_cmd = sub.add_parser('parse', help='Parse PDF or text documents into exams.')
    parse_cmd.add_argument('input', nargs='+', help='Input files or directories. Use @file to read a list.')
    parse_cmd.add_argument('--template', '-t', help='Template JSON file; defaults to the builtin ExamTopics template.')
    parse_cmd.add_argument('--out', '-o', help='Output directory; one <name>.json per input plus index.json. Prints JSON when omitted.')
    parse_cmd.set_defaults(func=_cmd_parse)

    analyze_cmd = sub.add_parser('analyze', help='Suggest template patterns from a text sample using built-in heuristics.')
    analyze_cmd.add_argument('sample', help="Sample text file, or '-' for stdin.")
    analyze_cmd.set_defaults(func=_cmd_analyze)

    suggest_cmd = sub.add_parser('suggest', help='Ask a language model to suggest template patterns for a text sample.')
    suggest_cmd.add_argument('sample', nargs='?', help="Sample text file, or '-' for stdin.")
    suggest_cmd.add_argument('--model', '-m', help='Model name passed to the chat-completions endpoint.')
    suggest_cmd.add_argument('--check', action='store_true', help='Only test connectivity to the endpoint.')
    suggest_cmd.set_defaults(func=_cmd_suggest)

    validate_cmd = sub.add_parser('validate', help='Check that every pattern of a template compiles.')
    validate_cmd.add_argument('template', help='Template JSON file.')
    validate_cmd.set_defaults(func=_cmd_validate)

    builtin_cmd = sub.add_parser('builtin', help='Print the builtin template as JSON.')
    builtin_cmd.set_defaults(func=_cmd_builtin)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.WARNING
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format='[%(asctime)s] %(levelname)s %(name)s: %(message)s')

    try:
        return args.func(args)
    except QuizbankError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f'Error: {exc}', file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
