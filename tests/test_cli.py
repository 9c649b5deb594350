import json

from quizbank.cli import main
from quizbank.parser import ZERO_QUESTIONS_HINT


def test_builtin_prints_template(capsys):
    assert main(['builtin']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['isBuiltin'] is True


def test_parse_prints_exam_json(tmp_path, capsys, exam_text):
    source = tmp_path / 'exam.txt'
    source.write_text(exam_text, encoding='utf-8')
    assert main(['parse', str(source)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['title'] == 'exam'
    assert len(data['questions']) == 3


def test_parse_reports_zero_questions(tmp_path, capsys):
    source = tmp_path / 'notes.txt'
    source.write_text('Meeting notes\nNothing here', encoding='utf-8')
    assert main(['parse', str(source)]) == 1
    captured = capsys.readouterr()
    assert ZERO_QUESTIONS_HINT in captured.err
    assert '- Meeting notes' in captured.err


def test_analyze_reads_sample(tmp_path, capsys):
    sample = tmp_path / 'sample.txt'
    sample.write_text('Question #7\nA. one\nB. two\nCorrect Answer: A', encoding='utf-8')
    assert main(['analyze', str(sample)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['hasDiscussion'] is False
    assert data['optionPattern']


def test_validate_rejects_bad_template(tmp_path, capsys):
    bad = tmp_path / 'bad.json'
    data = {
        'name': 'bad',
        'questionSplitPattern': 'Q\\d+',
        'questionNumberPattern': 'Q(\\d+)',
        'optionPattern': '([A-F',
        'correctAnswerLinePattern': 'Answer:',
        'correctAnswerExtractPattern': 'Answer:\\s*([A-F]+)',
    }
    bad.write_text(json.dumps(data), encoding='utf-8')
    assert main(['validate', str(bad)]) == 2
    assert 'optionPattern' in capsys.readouterr().err


def test_parse_rejects_unsupported_document(tmp_path, capsys):
    source = tmp_path / 'notes.docx'
    source.write_bytes(b'PK\x03\x04')
    assert main(['parse', str(source)]) == 2
    assert 'Unsupported input type' in capsys.readouterr().err
