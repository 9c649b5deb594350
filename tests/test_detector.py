from quizbank.detector import MANUAL_INPUT_HINT, analyze_sample
from quizbank.patterns import validate_template


def test_examtopics_sample_is_recognized():
    sample = 'Question #7\nWhich option is right?\nA. first\nB. second\nCorrect Answer: A\n'
    result = analyze_sample(sample)
    assert result.has_discussion is False
    for attr in ('question_split_pattern', 'option_pattern', 'correct_answer_line_pattern'):
        assert getattr(result, attr)
        assert result.hints[attr].startswith('Detected')
        assert not result.needs_manual_input(attr)
    assert result.hints['explanation_pattern'] == MANUAL_INPUT_HINT
    assert result.needs_manual_input('explanation_pattern')


def test_chinese_sample_uses_chinese_families():
    sample = '第1题 下列哪项正确？\nA、甲\nB、乙\n答案：A\n解析：因为甲'
    result = analyze_sample(sample)
    assert '第' in result.question_split_pattern
    assert result.option_pattern == r'^([A-F])、\s*'
    assert '答案' in result.correct_answer_extract_pattern
    assert result.explanation_pattern.startswith('解')
    assert result.manual_fields == set()


def test_discussion_timestamps_enable_discussion():
    sample = 'Question #1\nA. x\nB. y\nCorrect Answer: B\nbob 2 months ago\nagree'
    result = analyze_sample(sample)
    assert result.has_discussion is True
    assert result.discussion_date_pattern


def test_unrecognized_sample_needs_manual_input():
    result = analyze_sample('')
    assert result.question_split_pattern is None
    assert result.needs_manual_input('question_number_pattern')
    assert result.needs_manual_input('correct_answer_extract_pattern')
    assert result.hints['option_pattern'] == MANUAL_INPUT_HINT
    assert result.to_dict()['hints']['questionSplitPattern'] == MANUAL_INPUT_HINT


def test_detected_template_parses_its_sample():
    sample = 'NEW QUESTION 3\nPick one\n(A) red\n(B) blue\nAnswer: B\n'
    template = analyze_sample(sample).to_template('detected')
    validate_template(template)
    assert template.option_pattern == r'^\(([A-F])\)\s+'
