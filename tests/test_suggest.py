import pytest  # type: ignore[import]
import requests

from quizbank.config import LLMConfig, ParserConfig
from quizbank.exceptions import SuggestionError
from quizbank.llm_client import ChatReply, LLMClient, chat_endpoint, parse_json_object
from quizbank.suggest import INVALID_PATTERN_HINT, TemplateSuggester, validate_suggestion


class DummyClient:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.captured_prompts = []

    def generate_structured(self, prompt, *_, **__):
        self.captured_prompts.append(prompt)
        if self.error:
            raise self.error
        return self.payload

    def generate_text(self, prompt, *_, **__):
        self.captured_prompts.append(prompt)
        if self.error:
            raise self.error
        return type('obj', (), {'text': 'Hi'})


GOOD_PAYLOAD = {
    'questionSplitPattern': r'(?:^|\n)Question\s*#?\d+',
    'questionNumberPattern': r'Question\s*#?(\d+)\s*(.*)$',
    'optionPattern': r'^([A-F])\.\s+',
    'correctAnswerLinePattern': r'Correct Answer:',
    'correctAnswerExtractPattern': r'Correct Answer:\s*([A-F]+)',
    'hasDiscussion': False,
    'hints': {'optionPattern': 'Lettered options'},
}


def test_valid_suggestion_is_kept():
    result = validate_suggestion(GOOD_PAYLOAD)
    assert result.option_pattern == r'^([A-F])\.\s+'
    assert result.has_discussion is False
    assert result.hints['option_pattern'] == 'Lettered options'
    assert result.manual_fields == set()
    assert result.to_template('ai').name == 'ai'


def test_invalid_pattern_is_cleared_with_hint():
    payload = dict(GOOD_PAYLOAD, optionPattern='([A-F', hasDiscussion='yes')
    result = validate_suggestion(payload)
    assert result.option_pattern is None
    assert result.hints['option_pattern'] == INVALID_PATTERN_HINT.format(pattern='([A-F')
    assert result.needs_manual_input('option_pattern')
    assert result.question_split_pattern == GOOD_PAYLOAD['questionSplitPattern']
    assert result.has_discussion is None


def test_missing_required_field_needs_manual_input():
    payload = {k: v for k, v in GOOD_PAYLOAD.items() if k != 'correctAnswerLinePattern'}
    result = validate_suggestion(payload)
    assert result.needs_manual_input('correct_answer_line_pattern')
    assert not result.needs_manual_input('explanation_pattern')


def test_suggester_truncates_sample_and_validates():
    client = DummyClient(payload=GOOD_PAYLOAD)
    suggester = TemplateSuggester(client=client, config=ParserConfig(sample_chars=10))
    result = suggester.suggest('Question #1 ' + 'x' * 100)
    assert result.option_pattern == GOOD_PAYLOAD['optionPattern']
    assert client.captured_prompts[0].endswith('Question #')


@pytest.mark.parametrize('client', [
    DummyClient(error=ValueError('LLM response is not valid JSON')),
    DummyClient(error=requests.ConnectionError('down')),
    DummyClient(payload=['not', 'an', 'object']),
])
def test_suggester_failures_raise_suggestion_error(client):
    with pytest.raises(SuggestionError):
        TemplateSuggester(client=client, config=ParserConfig()).suggest('Question #1')


def test_connection_check_reports_outcome():
    ok, message = TemplateSuggester(client=DummyClient(), config=ParserConfig()).test_connection()
    assert ok and message == 'Connection succeeded'

    failing = TemplateSuggester(client=DummyClient(error=requests.ConnectionError('refused')), config=ParserConfig())
    ok, message = failing.test_connection()
    assert not ok
    assert 'refused' in message


def test_llm_client_helpers():
    assert chat_endpoint('https://api.example.com/v1/') == 'https://api.example.com/v1/chat/completions'
    assert chat_endpoint('https://api.example.com/v1/chat') == 'https://api.example.com/v1/chat/completions'
    assert chat_endpoint(None).endswith('/chat/completions')
    assert parse_json_object('```json\n{"a": 1}\n```') == {'a': 1}
    assert parse_json_object('no json here') is None


def test_chat_reply_reads_message_and_usage():
    reply = ChatReply.from_response({
        'choices': [{'message': {'content': [{'type': 'text', 'text': '{"ok": true}'}]}}],
        'usage': {'prompt_tokens': 12, 'completion_tokens': 3},
    })
    assert reply.text == '{"ok": true}'
    assert reply.usage == {'prompt_tokens': 12, 'completion_tokens': 3}


class FakeResponse:
    def __init__(self, status, data=None):
        self.status_code = status
        self.data = data or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error', response=self)

    def json(self):
        return self.data


def test_client_retries_rate_limits_and_caches(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr('quizbank.llm_client.time.sleep', lambda _delay: None)
    body = {'choices': [{'message': {'content': '{"optionPattern": "^([A-F])\\\\.\\\\s+"}'}}]}
    responses = [FakeResponse(429), FakeResponse(200, body)]
    sent = []

    client = LLMClient(LLMConfig(api_key='test-key', max_retries=3))

    def fake_post(url, json=None, timeout=None):
        sent.append(json)
        return responses.pop(0)

    monkeypatch.setattr(client.session, 'post', fake_post)
    assert client.generate_structured('sample') == {'optionPattern': '^([A-F])\\.\\s+'}
    assert len(sent) == 2
    assert sent[0]['response_format'] == {'type': 'json_object'}
    assert client.session.headers['Authorization'] == 'Bearer test-key'

    # identical request is served from the disk cache
    assert client.generate_structured('sample') == {'optionPattern': '^([A-F])\\.\\s+'}
    assert len(sent) == 2


def test_client_gives_up_on_other_http_errors(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    client = LLMClient(LLMConfig(api_key='test-key'))
    monkeypatch.setattr(client.session, 'post', lambda *_args, **_kwargs: FakeResponse(401))
    with pytest.raises(requests.HTTPError):
        client.generate_text('Hello', use_cache=False)


def test_missing_api_key_is_a_suggestion_error():
    config = ParserConfig(llm=LLMConfig(api_key=None))
    with pytest.raises(SuggestionError):
        TemplateSuggester(config=config)
