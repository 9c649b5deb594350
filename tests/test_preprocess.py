import re

from quizbank.preprocess import clean_line, normalize_text
from quizbank.segmenter import split_blocks, split_paragraphs


def test_clean_line_strips_urls_and_whitespace():
    assert clean_line('  Visit https://example.com/page?id=1  ') == 'Visit'
    assert clean_line('   ') == ''


def test_normalize_text_unifies_line_endings_and_drops_blank_lines():
    raw = 'Question #1\r\n\r\nText\rA. one\n   \nhttp://only.example\n'
    assert normalize_text(raw) == 'Question #1\nText\nA. one'


def test_normalize_text_is_idempotent(exam_text):
    once = normalize_text(exam_text)
    assert normalize_text(once) == once


def test_split_blocks_starts_each_block_at_a_match():
    text = 'preamble\nQ1 first\nbody\nQ2 second'
    blocks = split_blocks(text, re.compile(r'(?:^|\n)Q\d'))
    assert blocks == ['Q1 first\nbody', 'Q2 second']


def test_split_blocks_falls_back_to_paragraphs():
    text = 'one\ntwo\n\nthree'
    assert split_blocks(text, re.compile('never-matches')) == ['one\ntwo', 'three']
    assert split_blocks(text, None) == split_paragraphs(text)


def test_paragraph_fallback_is_stable_when_rejoined():
    text = 'first\nblock\n\n\nsecond block\n\nthird'
    blocks = split_blocks(text, None)
    assert len(split_blocks('\n\n'.join(blocks), None)) == len(blocks) == 3
