import re

from quizbank.discussion import ANONYMOUS, DiscussionScanner, clean_discussion, reconstruct_comments
from quizbank.templates import DISCUSSION_DATE_PATTERN

DATE_RE = re.compile(DISCUSSION_DATE_PATTERN, re.IGNORECASE)


def test_one_comment_per_timestamp():
    text = '\n'.join([
        'user1 Highly Voted 2 years, 1 month ago',
        'Selected Answer: BC',
        'Both are needed',
        'upvoted 12 times',
        'bob 1 year ago',
        'Agree',
        'carol 3 weeks ago',
    ])
    comments = reconstruct_comments(text, DATE_RE)
    assert len(comments) == 3
    first = comments[0]
    assert first.user == 'user1'
    assert first.date == '2 years, 1 month ago'
    assert first.selected_answer == 'BC'
    assert first.vote_count == 12
    assert first.content == 'Both are needed'
    assert first.is_highly_voted and not first.is_most_recent
    assert comments[1].content == 'Agree'
    assert comments[1].selected_answer is None
    assert comments[1].vote_count is None
    assert comments[2].content == ''


def test_selected_answer_stays_on_its_line():
    text = 'bob 1 year ago\nSelected Answer: C\nC is correct because of S3\nupvoted 4 times'
    comment = reconstruct_comments(text, DATE_RE)[0]
    assert comment.selected_answer == 'C'
    assert comment.content == 'C is correct because of S3'
    assert comment.vote_count == 4

    text = 'amy 2 days ago\nSelected Answer: D\na bucket policy is needed'
    comment = reconstruct_comments(text, DATE_RE)[0]
    assert comment.selected_answer == 'D'
    assert comment.content == 'a bucket policy is needed'


def test_author_and_badge_on_preceding_lines():
    text = 'intro line\nalice\nMost Recent\n3 days ago\nSelected Answer: D\nupvoted 1 time'
    comments = reconstruct_comments(text, DATE_RE)
    assert len(comments) == 1
    comment = comments[0]
    assert comment.user == 'alice'
    assert comment.is_most_recent
    assert comment.selected_answer == 'D'
    assert comment.vote_count == 1
    assert comment.content == ''


def test_timestamp_without_author_is_anonymous():
    comments = reconstruct_comments('1 day ago\nhello', DATE_RE)
    assert comments[0].user == ANONYMOUS
    assert comments[0].content == 'hello'


def test_icon_glyphs_are_cleaned_from_users_and_bodies():
    text = 'erin 4 days ago\nnice\n\uf007\n\uf007 frank | 2 days ago\nok'
    comments = reconstruct_comments(text, DATE_RE)
    assert [c.user for c in comments] == ['erin', 'frank']
    assert comments[0].content == 'nice'
    assert comments[1].content == 'ok'


def test_clean_discussion_replaces_private_glyphs():
    assert clean_discussion('\uf147\uf086thread \uf0a3item\uf164') == '💬 thread • item'


def test_scanner_can_be_fed_incrementally():
    scanner = DiscussionScanner(DATE_RE)
    for line in ['dan 5 hours ago', 'first', 'second']:
        scanner.feed(line)
    assert scanner.active is not None
    assert scanner.pending_lines == ['first', 'second']
    comments = scanner.finish()
    assert comments[0].content == 'first\nsecond'
    assert scanner.active is None


def test_no_date_pattern_means_no_comments():
    assert reconstruct_comments('bob 1 year ago\nhi', None) == []
    assert reconstruct_comments('no timestamps here', DATE_RE) == []
