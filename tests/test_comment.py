import pytest

import rmsp
from rmsp import stripLineComments


def runPass(processor, lines):
    env = rmsp.ProcessEnvironment()
    env.sourceLines = [{'cursor': i, 'line': line} for i, line in enumerate(lines)]
    env.nextLines = []
    processor(env)
    return [sourceLine['line'] for sourceLine in env.nextLines]


def test_strip_empty_keeps_depth():
    for depth in range(50):
        assert stripLineComments('', depth) == ('', depth)


def test_strip_no_comments():
    assert stripLineComments('Hello, World!', 0) == ('Hello, World!', 0)


@pytest.mark.parametrize('depth', [1, 2, 7])
def test_strip_inside_comment(depth):
    assert stripLineComments('Hello, World!', depth) == ('', depth)


def test_strip_comment_start():
    assert stripLineComments('a /* b', 0) == ('a ', 1)


def test_strip_nested_start():
    assert stripLineComments('a /* b', 1) == ('', 2)


def test_strip_entire_line():
    assert stripLineComments('/* this is a comment */', 0) == ('', 0)


def test_strip_balanced_pairs_keeps_surrounding_text():
    text = 'base_size 5 /* small */ land_percent 10 /* x */ zone 1'
    assert stripLineComments(text, 0) == ('base_size 5  land_percent 10  zone 1', 0)


def test_strip_nested_on_one_line():
    assert stripLineComments('a /* b /* c */ d */ e', 0) == ('a  e', 0)


def test_strip_close_ends_comment_from_previous_line():
    assert stripLineComments('still comment */ code', 1) == (' code', 0)


def test_unbalanced_close_is_literal():
    assert stripLineComments('a */ b', 0) == ('a */ b', 0)


def test_unbalanced_close_then_comment():
    assert stripLineComments('a */ b /* c */ d', 0) == ('a */ b  d', 0)


def test_comment_pass_carries_depth_across_lines():
    lines = [
        'create_land {',
        '/* outer',
        'terrain_type GRASS',
        '/* inner */',
        'still outer */ land_percent 10',
        '}',
    ]
    assert runPass(rmsp.TokenComment.process, lines) == [
        'create_land {',
        '',
        '',
        '',
        ' land_percent 10',
        '}',
    ]


def test_comment_pass_keeps_cursor():
    env = rmsp.ProcessEnvironment()
    env.sourceLines = [{'cursor': 4, 'line': 'a /* b */'}]
    env.nextLines = []
    rmsp.TokenComment.process(env)
    assert env.nextLines == [{'cursor': 4, 'line': 'a '}]


def test_whitespace_condense():
    assert rmsp.condenseLineWhitespace('  land_position   5 \t 5  ') == 'land_position 5 5'
    assert rmsp.condenseLineWhitespace(' \t  ') == ''


@pytest.mark.parametrize('line', ['a', 'create_land {', 'land_position 5 5', '#REPEAT(2)'])
def test_whitespace_condense_idempotent(line):
    condensed = rmsp.condenseLineWhitespace(line)
    assert condensed == line
    assert rmsp.condenseLineWhitespace(condensed) == condensed


def test_whitespace_pass_drops_blank_lines():
    lines = ['  a  b ', '', '   ', '\tc']
    assert runPass(rmsp.TokenWhitespace.process, lines) == ['a b', 'c']
