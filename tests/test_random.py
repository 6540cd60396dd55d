import pytest

import rmsp
from rmsp import nextLabel, probs, probDefinitions, probConditional


def extract(lines):
    env = rmsp.ProcessEnvironment()
    env.sourceLines = [{'cursor': i, 'line': line} for i, line in enumerate(lines)]
    env.nextLines = []
    rmsp.TokenExtractRandom.process(env)
    return [sourceLine['line'] for sourceLine in env.nextLines]


def test_first_label():
    assert nextLabel(None) == '_A'


def test_label_sequence():
    labels = [nextLabel(None)]
    for _ in range(27):
        labels.append(nextLabel(labels[-1]))
    assert labels[:3] == ['_A', '_B', '_C']
    assert labels[25] == '_Z'
    assert labels[26] == '_ZA'
    assert labels[27] == '_ZB'
    assert len(set(labels[:26])) == 26


@pytest.mark.parametrize('m', [1, 2, 3, 7, 30, 99, 100])
def test_probs_sum_to_100(m):
    weights = probs(100, m)
    assert len(weights) == m
    assert sum(weights) == 100
    assert max(weights) - min(weights) <= 1


def test_probs_extra_weight_goes_first():
    assert probs(100, 3) == [34, 33, 33]
    assert probs(100, 6) == [17, 17, 17, 17, 16, 16]


def test_prob_definitions():
    assert probDefinitions('_A', 2, 4) == [
        'start_random',
        'percent_chance 34 #define _A_0',
        'percent_chance 33 #define _A_1',
        'percent_chance 33 #define _A_2',
        'end_random',
    ]


def test_prob_conditional():
    assert probConditional('_B', 'number_of_objects', 3, 5) == [
        'if _B_0',
        'number_of_objects 3',
        'elseif _B_1',
        'number_of_objects 4',
        'elseif _B_2',
        'number_of_objects 5',
        'endif',
    ]


def test_without_flag_nothing_changes():
    lines = ['<ELEVATION_GENERATION>', 'number_of_objects rnd(1,2)']
    assert extract(lines) == lines


def test_extract_after_elevation_generation():
    lines = [
        '#EXTRACT_RND',
        'base_size rnd(1,2)',
        '<ELEVATION_GENERATION>',
        'create_object GOLD {',
        'number_of_objects rnd(2,3)',
        'group_placement_radius rnd(0,1)',
        '}',
    ]
    assert extract(lines) == [
        'start_random',
        'percent_chance 50 #define _A_0',
        'percent_chance 50 #define _A_1',
        'end_random',
        'start_random',
        'percent_chance 50 #define _B_0',
        'percent_chance 50 #define _B_1',
        'end_random',
        'base_size rnd(1,2)',
        '<ELEVATION_GENERATION>',
        'create_object GOLD {',
        'if _A_0',
        'number_of_objects 2',
        'elseif _A_1',
        'number_of_objects 3',
        'endif',
        'if _B_0',
        'group_placement_radius 0',
        'elseif _B_1',
        'group_placement_radius 1',
        'endif',
        '}',
    ]


def test_flag_is_removed_even_without_marker():
    lines = ['a', '#extract_rnd', 'number_of_objects rnd(1,2)']
    assert extract(lines) == ['a', 'number_of_objects rnd(1,2)']


def test_two_rnd_on_one_line_is_fatal():
    with pytest.raises(rmsp.RmsSyntaxError) as excinfo:
        extract(['#EXTRACT_RND', '<ELEVATION_GENERATION>', 'a rnd(1,2) rnd(3,4)'])
    assert excinfo.value.lineCursor == 2


@pytest.mark.parametrize('line', [
    'number_of_objects rnd(3,3)',
    'number_of_objects rnd(4,2)',
    'number_of_objects rnd(1,x)',
    'rnd(1,2)',
    'number_of_objects rnd(0,100)',
])
def test_invalid_rnd_is_fatal(line):
    with pytest.raises(rmsp.RmsSyntaxError):
        extract(['#EXTRACT_RND', '<ELEVATION_GENERATION>', line])
