"""Tests for command parsing and outcome tags."""

import pytest
from pydantic import ValidationError

from robologic.schemas import (
    BoundedRepeat,
    CallPattern,
    Move,
    Outcome,
    PatternRecursionError,
    SensorRepeat,
    TurnLeft,
    Verdict,
    dump_program,
    iter_commands,
    parse_command,
    parse_program,
    validate_pattern,
)


def test_parse_program_builds_nested_commands():
    program = parse_program(
        [
            {"type": "move", "distance": 2},
            {"type": "repeat", "count": 3, "body": [{"type": "turn_left"}, {"type": "move"}]},
            {"type": "sensor_repeat", "body": [{"type": "move"}]},
            {"type": "call_pattern"},
        ]
    )

    assert isinstance(program[0], Move) and program[0].distance == 2
    assert isinstance(program[1], BoundedRepeat)
    assert program[1].count == 3
    assert isinstance(program[1].body[0], TurnLeft)
    assert program[1].body[1].distance == 1
    assert isinstance(program[2], SensorRepeat)
    assert program[2].limit is None
    assert isinstance(program[3], CallPattern)


def test_dump_program_keeps_type_tags():
    program = [Move(distance=3), BoundedRepeat(count=0, body=[CallPattern()])]
    dumped = dump_program(program)
    assert dumped[0] == {"type": "move", "distance": 3}
    assert dumped[1]["type"] == "repeat"
    assert dumped[1]["body"] == [{"type": "call_pattern"}]
    assert parse_program(dumped) == program


def test_parse_program_accepts_none():
    assert parse_program(None) == []


@pytest.mark.parametrize(
    "data",
    [
        {"type": "move", "distance": 0},
        {"type": "repeat", "count": -1, "body": []},
        {"type": "jump"},
        {"type": "sensor_repeat", "body": [], "limit": 0},
        {"distance": 2},
    ],
)
def test_parse_command_rejects_malformed_nodes(data):
    with pytest.raises(ValidationError):
        parse_command(data)


def test_iter_commands_walks_depth_first():
    program = [
        Move(),
        BoundedRepeat(count=2, body=[TurnLeft(), SensorRepeat(body=[CallPattern()])]),
    ]
    assert [node.type for node in iter_commands(program)] == [
        "move",
        "repeat",
        "turn_left",
        "sensor_repeat",
        "call_pattern",
    ]


def test_validate_pattern():
    assert validate_pattern(None) == []
    assert validate_pattern((Move(),)) == [Move()]
    with pytest.raises(PatternRecursionError):
        validate_pattern([SensorRepeat(body=[CallPattern()])])


def test_outcome_and_verdict():
    assert not Outcome.CONTINUE.is_terminal
    assert Outcome.WIN.is_terminal and Outcome.CRASH.is_terminal
    assert Verdict.from_outcome(Outcome.WIN) is Verdict.WIN
    assert Verdict.from_outcome(Outcome.CRASH) is Verdict.CRASH
    assert Verdict.from_outcome(Outcome.CONTINUE) is Verdict.EXHAUSTED
