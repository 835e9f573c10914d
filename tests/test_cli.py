"""Tests for the headless command-line driver."""

import json

import pytest

from robologic.cli import EXIT_FAILED, EXIT_USAGE, EXIT_WIN, main, parse_rule, run


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setenv("ROBOLOGIC_NO_COLOR", "1")


def write_program(tmp_path, name, program):
    path = tmp_path / name
    path.write_text(json.dumps(program))
    return path


def test_levels_lists_catalog(capsys):
    assert main(["levels"]) == EXIT_WIN
    out = capsys.readouterr().out
    assert "Mars Robot Mission" in out
    assert "mars-1" in out
    assert "logic-1" in out and "[tile rules]" in out


def test_show_renders_level(capsys):
    assert main(["show", "mars-1"]) == EXIT_WIN
    out = capsys.readouterr().out
    assert "mars-1: Level 1: First Steps" in out
    assert "> . F" in out


def test_config_command(capsys):
    assert main(["config"]) == EXIT_WIN
    assert "RoboLogic Configuration:" in capsys.readouterr().out


def test_run_program_file_wins(tmp_path, capsys):
    program = write_program(tmp_path, "main.json", [{"type": "move", "distance": 2}])
    assert main(["run", "mars-1", "--program", str(program)]) == EXIT_WIN
    out = capsys.readouterr().out
    assert "[•] [Step 1] move -> reached_goal" in out
    assert "mars-1: win after 2 step(s)" in out


def test_run_with_pattern_file(tmp_path, capsys):
    main_program = write_program(tmp_path, "main.json", [{"type": "call_pattern"}] * 2)
    pattern = write_program(tmp_path, "pattern.json", [{"type": "move"}] * 2)
    code = main(["run", "cyber-1", "--program", str(main_program), "--pattern", str(pattern), "--quiet"])
    assert code == EXIT_WIN
    assert capsys.readouterr().out.strip() == "cyber-1: win after 4 step(s)"


def test_run_uses_starter_code_by_default(capsys):
    assert main(["run", "debug-5", "--quiet"]) == EXIT_FAILED
    assert "debug-5: exhausted after 2 step(s)" in capsys.readouterr().out


def test_run_crash_exits_with_failure(tmp_path, capsys):
    program = write_program(tmp_path, "main.json", [{"type": "move", "distance": 3}])
    assert main(["run", "mars-3", "--program", str(program), "--quiet"]) == EXIT_FAILED
    assert "mars-3: crash after 2 step(s)" in capsys.readouterr().out


def test_run_tile_rules(capsys):
    code = main(["run", "logic-2", "--rule", "red=right", "--rule", "BLUE=left", "--quiet"])
    assert code == EXIT_WIN
    assert "logic-2: win" in capsys.readouterr().out


def test_run_with_delay_uses_async_play(tmp_path, capsys):
    program = write_program(tmp_path, "main.json", [{"type": "move", "distance": 2}])
    assert main(["run", "mars-1", "--program", str(program), "--delay", "0.001", "--quiet"]) == EXIT_WIN


@pytest.mark.parametrize(
    "argv, message",
    [
        (["show", "mars-99"], "Unknown level id: mars-99"),
        (["run", "logic-1", "--rule", "red"], "Invalid rule 'red'"),
        (["run", "logic-1", "--rule", "green=left"], "Unknown rule color 'green'"),
        (["run", "mars-1", "--program", "missing.json"], "Program file not found"),
    ],
)
def test_usage_errors_exit_with_status_two(argv, message, capsys):
    assert main(argv) == EXIT_USAGE
    out = capsys.readouterr().out
    assert "[!]" in out
    assert message in out


def test_palette_violation_is_a_usage_error(tmp_path, capsys):
    program = write_program(tmp_path, "main.json", [{"type": "pick"}])
    assert main(["run", "mars-1", "--program", str(program)]) == EXIT_USAGE
    assert "Command 'pick' is not available in level 'mars-1'" in capsys.readouterr().out


def test_invalid_program_json_is_a_usage_error(tmp_path):
    program = write_program(tmp_path, "main.json", [{"type": "move", "distance": 0}])
    assert main(["run", "mars-1", "--program", str(program)]) == EXIT_USAGE


def test_missing_catalog_is_a_usage_error(tmp_path, capsys):
    assert main(["--levels-path", str(tmp_path / "nowhere.json"), "levels"]) == EXIT_USAGE
    assert "Level catalog not found" in capsys.readouterr().out


def test_parse_rule():
    assert parse_rule(" Red = u-turn ") == ("red", "u-turn")
    with pytest.raises(ValueError):
        parse_rule("=left")


def test_console_entry_point_exits_with_status(monkeypatch):
    monkeypatch.setattr("sys.argv", ["robologic", "run", "mars-1", "--quiet"])
    with pytest.raises(SystemExit) as excinfo:
        run()
    assert excinfo.value.code == EXIT_FAILED
