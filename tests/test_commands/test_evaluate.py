"""
Tests for the evaluation commands.
"""

from typing import Generator
from pathlib import Path
from unittest.mock import patch
import io
import json
import pytest
from click.testing import CliRunner
from rich.console import Console
from macroeval.commands import evaluate
from macroeval.commands.app import cli

VALUES: dict[str, str | None] = {
    "Philosopher Count": "5",
    "Fork Count": "{%Philosopher Count%}",
    "Name": "Plato",
    "Duration Allow Philosophers To Eat [seconds]": "{%Integer-divide::40::2%}",
}


@pytest.fixture
def runner() -> CliRunner:
    """Provides a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    path = tmp_path / "values.json"
    path.write_text(json.dumps({"values": VALUES}))
    return path


@pytest.fixture
def captured_output() -> Generator[io.StringIO, None, None]:
    """Captures console output."""
    output = io.StringIO()
    console = Console(file=output, width=200)
    with patch("macroeval.commands.evaluate.console", console):
        yield output


def test_cli_group_structure(runner: CliRunner) -> None:
    for cmd in ["eval", "get", "resolve"]:
        assert cmd in cli.commands

    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Available Commands" in result.output


def test_eval_command(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(
        cli, ["eval", "--store", str(store_file), "{%Integer-divide::{%Fork Count%}::2%}"]
    )
    assert result.exit_code == 0
    assert captured_output.getvalue().strip() == "2"


def test_eval_unbalanced(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["eval", "--store", str(store_file), "{%Fork Count"])
    assert result.exit_code == 1
    assert "not balanced" in captured_output.getvalue()


def test_eval_missing_store(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["eval", "--store", str(tmp_path / "none.json"), "x"])
    assert result.exit_code == 1
    assert "Store file not found" in captured_output.getvalue()


@pytest.mark.parametrize(
    "args,expected",
    [
        (["fork count"], "fork count: 5"),
        (["Name"], "Name: Plato"),
        (["--integer", "Fork Count"], "Fork Count: 5"),
        (["--integer", "--default", "3", "Name"], "Name: 3"),
    ],
)
def test_get_command(
    runner: CliRunner,
    store_file: Path,
    captured_output: io.StringIO,
    args: list[str],
    expected: str,
) -> None:
    result = runner.invoke(cli, ["get", "--store", str(store_file), *args])
    assert result.exit_code == 0
    assert expected in captured_output.getvalue()


def test_get_missing_key(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["get", "--store", str(store_file), "Missing"])
    assert result.exit_code == 1
    assert "Key 'Missing' not found" in captured_output.getvalue()


def test_resolve_command(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["resolve", "--store", str(store_file)])
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "Store values" in output
    assert "{%Philosopher Count%}" in output
    for key in VALUES:
        assert key in output


def test_store_from_settings(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    with patch("macroeval.commands.evaluate.storeFile_resolve", return_value=store_file):
        result = runner.invoke(cli, ["eval", "{%Name%}"])
    assert result.exit_code == 0
    assert captured_output.getvalue().strip() == "Plato"


def test_eval_callback_directly(store_file: Path, captured_output: io.StringIO) -> None:
    evaluate.evaluate.callback(store_file, "{%Integer-divide::7::2%}")
    assert captured_output.getvalue().strip() == "3"


def test_get_bracketed_key(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    key = "Duration Allow Philosophers To Eat [seconds]"
    result = runner.invoke(cli, ["get", "--store", str(store_file), key])
    assert result.exit_code == 0
    assert f"{key}: 20" in captured_output.getvalue()

    result = runner.invoke(cli, ["get", "--store", str(store_file), "--integer", key])
    assert result.exit_code == 0
    assert f"{key}: 20" in captured_output.getvalue()


def test_missing_bracketed_key(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["get", "--store", str(store_file), "[/missing]"])
    assert result.exit_code == 1
    assert "Key '[/missing]' not found" in captured_output.getvalue()


def test_eval_bracketed_operand_error(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(
        cli, ["eval", "--store", str(store_file), "{%Integer-divide::[/x]::2%}"]
    )
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Malformed integer operand: '[/x]'" in captured_output.getvalue()


def test_resolve_bracketed_key(
    runner: CliRunner, store_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["resolve", "--store", str(store_file)])
    assert result.exit_code == 0
    assert "Duration Allow Philosophers To Eat [seconds]" in captured_output.getvalue()


def test_eval_without_store(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    with (
        patch.object(evaluate.appsettings, "store_file", None),
        patch(
            "macroeval.commands.evaluate.storeFile_resolve",
            return_value=tmp_path / "absent.json",
        ),
    ):
        result = runner.invoke(cli, ["eval", "{%Integer-divide::7::2%} {%Name%}"])
    assert result.exit_code == 0
    assert captured_output.getvalue().strip() == "3 {%Name%}"


def test_configured_store_must_exist(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    missing = tmp_path / "absent.json"
    with (
        patch.object(evaluate.appsettings, "store_file", missing),
        patch("macroeval.commands.evaluate.storeFile_resolve", return_value=missing),
    ):
        result = runner.invoke(cli, ["eval", "x"])
    assert result.exit_code == 1
    assert "Store file not found" in captured_output.getvalue()


def test_commands_share_settings_console() -> None:
    from macroeval.commands import base
    from macroeval.config import settings

    assert base.console is settings.console
    assert evaluate.console is settings.console
