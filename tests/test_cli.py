"""Tests for cli.py - CLI interface."""

import io
import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from nova_calc.cli import Repl, main
from nova_calc.controller import Calculator
from nova_calc.errors import AiQueryError
from nova_calc.history_store import JsonHistoryStore, MemoryHistoryStore
from nova_calc.models import CalculatorMode, HistoryItem


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    """Data directory for one test."""
    return tmp_path / "nova"


def _invoke(runner, data_dir, *args, **kwargs):
    return runner.invoke(main, ["--data-dir", str(data_dir), *args], **kwargs)


class TestCLIBasics:
    """Basic CLI tests."""

    def test_version(self, runner):
        """Test --version flag."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "nova-calc" in result.output

    def test_help(self, runner):
        """Test --help flag."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Nova Calc" in result.output
        for command in ("eval", "ask", "history", "repl", "config"):
            assert command in result.output


class TestEvalCommand:
    """Tests for eval command."""

    def test_eval(self, runner, data_dir):
        """Test an expression is evaluated and saved."""
        result = _invoke(runner, data_dir, "eval", "2+2")
        assert result.exit_code == 0
        assert result.output.strip() == "4"
        history = JsonHistoryStore(data_dir).load()
        assert history[0].expression == "2+2"

    def test_eval_joins_arguments(self, runner, data_dir):
        """Test unquoted arguments are joined."""
        result = _invoke(runner, data_dir, "eval", "sqrt(16)", "*", "2")
        assert result.exit_code == 0
        assert "8" in result.output

    def test_eval_unsupported_characters(self, runner, data_dir):
        """Test characters the evaluator would drop are refused."""
        result = _invoke(runner, data_dir, "eval", "2²")
        assert result.exit_code == 1
        assert "Unsupported characters: ²" in result.output
        assert JsonHistoryStore(data_dir).load() == []

    def test_eval_error(self, runner, data_dir):
        """Test an invalid expression exits with an error."""
        result = _invoke(runner, data_dir, "eval", "10/0")
        assert result.exit_code == 1
        assert "Syntax Error" in result.output
        assert JsonHistoryStore(data_dir).load() == []


class TestAskCommand:
    """Tests for ask command."""

    def test_ask(self, runner, data_dir, make_solver):
        """Test an AI answer is printed and saved."""
        solver = make_solver(result="68.04 kg")
        with patch("nova_calc.cli.GeminiSolver", return_value=solver):
            result = _invoke(runner, data_dir, "ask", "Convert", "150", "lbs", "to", "kg")

        assert result.exit_code == 0
        assert "68.04 kg" in result.output
        assert solver.queries == ["Convert 150 lbs to kg"]
        assert JsonHistoryStore(data_dir).load()[0].is_ai is True

    def test_ask_failure(self, runner, data_dir, make_solver):
        """Test an AI failure exits with AI Error."""
        solver = make_solver(error=AiQueryError("quota exceeded"))
        with patch("nova_calc.cli.GeminiSolver", return_value=solver):
            result = _invoke(runner, data_dir, "ask", "anything")

        assert result.exit_code == 1
        assert "AI Error" in result.output


class TestHistoryCommands:
    """Tests for history commands."""

    @pytest.fixture
    def saved(self, data_dir):
        items = [
            HistoryItem(id="2", expression="Derivative of x^2", result="2x", timestamp=2000, is_ai=True),
            HistoryItem(id="1", expression="6*7", result="42", timestamp=1000),
        ]
        JsonHistoryStore(data_dir).save(items)
        return items

    def test_list_empty(self, runner, data_dir):
        """Test listing without history."""
        result = _invoke(runner, data_dir, "history", "list")
        assert result.exit_code == 0
        assert "No history yet" in result.output

    def test_list(self, runner, data_dir, saved):
        """Test listing saved history."""
        result = _invoke(runner, data_dir, "history", "list")
        assert result.exit_code == 0
        assert "6*7" in result.output
        assert "= 2x" in result.output

    def test_list_json(self, runner, data_dir, saved):
        """Test JSON output."""
        result = _invoke(runner, data_dir, "history", "list", "--json", "--limit", "1")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == [saved[0].to_dict()]

    def test_show(self, runner, data_dir, saved):
        """Test showing one entry."""
        result = _invoke(runner, data_dir, "history", "show", "2")
        assert result.exit_code == 0
        assert "6*7" in result.output
        assert "= 42" in result.output

    def test_show_out_of_range(self, runner, data_dir, saved):
        """Test showing a missing entry fails."""
        result = _invoke(runner, data_dir, "history", "show", "5")
        assert result.exit_code == 1
        assert "No history entry 5" in result.output

    def test_clear(self, runner, data_dir, saved):
        """Test clearing history with --yes."""
        result = _invoke(runner, data_dir, "history", "clear", "--yes")
        assert result.exit_code == 0
        assert "Cleared 2 history entries" in result.output
        assert JsonHistoryStore(data_dir).load() == []

    def test_clear_aborted(self, runner, data_dir, saved):
        """Test declining the confirmation keeps history."""
        result = _invoke(runner, data_dir, "history", "clear", input="n\n")
        assert "Aborted" in result.output
        assert len(JsonHistoryStore(data_dir).load()) == 2


class TestConfigCommand:
    """Tests for config command."""

    def test_show_defaults(self, runner, data_dir):
        """Test the default configuration is shown."""
        result = _invoke(runner, data_dir, "config", "show")
        assert result.exit_code == 0
        assert "gemini-2.5-flash" in result.output
        assert "max_history" in result.output

    def test_show_from_file(self, runner, data_dir):
        """Test values from config.json are shown."""
        data_dir.mkdir(parents=True)
        (data_dir / "config.json").write_text(json.dumps({"model": "gemini-2.5-pro"}))
        result = _invoke(runner, data_dir, "config", "show")
        assert "gemini-2.5-pro" in result.output


class TestRepl:
    """Tests for the interactive session."""

    @pytest.fixture
    def out(self):
        return Console(file=io.StringIO(), width=80)

    @pytest.fixture
    def repl(self, make_solver, out):
        calculator = Calculator(MemoryHistoryStore(), make_solver(result="2x"))
        return Repl(calculator, out)

    def test_expression_line_computes(self, repl):
        """Test a typed expression is computed."""
        assert repl.handle("12 * 3") is True
        assert repl.calculator.state.result == "36"

    def test_empty_line_computes_current_input(self, repl):
        """Test an empty line computes the pending input."""
        repl.calculator.press("9")
        repl.handle("")
        assert repl.calculator.state.result == "9"

    def test_unsupported_characters_refused(self, repl, out):
        """Test a line with characters the evaluator would drop is not computed."""
        repl.handle("2²")
        state = repl.calculator.state
        assert "Unsupported characters: ²" in out.file.getvalue()
        assert state.input == ""
        assert state.history == ()

    def test_mode_command(self, repl):
        """Test switching modes."""
        repl.handle(":mode sci")
        assert repl.calculator.state.mode is CalculatorMode.SCIENTIFIC

    def test_bad_mode(self, repl, out):
        """Test an unknown mode is reported."""
        repl.handle(":mode graphing")
        assert "Unknown mode" in out.file.getvalue()
        assert repl.calculator.state.mode is CalculatorMode.BASIC

    def test_ai_line(self, repl):
        """Test free text is sent to the solver in AI mode."""
        repl.handle(":mode ai")
        repl.handle("Derivative of x^2")
        state = repl.calculator.state
        assert state.result == "2x"
        assert state.history[0].is_ai is True

    def test_edit_commands(self, repl):
        """Test :del and :ac."""
        repl.calculator.press("1")
        repl.calculator.press("2")
        repl.handle(":del")
        assert repl.calculator.state.input == "1"
        repl.handle(":ac")
        assert repl.calculator.state.input == ""

    def test_history_pick(self, repl):
        """Test picking a history entry loads it."""
        repl.handle("5+5")
        item = repl.calculator.state.history[0]
        with patch("nova_calc.cli.questionary") as mock_questionary:
            mock_questionary.select.return_value.ask.return_value = item
            repl.handle(":history")
        assert repl.calculator.state.input == "5+5"

    def test_suggestion_pick(self, repl):
        """Test picking a suggestion switches to AI mode with its text."""
        with patch("nova_calc.cli.questionary") as mock_questionary:
            mock_questionary.select.return_value.ask.return_value = "Convert 150 lbs to kg"
            repl.handle(":suggest")
        assert repl.calculator.state.mode is CalculatorMode.AI
        assert repl.calculator.state.input == "Convert 150 lbs to kg"

    def test_clear_history(self, repl):
        """Test :clear-history."""
        repl.handle("1+1")
        repl.handle(":clear-history")
        assert repl.calculator.state.history == ()

    def test_unknown_command(self, repl, out):
        """Test unknown commands are reported."""
        assert repl.handle(":frobnicate") is True
        assert "Unknown command" in out.file.getvalue()

    def test_quit(self, repl):
        """Test :quit ends the session."""
        assert repl.handle(":quit") is False

    def test_run_loop(self, repl, out):
        """Test the loop reads lines until :quit."""
        out.input = MagicMock(side_effect=["7*6", ":quit"])
        repl.run()
        assert repl.calculator.state.result == "42"
        assert "= 42" in out.file.getvalue()

    def test_run_stops_on_eof(self, repl, out):
        """Test end of input ends the session."""
        out.input = MagicMock(side_effect=EOFError)
        repl.run()
