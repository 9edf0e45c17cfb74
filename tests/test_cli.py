"""
Tests for the command-line interface.
"""

from typer.testing import CliRunner

from calc_studio.cli import app

runner = CliRunner()


class TestRunCommand:
    """Test replaying keys from the command line."""

    def test_chain(self):
        result = runner.invoke(app, ["run", "3", "+", "4", "*", "2", "="])
        assert result.exit_code == 0
        assert "14" in result.output
        assert "3 + 4" in result.output

    def test_error_display(self):
        result = runner.invoke(app, ["run", "5", "/", "0", "="])
        assert result.exit_code == 0
        assert "Error" in result.output

    def test_no_history(self):
        result = runner.invoke(app, ["run", "--no-history", "1", "2", "x²"])
        assert result.exit_code == 0
        assert "144" in result.output
        assert "History" not in result.output

    def test_memory_indicator(self):
        result = runner.invoke(app, ["run", "7", "MS"])
        assert "M: 7" in result.output

    def test_unknown_key(self):
        result = runner.invoke(app, ["run", "3", "bogus"])
        assert result.exit_code == 1
        assert "Unknown key" in result.output


class TestReplCommand:
    """Test the interactive session."""

    def test_session(self):
        result = runner.invoke(app, ["repl"], input="3 + 4 =\nhistory\nquit\n")
        assert result.exit_code == 0
        assert "7" in result.output
        assert "3 + 4" in result.output

    def test_bad_line_keeps_going(self):
        result = runner.invoke(app, ["repl"], input="nope\n6 x²\n")
        assert result.exit_code == 0
        assert "Unknown key" in result.output
        assert "36" in result.output

    def test_pending_context_line(self):
        result = runner.invoke(app, ["repl"], input="8 *\nexit\n")
        assert "8 *" in result.output


class TestKeysCommand:
    """Test the key reference table."""

    def test_lists_functions(self):
        result = runner.invoke(app, ["keys"])
        assert result.exit_code == 0
        assert "Factorial" in result.output
        assert "Memory recall" in result.output
