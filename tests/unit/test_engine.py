"""
Unit tests for DiceEngine and the module-level entry points.
"""

import pytest

import r2dice
from r2dice.dice.engine import DiceEngine
from r2dice.dice.errors import DiceSyntaxError
from r2dice.dice.models import GenericResult, SavageWildResult


@pytest.fixture
def engine(config):
    return DiceEngine(config)


class TestEvaluate:
    """Test DiceEngine.evaluate."""

    def test_scripted_roller(self, engine, scripted):
        """Test evaluation against a supplied roller."""
        result = engine.evaluate("4d6k3", roller=scripted(2, 6, 4, 1))
        assert isinstance(result, GenericResult)
        assert result.value == 12

    def test_normalizes_by_default(self, engine, scripted):
        """Test that suffix order is fixed before parsing."""
        result = engine.evaluate("s8+2t4", roller=scripted(5, 3))
        assert isinstance(result, SavageWildResult)
        assert result.value == 7

    def test_normalize_off(self, engine):
        """Test that normalize=False parses the raw text."""
        with pytest.raises(DiceSyntaxError):
            engine.evaluate("s8+2t4", normalize=False)

    def test_config_normalize_default(self, config):
        """Test that the configured default is used when normalize is None."""
        config.normalize = False
        with pytest.raises(DiceSyntaxError):
            DiceEngine(config).evaluate("s8+2t4")

    def test_seed(self, engine):
        """Test that a seed gives repeatable results."""
        first = engine.evaluate("20d100", seed=8)
        assert engine.evaluate("20d100", seed=8) == first

    def test_config_seed(self, config):
        """Test that R2_SEED style config seeds every roller."""
        config.seed = 11
        engine = DiceEngine(config)
        assert engine.evaluate("20d100") == engine.evaluate("20d100")


class TestRoll:
    """Test DiceEngine.roll Result handling."""

    def test_success(self, engine):
        """Test the Result data on success."""
        result = engine.roll("5d20!+3k2", seed=2)
        assert result.success
        assert result.data['expression'] == "5d20!+3k2"
        assert result.data['normalized'] == "5d20!k2+3"
        assert isinstance(result.data['result'], GenericResult)
        assert result.data['result'].modifier == 3

    def test_syntax_error(self, engine):
        """Test that syntax errors carry their position."""
        result = engine.roll("2d6+")
        assert not result
        assert result.error_code == 'syntax_error'
        assert result.details == {'position': 4}

    def test_evaluation_error(self, engine, caplog):
        """Test that evaluation errors become failed Results."""
        result = engine.roll("0d6")
        assert not result.success
        assert result.error_code == 'evaluation_error'
        assert result.details is None
        assert "Roll failed" in caplog.text

    def test_invalid_die(self, engine):
        """Test that zero-sided dice report invalid_die."""
        assert engine.roll("2d0").error_code == 'invalid_die'

    @pytest.mark.parametrize("expression", [
        "1" * 5000,
        "(" * 200 + "1" + ")" * 200,
        "-" * 500 + "2d6",
        "+".join(["d6"] * 300),
    ])
    def test_oversized_input(self, engine, expression):
        """Test that huge literals and deep nesting fail as syntax errors."""
        result = engine.roll(expression)
        assert not result.success
        assert result.error_code == 'syntax_error'
        assert 'position' in result.details

    def test_runaway_arithmetic(self, engine):
        """Test that oversized results fail with limit_exceeded."""
        result = engine.roll("@x := 999999999999999 * 999999999999999; @x := @x*@x; @x*@x")
        assert result.error_code == 'limit_exceeded'

    def test_non_string(self, engine):
        """Test that non-string input fails cleanly."""
        result = engine.roll(None)
        assert result.error_code == 'syntax_error'


class TestModuleFunctions:
    """Test r2dice.evaluate and r2dice.normalize."""

    def test_evaluate(self, config, scripted):
        """Test the package-level evaluate."""
        result = r2dice.evaluate("d20+5", roller=scripted(11), config=config)
        assert result.value == 16

    def test_normalize(self):
        """Test the package-level normalize."""
        assert r2dice.normalize("4d6+2k3t4") == "4d6k3t4+2"
