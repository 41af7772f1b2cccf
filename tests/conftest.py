"""
Shared fixtures for r2dice tests.
"""

import random

import pytest

from r2dice.core.config import Config
from r2dice.dice.roller import DiceRoller


class ScriptedRandom(random.Random):
    """Random source whose randint returns pre-scripted values in order."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        if not self.values:
            raise AssertionError(f"No scripted value left for randint({a}, {b})")
        value = self.values.pop(0)
        assert a <= value <= b, f"Scripted value {value} outside [{a}, {b}]"
        self.calls.append((a, b))
        return value


@pytest.fixture
def config(monkeypatch, tmp_path):
    """Config built from defaults only (no .env, no R2_* variables)."""
    monkeypatch.chdir(tmp_path)
    for name in ('R2_MAX_DICE', 'R2_MAX_SIDES', 'R2_MAX_REPEAT', 'R2_MAX_CHAIN_LENGTH',
                 'R2_SEED', 'R2_NORMALIZE', 'LOG_LEVEL', 'LOG_FILE', 'HOST', 'PORT', 'DEBUG'):
        monkeypatch.delenv(name, raising=False)
    return Config(env_file=str(tmp_path / 'missing.env'))


@pytest.fixture
def scripted():
    """Factory for rollers drawing scripted values: scripted(3, 5)."""
    def make(*values, max_chain_length=100):
        return DiceRoller(rng=ScriptedRandom(values), max_chain_length=max_chain_length)
    return make


@pytest.fixture
def scripted_rng():
    """Factory for bare scripted random sources: scripted_rng(6, 6, 3)."""
    def make(*values):
        return ScriptedRandom(values)
    return make
