"""
Unit tests for random die primitives.
"""

import random

import pytest

from r2dice.dice.errors import InvalidDieError
from r2dice.dice.roller import DiceRoller, FUDGE_FACES, roll_acing_die, roll_die


class TestRollDie:
    """Test single die rolls."""

    def test_roll_in_range(self):
        """Test that rolls stay within [1, sides]."""
        rng = random.Random(7)
        for sides in (1, 2, 6, 20, 100):
            for _ in range(50):
                assert 1 <= roll_die(sides, rng) <= sides

    def test_zero_sides_rejected(self):
        """Test that a die needs at least one side."""
        with pytest.raises(InvalidDieError):
            roll_die(0)

        with pytest.raises(InvalidDieError):
            roll_die(-4)


class TestRollAcingDie:
    """Test exploding dice."""

    def test_no_explosion(self, scripted_rng):
        """Test that a non-maximum roll does not explode."""
        die = roll_acing_die(6, rng=scripted_rng(4))
        assert die.value == 4
        assert die.exploded is False
        assert die.chain is None
        assert die.total == 4

    def test_chain(self, scripted_rng):
        """Test that maximum rolls chain into the next die."""
        die = roll_acing_die(6, rng=scripted_rng(6, 6, 3))
        assert die.rolls == [6, 6, 3]
        assert die.total == 15
        assert die.exploded is True
        assert die.chain.exploded is True
        assert die.chain.chain.exploded is False
        assert die.explosions == 2

    def test_one_sided_die_never_explodes(self, scripted_rng):
        """Test that a d1 stops after one roll."""
        die = roll_acing_die(1, rng=scripted_rng(1))
        assert die.rolls == [1]
        assert die.exploded is False

    def test_chain_budget(self, scripted_rng):
        """Test that the explosion budget stops an endless chain."""
        rng = scripted_rng(*[6] * 10)
        die = roll_acing_die(6, max_chain_length=3, rng=rng)
        assert die.rolls == [6, 6, 6, 6]
        assert die.explosions == 3
        # The last link is a maximum roll but did not get to explode
        assert die.chain.chain.chain.exploded is False
        assert len(rng.values) == 6

    def test_total_never_below_value(self):
        """Test acing monotonicity with real randomness."""
        rng = random.Random(3)
        for _ in range(200):
            die = roll_acing_die(4, rng=rng)
            assert die.total >= die.value
            assert die.total == sum(die.rolls)
            assert die.explosions <= 100


class TestDiceRoller:
    """Test the roller wrapper."""

    def test_seeded_rolls_repeat(self):
        """Test that the same seed gives the same rolls."""
        first = DiceRoller(seed=42).roll_simple(10, 20)
        second = DiceRoller(seed=42).roll_simple(10, 20)
        assert first == second

    def test_set_seed(self):
        """Test reseeding a roller."""
        roller = DiceRoller(seed=1)
        first = roller.roll_simple(5, 100)
        roller.set_seed(1)
        assert roller.roll_simple(5, 100) == first
        assert roller.seed == 1

    def test_injected_rng_wins_over_seed(self, scripted_rng):
        """Test that an injected random source is used as-is."""
        rng = scripted_rng(5)
        roller = DiceRoller(seed=99, rng=rng)
        assert roller.rng is rng
        assert roller.roll_die(6) == 5

    def test_roll_range_either_order(self, scripted_rng):
        """Test that range bounds can be given in either order."""
        rng = scripted_rng(3, 3)
        roller = DiceRoller(rng=rng)
        assert roller.roll_range(1, 10) == 3
        assert roller.roll_range(10, 1) == 3
        assert rng.calls == [(1, 10), (1, 10)]

    def test_roll_fudge(self, scripted_rng):
        """Test that Fudge dice map a d6 onto -1/0/+1."""
        roller = DiceRoller(rng=scripted_rng(1, 2, 3, 4, 5, 6))
        assert [roller.roll_fudge() for _ in range(6)] == list(FUDGE_FACES)

    def test_roller_chain_budget(self, scripted_rng):
        """Test that the roller passes its explosion budget on."""
        roller = DiceRoller(rng=scripted_rng(8, 8, 8), max_chain_length=2)
        assert roller.roll_acing_die(8).rolls == [8, 8, 8]
