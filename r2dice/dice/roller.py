"""
Random die primitives: plain dice, acing (exploding) dice, ranges.

All randomness in r2dice flows through a DiceRoller, and every draw is a
single `rng.randint` call. Tests inject a scripted random source; each
evaluate() call otherwise gets its own roller so concurrent calls never
share generator state.
"""

import logging
import random
from typing import List, Optional

from .errors import InvalidDieError
from .models import Die

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHAIN_LENGTH = 100

# Fudge/FATE die faces, indexed by a d6 roll
FUDGE_FACES = (-1, -1, 0, 0, 1, 1)


def roll_die(sides: int, rng: Optional[random.Random] = None) -> int:
    """
    Roll a single die.

    Args:
        sides: Number of faces
        rng: Random source (a fresh one when omitted)

    Returns:
        Uniform integer in [1, sides]

    Raises:
        InvalidDieError: If sides is smaller than 1
    """
    if sides < 1:
        raise InvalidDieError(sides)
    rng = rng or random.Random()
    return rng.randint(1, sides)


def roll_acing_die(
    sides: int,
    max_chain_length: int = DEFAULT_MAX_CHAIN_LENGTH,
    rng: Optional[random.Random] = None
) -> Die:
    """
    Roll a die that aces: a maximum roll is rolled again and added.

    The chain stops on a roll below `sides` or once `max_chain_length`
    explosions have happened. A one-sided die never explodes.

    Args:
        sides: Number of faces
        max_chain_length: Maximum number of explosions
        rng: Random source (a fresh one when omitted)

    Returns:
        Die whose `chain` holds the follow-up rolls
    """
    if sides < 1:
        raise InvalidDieError(sides)
    rng = rng or random.Random()

    rolls = [rng.randint(1, sides)]
    while sides > 1 and rolls[-1] == sides and len(rolls) <= max_chain_length:
        rolls.append(rng.randint(1, sides))

    if sides > 1 and rolls[-1] == sides:
        logger.debug(f"d{sides} hit the explosion budget of {max_chain_length}")

    # The last link never explodes: either it missed, or the budget ran out
    return Die.from_rolls(rolls)


class DiceRoller:
    """
    Source of every random draw made while evaluating an expression.

    Supports:
    - Plain and acing dice
    - Inclusive ranges (Gygax ranges)
    - Fudge dice
    - Seeded or injected random for determinism
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        max_chain_length: int = DEFAULT_MAX_CHAIN_LENGTH
    ):
        """
        Initialize roller.

        Args:
            seed: Random seed for deterministic rolls (testing/replay)
            rng: Random instance to draw from; overrides seed
            max_chain_length: Explosion budget for acing dice
        """
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.max_chain_length = max_chain_length

    def roll_die(self, sides: int) -> int:
        """Roll a single die."""
        return roll_die(sides, self.rng)

    def roll_acing_die(self, sides: int) -> Die:
        """Roll a single acing die within this roller's explosion budget."""
        return roll_acing_die(sides, self.max_chain_length, self.rng)

    def roll_range(self, low: int, high: int) -> int:
        """Uniform integer between two bounds, inclusive, in either order."""
        low, high = min(low, high), max(low, high)
        return self.rng.randint(low, high)

    def roll_fudge(self) -> int:
        """Roll one Fudge die: -1, 0 or +1."""
        return FUDGE_FACES[self.roll_die(6) - 1]

    def roll_simple(self, count: int, sides: int) -> List[int]:
        """
        Roll dice without parsing notation.

        Args:
            count: Number of dice
            sides: Number of sides per die

        Returns:
            List of individual rolls
        """
        return [self.roll_die(sides) for _ in range(count)]

    def set_seed(self, seed: int):
        """Change random seed (for testing/replay)."""
        self.seed = seed
        self.rng = random.Random(seed)
