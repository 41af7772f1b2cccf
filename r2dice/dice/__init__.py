"""
Dice - R2 dice expression parsing and evaluation.

Provides:
- Dice notation parsing (2d6+3, 4d6k3, 3x2d6, @hp := 2d6+10; @hp*2)
- Acing (exploding) dice, keep highest/lowest, advantage/disadvantage
- Success counting and target numbers with raises
- Savage Worlds wild dice and extras
- Fudge, Carcosa, West End D6, Ironsworn and Gygax ranges
- Suffix-order normalization ("s8+2t4" -> "s8t4+2")
- Seeded or injected random for determinism

Usage:
    from r2dice.dice import evaluate

    result = evaluate("s8+2t6")
    print(result.value)              # e.g. 9
    print(result.raises.describe())  # "Success"
    print(result.to_dict())          # JSON-ready structure

    # Deterministic rolls
    from r2dice.dice import DiceRoller
    evaluate("4d6k3", roller=DiceRoller(seed=42))
"""

from .dice_parser import DiceParser
from .engine import DiceEngine, evaluate, normalize
from .errors import (
    DiceLimitError,
    DiceSyntaxError,
    DivisionByZeroError,
    EvaluationError,
    InvalidDieError,
    UnsupportedSuffixError,
)
from .evaluator import Evaluator
from .models import (
    BoundedResult,
    Die,
    FlagResult,
    GenericResult,
    IronswornResult,
    KeepOperation,
    MultipleResult,
    RaiseOutcome,
    RollResult,
    SavageWildResult,
    SequenceResult,
    SimpleResult,
    SuccessFailResult,
    UsedDie,
    WegD6Result,
    calculate_raises,
    recompute_value,
)
from .roller import DiceRoller, roll_acing_die, roll_die
from .schemas import ROLL_REQUEST_SCHEMA, ROLL_RESULT_SCHEMA, validate_roll_payload, validate_roll_request

__all__ = [
    'DiceParser',
    'DiceEngine',
    'evaluate',
    'normalize',
    'Evaluator',
    'DiceRoller',
    'roll_die',
    'roll_acing_die',
    'EvaluationError',
    'DiceSyntaxError',
    'InvalidDieError',
    'UnsupportedSuffixError',
    'DivisionByZeroError',
    'DiceLimitError',
    'Die',
    'RaiseOutcome',
    'calculate_raises',
    'recompute_value',
    'KeepOperation',
    'UsedDie',
    'RollResult',
    'GenericResult',
    'SavageWildResult',
    'SuccessFailResult',
    'MultipleResult',
    'SimpleResult',
    'BoundedResult',
    'WegD6Result',
    'IronswornResult',
    'FlagResult',
    'SequenceResult',
    'ROLL_REQUEST_SCHEMA',
    'ROLL_RESULT_SCHEMA',
    'validate_roll_payload',
    'validate_roll_request',
]
