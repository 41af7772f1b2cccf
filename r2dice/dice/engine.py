"""
Evaluation entry points.

DiceEngine binds a Config to the parse/evaluate pipeline:

    raw text -> normalize() -> DiceParser.parse() -> Evaluator -> RollResult

evaluate() raises EvaluationError subclasses; roll() returns a Result
instead, for callers that want a value they can inspect.
"""

import logging
from typing import Optional

from r2dice.core.config import Config, get_config
from r2dice.core.result import Result

from .dice_parser import DiceParser
from .errors import DiceSyntaxError, EvaluationError
from .evaluator import Evaluator
from .models import RollResult
from .normalizer import normalize as normalize_expression
from .roller import DiceRoller

logger = logging.getLogger(__name__)


class DiceEngine:
    """
    Parses and evaluates R2 dice expressions under one configuration.

    The engine holds no per-evaluation state: every call gets its own
    DiceRoller and variable environment, so one engine can serve
    concurrent callers.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize engine.

        Args:
            config: Limits and defaults (global config when omitted)
        """
        self.config = config or get_config()

    def make_roller(self, seed: Optional[int] = None) -> DiceRoller:
        """Build a fresh roller; falls back to the configured seed."""
        return DiceRoller(
            seed=seed if seed is not None else self.config.seed,
            max_chain_length=self.config.max_chain_length
        )

    def normalize(self, expression: str) -> str:
        """Reorder single-roll suffixes into grammar order."""
        return normalize_expression(expression)

    def evaluate(
        self,
        expression: str,
        *,
        roller: Optional[DiceRoller] = None,
        normalize: Optional[bool] = None,
        seed: Optional[int] = None
    ) -> RollResult:
        """
        Evaluate an expression.

        Args:
            expression: R2 dice expression
            roller: Random source (a fresh one when omitted)
            normalize: Normalize suffix order first (config default when None)
            seed: Seed for the fresh roller; ignored when roller is given

        Returns:
            RollResult variant

        Raises:
            EvaluationError: If the expression cannot be parsed or evaluated
        """
        if normalize is None:
            normalize = self.config.normalize
        if normalize and isinstance(expression, str):
            normalized = normalize_expression(expression)
            if normalized != expression:
                logger.debug(f"Normalized {expression!r} to {normalized!r}")
            expression = normalized

        command = DiceParser.parse(expression)
        evaluator = Evaluator(roller or self.make_roller(seed), self.config)
        result = evaluator.evaluate(command)
        logger.debug(f"{expression!r} -> {result.kind} {result.value}")
        return result

    def roll(
        self,
        expression: str,
        seed: Optional[int] = None,
        normalize: Optional[bool] = None
    ) -> Result:
        """
        Evaluate an expression without raising on bad input.

        Args:
            expression: R2 dice expression
            seed: Optional seed for a repeatable roll
            normalize: Normalize suffix order first (config default when None)

        Returns:
            Result with data {'expression', 'normalized', 'result'} on success,
            or the error message, ErrorCode and details on failure

        Example:
            result = engine.roll("4d6k3")
            if result.success:
                print(result.data['result'].value)
        """
        if normalize is None:
            normalize = self.config.normalize
        normalized = expression
        if normalize and isinstance(expression, str):
            normalized = normalize_expression(expression)

        try:
            result = self.evaluate(normalized, normalize=False, seed=seed)
        except EvaluationError as e:
            logger.warning(f"Roll failed for {expression!r}: {e.message}")
            details = {'position': e.position} if isinstance(e, DiceSyntaxError) else None
            return Result.fail(e.message, e.code, details)

        return Result.ok({
            'expression': expression,
            'normalized': normalized,
            'result': result
        })


def evaluate(
    expression: str,
    *,
    roller: Optional[DiceRoller] = None,
    normalize: bool = True,
    config: Optional[Config] = None
) -> RollResult:
    """
    Evaluate an R2 dice expression.

    Examples:
        evaluate("2d6+3").value
        evaluate("s8t6").raises.success
        evaluate("@hp := 2d6+10; @hp*2").value

    Raises:
        EvaluationError: If the expression cannot be parsed or evaluated
    """
    return DiceEngine(config).evaluate(expression, roller=roller, normalize=normalize)


def normalize(expression: str) -> str:
    """Reorder single-roll suffixes into grammar order."""
    return normalize_expression(expression)


__all__ = ['DiceEngine', 'evaluate', 'normalize']
