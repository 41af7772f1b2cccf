"""
Parse tree evaluator.

Walks a Command produced by DiceParser and turns it into a RollResult,
drawing every random number from one DiceRoller. The evaluator owns the
variable environment of a single evaluation: create a new Evaluator per
call.
"""

import logging
from typing import Dict, Optional, Tuple

from r2dice.core.config import Config, get_config

from .errors import DiceLimitError, EvaluationError, UnsupportedSuffixError
from .models import (
    BoundedResult,
    Die,
    FlagResult,
    GenericResult,
    IronswornResult,
    KeepOperation,
    MultipleResult,
    RollResult,
    SavageWildResult,
    SequenceResult,
    SimpleResult,
    SuccessFailResult,
    UsedDie,
    WegD6Result,
    apply_operator,
    calculate_raises,
)
from .nodes import (
    Assignment,
    BinaryOp,
    Bounded,
    CarcosaRoll,
    Command,
    FlagStatement,
    FudgeRoll,
    GenericRoll,
    GygaxRange,
    IntLiteral,
    IronswornRoll,
    Node,
    RollBatch,
    RollOnce,
    RollTimes,
    SavageExtrasRoll,
    SavageRoll,
    TargetNumberSuffix,
    UnaryOp,
    VariableRef,
    WegRoll,
)
from .roller import DiceRoller

logger = logging.getLogger(__name__)

DEFAULT_TARGET_NUMBER = 4
DEFAULT_RAISE_INTERVAL = 4
DEFAULT_WILD_DIE = 6
DEFAULT_FUDGE_DICE = 4

# Die sizes picked by a d6 for Carcosa rolls
CARCOSA_SIZES = (4, 6, 8, 10, 12, 20)


class Evaluator:
    """
    Evaluate parsed dice expressions.

    Each node class has a visit_<ClassName> method; visit() dispatches to
    it. Limits come from the Config (dice per roll, die sides, repetition
    count); the explosion budget lives on the DiceRoller.
    """

    def __init__(self, roller: DiceRoller, config: Optional[Config] = None):
        """
        Initialize evaluator.

        Args:
            roller: Source of all random draws
            config: Limits to enforce (global config when omitted)
        """
        config = config or get_config()
        self.roller = roller
        self.max_dice = config.max_dice
        self.max_sides = config.max_sides
        self.max_repeat = config.max_repeat
        self.variables: Dict[str, int] = {}

    def evaluate(self, command: Command) -> RollResult:
        """Evaluate a whole command."""
        return self.visit(command)

    def visit(self, node: Node) -> RollResult:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise UnsupportedSuffixError(f"No evaluation rule for {type(node).__name__}")
        return method(node)

    # ========== Limits ==========

    def _dice_count(self, count: Optional[int], default: int = 1) -> int:
        count = default if count is None else count
        if count < 1:
            raise EvaluationError(f"Dice count must be at least 1, got {count}")
        if count > self.max_dice:
            raise DiceLimitError(f"Cannot roll more than {self.max_dice} dice at once, got {count}")
        return count

    def _die_sides(self, sides: int) -> int:
        # InvalidDieError for sides < 1 comes from the roller
        if sides > self.max_sides:
            raise DiceLimitError(f"Dice cannot have more than {self.max_sides} sides, got {sides}")
        return sides

    def _repeat_count(self, count: int) -> int:
        if count < 1:
            raise EvaluationError(f"Repeat count must be at least 1, got {count}")
        if count > self.max_repeat:
            raise DiceLimitError(f"Cannot repeat a roll more than {self.max_repeat} times, got {count}")
        return count

    @staticmethod
    def _target_number(target: Optional[TargetNumberSuffix]) -> Tuple[int, int]:
        if target is None:
            return DEFAULT_TARGET_NUMBER, DEFAULT_RAISE_INTERVAL
        target_number = DEFAULT_TARGET_NUMBER if target.target is None else target.target
        raise_interval = DEFAULT_RAISE_INTERVAL if target.raise_interval is None else target.raise_interval
        return target_number, raise_interval

    def _roll(self, sides: int, acing: bool) -> Die:
        if acing:
            return self.roller.roll_acing_die(sides)
        return Die(value=self.roller.roll_die(sides))

    # ========== Statements ==========

    def visit_Command(self, node: Command) -> RollResult:
        results = []
        for statement in node.statements:
            logger.debug(f"Evaluating {type(statement).__name__} at position {statement.position}")
            results.append(self.visit(statement))

        if len(results) == 1:
            return results[0]
        return SequenceResult(value=results[-1].value, results=tuple(results))

    def visit_RollOnce(self, node: RollOnce) -> RollResult:
        return self.visit(node.expression)

    def visit_RollTimes(self, node: RollTimes) -> MultipleResult:
        count = self._repeat_count(node.count)
        rolls = tuple(self.visit(node.expression) for _ in range(count))
        return MultipleResult(value=sum(r.value for r in rolls), rolls=rolls)

    def visit_RollBatch(self, node: RollBatch) -> MultipleResult:
        count = self._repeat_count(node.count)
        iterations = []
        for _ in range(count):
            block = tuple(self.visit(expression) for expression in node.expressions)
            iterations.append(MultipleResult(value=sum(r.value for r in block), rolls=block))
        return MultipleResult(value=sum(r.value for r in iterations), rolls=tuple(iterations))

    def visit_IronswornRoll(self, node: IronswornRoll) -> IronswornResult:
        modifier = 0
        if node.modifier is not None:
            modifier = self.visit(node.modifier).value
            if node.operator == '-':
                modifier = -modifier

        action = self.roller.roll_die(6)
        challenge = (self.roller.roll_die(10), self.roller.roll_die(10))
        return IronswornResult(
            value=action + modifier,
            action_die=action,
            challenge_dice=challenge,
            modifier=modifier
        )

    def visit_FlagStatement(self, node: FlagStatement) -> FlagResult:
        return FlagResult(value=0, flag=node.name)

    # ========== Expressions ==========

    def visit_Assignment(self, node: Assignment) -> RollResult:
        result = self.visit(node.expression)
        self.variables[node.name] = result.value
        return result

    def visit_VariableRef(self, node: VariableRef) -> SimpleResult:
        if node.name not in self.variables:
            logger.debug(f"Variable @{node.name} is not bound, using 0")
        value = self.variables.get(node.name, 0)
        return SimpleResult(value=value, description=f"@{node.name}")

    def visit_IntLiteral(self, node: IntLiteral) -> SimpleResult:
        return SimpleResult(value=node.value)

    def visit_UnaryOp(self, node: UnaryOp) -> RollResult:
        operand = self.visit(node.operand)
        if node.operator == '+':
            return operand
        return SimpleResult(
            value=apply_operator('neg', [operand.value]),
            description=f"-{operand.value}",
            operator='neg',
            operands=(operand,)
        )

    def visit_BinaryOp(self, node: BinaryOp) -> RollResult:
        left = self.visit(node.left)
        right = self.visit(node.right)

        if node.operator in ('+', '-') and left.accepts_modifier:
            delta = right.value if node.operator == '+' else -right.value
            # Plain numbers live in `modifier` alone; anything else keeps its structure
            source = None if isinstance(node.right, IntLiteral) else right
            return left.add_modifier(delta, source)

        return SimpleResult(
            value=apply_operator(node.operator, [left.value, right.value]),
            description=f"{left.value} {node.operator} {right.value}",
            operator=node.operator,
            operands=(left, right)
        )

    def visit_Bounded(self, node: Bounded) -> BoundedResult:
        inner = self.visit(node.operand)
        minimum = None if node.minimum is None else self.visit(node.minimum).value
        maximum = None if node.maximum is None else self.visit(node.maximum).value
        if minimum is not None and maximum is not None and minimum > maximum:
            raise EvaluationError(f"Lower bound {minimum} is greater than upper bound {maximum}")

        value = inner.value
        if minimum is not None:
            value = max(value, minimum)
        if maximum is not None:
            value = min(value, maximum)
        return BoundedResult(value=value, inner=inner, minimum=minimum, maximum=maximum)

    # ========== Rolls ==========

    def visit_GygaxRange(self, node: GygaxRange) -> SimpleResult:
        value = self.roller.roll_range(node.low, node.high)
        return SimpleResult(value=value, description=f"{node.low}--{node.high}")

    def visit_GenericRoll(self, node: GenericRoll) -> RollResult:
        count = self._dice_count(node.count)
        sides = self._die_sides(node.sides)
        dice = tuple(self._roll(sides, node.acing) for _ in range(count))

        if node.success is not None:
            success_target = node.success.success_target
            fail_target = node.success.fail_target
            failures = 0
            if fail_target is not None:
                failures = sum(1 for d in dice if d.total <= fail_target)
            return SuccessFailResult(
                value=sum(1 for d in dice if d.total >= success_target),
                notation=node.notation,
                dice=dice,
                success_target=success_target,
                failures=failures,
                fail_target=fail_target
            )

        kept, dropped = dice, ()
        operation = KeepOperation.NONE
        if node.keep is not None:
            operation = node.keep.operation
            keep_count = 1 if node.keep.count is None else node.keep.count
            if keep_count < 1:
                raise EvaluationError(f"Must keep at least 1 die, got {keep_count}")
            # sorted() is stable: equal totals keep their roll order
            ordered = tuple(sorted(dice, key=lambda d: d.total, reverse=operation.keeps_highest))
            kept, dropped = ordered[:keep_count], ordered[keep_count:]

        value = sum(d.total for d in kept)
        target_number = raise_interval = raises = None
        if node.target is not None:
            target_number, raise_interval = self._target_number(node.target)
            raises = calculate_raises(value, target_number, raise_interval)

        return GenericResult(
            value=value,
            notation=node.notation,
            sides=sides,
            acing=node.acing,
            dice=dice,
            kept_dice=kept,
            dropped_dice=dropped,
            keep_operation=operation,
            target_number=target_number,
            raise_interval=raise_interval,
            raises=raises
        )

    def visit_SavageRoll(self, node: SavageRoll) -> RollResult:
        count = self._dice_count(node.count)
        trait_sides = self._die_sides(node.trait_sides)
        wild_sides = self._die_sides(DEFAULT_WILD_DIE if node.wild_sides is None else node.wild_sides)
        target_number, raise_interval = self._target_number(node.target)

        rolls = []
        for _ in range(count):
            trait = self.roller.roll_acing_die(trait_sides)
            wild = self.roller.roll_acing_die(wild_sides)
            # Ties go to the trait die
            used = UsedDie.TRAIT if trait.total >= wild.total else UsedDie.WILD
            value = max(trait.total, wild.total)
            rolls.append(SavageWildResult(
                value=value,
                notation=node.notation,
                trait_die=trait,
                wild_die=wild,
                used_die=used,
                raises=calculate_raises(value, target_number, raise_interval),
                target_number=target_number,
                raise_interval=raise_interval
            ))

        if count == 1:
            return rolls[0]
        return MultipleResult(value=sum(r.value for r in rolls), rolls=tuple(rolls))

    def visit_SavageExtrasRoll(self, node: SavageExtrasRoll) -> RollResult:
        count = self._dice_count(node.count)
        sides = self._die_sides(node.sides)

        rolls = []
        for _ in range(count):
            die = self.roller.roll_acing_die(sides)
            target_number = raise_interval = raises = None
            if node.target is not None:
                target_number, raise_interval = self._target_number(node.target)
                raises = calculate_raises(die.total, target_number, raise_interval)
            rolls.append(GenericResult(
                value=die.total,
                notation=node.notation,
                sides=sides,
                acing=True,
                dice=(die,),
                kept_dice=(die,),
                target_number=target_number,
                raise_interval=raise_interval,
                raises=raises
            ))

        if count == 1:
            return rolls[0]
        return MultipleResult(value=sum(r.value for r in rolls), rolls=tuple(rolls))

    def visit_FudgeRoll(self, node: FudgeRoll) -> GenericResult:
        count = self._dice_count(node.count, default=DEFAULT_FUDGE_DICE)
        dice = tuple(Die(value=self.roller.roll_fudge()) for _ in range(count))
        return GenericResult(
            value=sum(d.total for d in dice),
            notation=f"{'' if node.count is None else node.count}dF",
            sides=3,
            acing=False,
            dice=dice,
            kept_dice=dice
        )

    def visit_CarcosaRoll(self, node: CarcosaRoll) -> GenericResult:
        count = self._dice_count(node.count)
        sides = CARCOSA_SIZES[self.roller.roll_die(6) - 1]
        dice = tuple(Die(value=self.roller.roll_die(sides)) for _ in range(count))
        return GenericResult(
            value=sum(d.total for d in dice),
            notation=f"{'' if node.count is None else node.count}d?(d{sides})",
            sides=sides,
            acing=False,
            dice=dice,
            kept_dice=dice
        )

    def visit_WegRoll(self, node: WegRoll) -> WegD6Result:
        count = self._dice_count(node.count)
        dice = tuple(self.roller.roll_die(6) for _ in range(count - 1))
        wild = self.roller.roll_acing_die(6)
        return WegD6Result(value=sum(dice) + wild.total, dice=dice, wild_die=wild)
