"""
Result model for evaluated dice expressions.

Every evaluation returns one RollResult variant. Each variant keeps the
structure a presentation layer needs (individual dice, explosion chains,
kept/dropped dice, modifiers, target-number outcomes) and can recompute
its own value from that structure:

    result = evaluate("4d6k3+2")
    assert result.value == result.recompute()

Variants are frozen dataclasses; "changing" one (for example adding a
modifier) returns a new instance.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from .errors import DiceLimitError, DivisionByZeroError, EvaluationError

# Arithmetic results must stay below this magnitude
MAX_RESULT_DIGITS = 100


class KeepOperation(Enum):
    """Which dice survive a keep suffix."""
    NONE = "none"
    HIGHEST = "highest"
    LOWEST = "lowest"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"

    @property
    def keeps_highest(self) -> bool:
        return self in (KeepOperation.HIGHEST, KeepOperation.ADVANTAGE)


class UsedDie(Enum):
    """Which die of a Savage Worlds wild roll produced the result."""
    TRAIT = "trait"
    WILD = "wild"


@dataclass(frozen=True)
class Die:
    """
    One die outcome, possibly followed by an explosion chain.

    `chain` is the die rolled because this one aced. `total` is the sum of
    every value in the chain and always equals sum(self.rolls).
    """
    value: int
    exploded: bool = False
    chain: Optional['Die'] = None

    @classmethod
    def from_rolls(cls, rolls: Sequence[int]) -> 'Die':
        """Build a chain from consecutive values; every link but the last exploded."""
        if not rolls:
            raise ValueError("A die needs at least one roll")
        die = None
        for value in reversed(rolls):
            die = cls(value=value, exploded=die is not None, chain=die)
        return die

    @property
    def total(self) -> int:
        return sum(self.rolls)

    @property
    def rolls(self) -> List[int]:
        """Every value in the chain, first roll first."""
        values = []
        die = self
        while die is not None:
            values.append(die.value)
            die = die.chain
        return values

    @property
    def explosions(self) -> int:
        return len(self.rolls) - 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'exploded': self.exploded,
            'total': self.total,
            'rolls': self.rolls,
            'chain': self.chain.to_dict() if self.chain else None,
        }

    def __str__(self) -> str:
        rolls = self.rolls
        if len(rolls) > 1:
            return f"[{'+'.join(str(r) for r in rolls)}]={self.total}"
        return str(self.value)


@dataclass(frozen=True)
class RaiseOutcome:
    """Success and raises of a total measured against a target number."""
    success: bool
    raises: int
    margin: int

    def describe(self) -> str:
        if not self.success:
            return f"Failed by {abs(self.margin)}"
        if self.raises > 0:
            return f"Success with {self.raises} raise{'s' if self.raises > 1 else ''}"
        return "Success"

    def to_dict(self) -> Dict[str, Any]:
        return {'success': self.success, 'raises': self.raises, 'margin': self.margin}


def calculate_raises(total: int, target_number: int = 4, raise_interval: int = 4) -> RaiseOutcome:
    """
    Measure a total against a target number (Savage Worlds raises).

    Examples:
        calculate_raises(12, 4, 4) -> RaiseOutcome(success=True, raises=2, margin=8)
        calculate_raises(3, 4, 4)  -> RaiseOutcome(success=False, raises=0, margin=-1)

    Raises:
        EvaluationError: If raise_interval is smaller than 1
    """
    if raise_interval < 1:
        raise EvaluationError(f"Raise interval must be at least 1, got {raise_interval}")
    margin = total - target_number
    success = margin >= 0
    raises = margin // raise_interval if success else 0
    return RaiseOutcome(success=success, raises=raises, margin=margin)


def truncating_divide(left: int, right: int) -> int:
    """Integer division rounding toward zero: -7 / 2 == -3."""
    if right == 0:
        raise DivisionByZeroError("Division by zero")
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right >= 0) else -quotient


def truncating_modulo(left: int, right: int) -> int:
    """Remainder with the sign of the dividend: -7 % 2 == -1."""
    if right == 0:
        raise DivisionByZeroError("Modulo by zero")
    return left - right * truncating_divide(left, right)


def apply_operator(operator: str, operands: Sequence[int]) -> int:
    """
    Apply an arithmetic operator from the grammar to operand values.

    Raises:
        DivisionByZeroError: On / or % by zero
        DiceLimitError: If the result has more than MAX_RESULT_DIGITS digits
    """
    if operator == 'neg':
        return -operands[0]
    left, right = operands
    if operator == '+':
        result = left + right
    elif operator == '-':
        result = left - right
    elif operator == '*':
        result = left * right
    elif operator == '/':
        result = truncating_divide(left, right)
    elif operator == '%':
        result = truncating_modulo(left, right)
    else:
        raise EvaluationError(f"Unknown operator: {operator}")

    if abs(result) >= 10 ** MAX_RESULT_DIGITS:
        raise DiceLimitError(f"Arithmetic result has more than {MAX_RESULT_DIGITS} digits")
    return result


def _serialize(value: Any) -> Any:
    if isinstance(value, (RollResult, Die, RaiseOutcome)):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class RollResult:
    """Base class of every evaluation result; `kind` tags the variant."""
    value: int

    kind: ClassVar[str] = "result"
    # Whether a trailing +N/-N keeps this variant (and lands in `modifier`)
    accepts_modifier: ClassVar[bool] = False

    def recompute(self) -> int:
        """Recompute `value` from the variant's structural fields."""
        raise NotImplementedError

    def add_modifier(self, delta: int, source: Optional['RollResult'] = None) -> 'RollResult':
        """
        Add delta to the value and modifier.

        `source` is the operand the delta came from when it carries dice
        of its own (2d6+1d4); it is kept in `modifier_sources`.
        """
        raise NotImplementedError(f"{self.kind} results do not take modifiers")

    def describe(self) -> str:
        return str(self.value)

    def to_dict(self) -> Dict[str, Any]:
        data = {'kind': self.kind}
        for f in fields(self):
            data[f.name] = _serialize(getattr(self, f.name))
        data['description'] = self.describe()
        return data

    def __str__(self) -> str:
        return self.describe()


def _with_source(sources: Tuple['RollResult', ...], source: Optional['RollResult']) -> Tuple['RollResult', ...]:
    return sources if source is None else sources + (source,)


def _format_modifier(modifier: int) -> str:
    if modifier > 0:
        return f" + {modifier}"
    if modifier < 0:
        return f" - {abs(modifier)}"
    return ""


@dataclass(frozen=True)
class GenericResult(RollResult):
    """Plain NdS roll, optionally acing, with keep or target-number suffixes."""
    notation: str
    sides: int
    acing: bool
    dice: Tuple[Die, ...]
    kept_dice: Tuple[Die, ...]
    dropped_dice: Tuple[Die, ...] = ()
    keep_operation: KeepOperation = KeepOperation.NONE
    modifier: int = 0
    target_number: Optional[int] = None
    raise_interval: Optional[int] = None
    raises: Optional[RaiseOutcome] = None
    modifier_sources: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "generic"
    accepts_modifier: ClassVar[bool] = True

    def recompute(self) -> int:
        return sum(d.total for d in self.kept_dice) + self.modifier

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'GenericResult':
        value = self.value + delta
        raises = self.raises
        if self.target_number is not None:
            raises = calculate_raises(value, self.target_number, self.raise_interval)
        return replace(
            self,
            value=value,
            modifier=self.modifier + delta,
            raises=raises,
            modifier_sources=_with_source(self.modifier_sources, source)
        )

    def describe(self) -> str:
        text = f"{self.notation}: [{', '.join(str(d) for d in self.kept_dice)}]"
        if self.dropped_dice:
            text += f" dropped [{', '.join(str(d) for d in self.dropped_dice)}]"
        text += f"{_format_modifier(self.modifier)} = {self.value}"
        if self.raises is not None:
            text += f" ({self.raises.describe()} vs TN {self.target_number})"
        return text


@dataclass(frozen=True)
class SavageWildResult(RollResult):
    """Savage Worlds trait die plus wild die; the higher total is used."""
    notation: str
    trait_die: Die
    wild_die: Die
    used_die: UsedDie
    raises: RaiseOutcome
    modifier: int = 0
    target_number: int = 4
    raise_interval: int = 4
    modifier_sources: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "savage_wild"
    accepts_modifier: ClassVar[bool] = True

    @property
    def trait_total(self) -> int:
        return self.trait_die.total + self.modifier

    @property
    def wild_total(self) -> int:
        return self.wild_die.total + self.modifier

    def recompute(self) -> int:
        return max(self.trait_die.total, self.wild_die.total) + self.modifier

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'SavageWildResult':
        value = self.value + delta
        return replace(
            self,
            value=value,
            modifier=self.modifier + delta,
            raises=calculate_raises(value, self.target_number, self.raise_interval),
            modifier_sources=_with_source(self.modifier_sources, source)
        )

    def describe(self) -> str:
        return (
            f"{self.notation}: trait {self.trait_die}, wild {self.wild_die}"
            f"{_format_modifier(self.modifier)} = {self.value} "
            f"({self.raises.describe()} vs TN {self.target_number})"
        )


@dataclass(frozen=True)
class SuccessFailResult(RollResult):
    """Dice counted against success (and optionally failure) thresholds."""
    notation: str
    dice: Tuple[Die, ...]
    success_target: int
    failures: int
    fail_target: Optional[int] = None
    modifier: int = 0
    modifier_sources: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "success_fail"
    accepts_modifier: ClassVar[bool] = True

    @property
    def successes(self) -> int:
        return sum(1 for d in self.dice if d.total >= self.success_target)

    def recompute(self) -> int:
        return self.successes + self.modifier

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'SuccessFailResult':
        return replace(
            self,
            value=self.value + delta,
            modifier=self.modifier + delta,
            modifier_sources=_with_source(self.modifier_sources, source)
        )

    def describe(self) -> str:
        text = (
            f"{self.notation}: [{', '.join(str(d) for d in self.dice)}] "
            f"successes (>={self.success_target}): {self.successes}"
        )
        if self.fail_target is not None:
            text += f", failures (<={self.fail_target}): {self.failures}"
        return text + f"{_format_modifier(self.modifier)} = {self.value}"


@dataclass(frozen=True)
class MultipleResult(RollResult):
    """Repeated rolls; the value is the sum of every roll."""
    rolls: Tuple[RollResult, ...]

    kind: ClassVar[str] = "multiple"
    accepts_modifier: ClassVar[bool] = True

    def recompute(self) -> int:
        return sum(r.value for r in self.rolls)

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'MultipleResult':
        # Each roll is modified on its own (3s8+2 is three rolls of s8+2)
        rolls = tuple(add_to_result(r, delta, source) for r in self.rolls)
        return MultipleResult(value=sum(r.value for r in rolls), rolls=rolls)

    def describe(self) -> str:
        lines = [f"  Roll {i}: {r.describe()}" for i, r in enumerate(self.rolls, 1)]
        return f"{len(self.rolls)}x rolls:\n" + "\n".join(lines) + f"\nTotal: {self.value}"


@dataclass(frozen=True)
class SimpleResult(RollResult):
    """Numeric result without dice of its own: literals, variables, arithmetic."""
    description: str = ""
    operator: Optional[str] = None
    operands: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "simple"

    def recompute(self) -> int:
        if self.operator is None:
            return self.value
        return apply_operator(self.operator, [o.value for o in self.operands])

    def describe(self) -> str:
        if self.description:
            return f"{self.description} = {self.value}"
        return str(self.value)


@dataclass(frozen=True)
class BoundedResult(RollResult):
    """Inner result clamped into [minimum, maximum]; either bound may be open."""
    inner: RollResult
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    kind: ClassVar[str] = "bounded"

    def recompute(self) -> int:
        value = self.inner.value
        if self.minimum is not None and value < self.minimum:
            value = self.minimum
        if self.maximum is not None and value > self.maximum:
            value = self.maximum
        return value

    def describe(self) -> str:
        low = '' if self.minimum is None else self.minimum
        high = '' if self.maximum is None else self.maximum
        return f"{self.inner.value} bounded [{low}:{high}] = {self.value}"


@dataclass(frozen=True)
class WegD6Result(RollResult):
    """West End Games D6 System: plain d6s plus one acing wild die."""
    dice: Tuple[int, ...]
    wild_die: Die
    modifier: int = 0
    modifier_sources: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "weg_d6"
    accepts_modifier: ClassVar[bool] = True

    def recompute(self) -> int:
        return sum(self.dice) + self.wild_die.total + self.modifier

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'WegD6Result':
        return replace(
            self,
            value=self.value + delta,
            modifier=self.modifier + delta,
            modifier_sources=_with_source(self.modifier_sources, source)
        )

    def describe(self) -> str:
        return (
            f"{len(self.dice) + 1}W: [{', '.join(str(d) for d in self.dice)}] wild {self.wild_die}"
            f"{_format_modifier(self.modifier)} = {self.value}"
        )


@dataclass(frozen=True)
class IronswornResult(RollResult):
    """Ironsworn action roll: d6 + modifier against two d10 challenge dice."""
    action_die: int
    challenge_dice: Tuple[int, int]
    modifier: int = 0
    modifier_sources: Tuple[RollResult, ...] = ()

    kind: ClassVar[str] = "ironsworn"
    accepts_modifier: ClassVar[bool] = True

    @property
    def hits(self) -> int:
        return sum(1 for c in self.challenge_dice if self.value > c)

    @property
    def match(self) -> bool:
        return self.challenge_dice[0] == self.challenge_dice[1]

    @property
    def outcome(self) -> str:
        return {2: 'strong_hit', 1: 'weak_hit'}.get(self.hits, 'miss')

    def recompute(self) -> int:
        return self.action_die + self.modifier

    def add_modifier(self, delta: int, source: Optional[RollResult] = None) -> 'IronswornResult':
        return replace(
            self,
            value=self.value + delta,
            modifier=self.modifier + delta,
            modifier_sources=_with_source(self.modifier_sources, source)
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'hits': self.hits, 'match': self.match, 'outcome': self.outcome})
        return data

    def describe(self) -> str:
        outcome = self.outcome.replace('_', ' ').title()
        if self.match:
            outcome += " (Match!)"
        first, second = self.challenge_dice
        return f"Action: {self.value} vs Challenge: {first}, {second} -> {outcome}"


@dataclass(frozen=True)
class FlagResult(RollResult):
    """A `#name` statement; carries no number, only a marker for the host."""
    flag: str

    kind: ClassVar[str] = "flag"

    def recompute(self) -> int:
        return 0

    def describe(self) -> str:
        return f"Flag: {self.flag}"


@dataclass(frozen=True)
class SequenceResult(RollResult):
    """Several `;`-separated statements; the value is the last statement's."""
    results: Tuple[RollResult, ...]

    kind: ClassVar[str] = "sequence"

    def recompute(self) -> int:
        return self.results[-1].value

    def describe(self) -> str:
        return "\n".join(f"[{i}] {r.describe()}" for i, r in enumerate(self.results, 1))


def add_to_result(result: RollResult, delta: int, source: Optional[RollResult] = None) -> RollResult:
    """
    Add a modifier, keeping the variant when it takes modifiers.

    Other variants become a simple sum; `source` only survives on variants
    that take modifiers.
    """
    if result.accepts_modifier:
        return result.add_modifier(delta, source)
    operator = '+' if delta >= 0 else '-'
    modifier = SimpleResult(value=abs(delta))
    return SimpleResult(
        value=result.value + delta,
        description=f"{result.value} {operator} {abs(delta)}",
        operator=operator,
        operands=(result, modifier)
    )


def recompute_value(result: RollResult) -> int:
    """Recompute a result's value from its structure alone."""
    return result.recompute()


__all__ = [
    'KeepOperation',
    'UsedDie',
    'Die',
    'RaiseOutcome',
    'calculate_raises',
    'truncating_divide',
    'truncating_modulo',
    'apply_operator',
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
    'add_to_result',
    'recompute_value',
]
