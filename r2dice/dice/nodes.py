"""
Parse tree nodes for R2 dice expressions.

One frozen dataclass per grammar rule. The parser builds them, the
evaluator dispatches on the class name (visit_<ClassName>).
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import KeepOperation


class Node:
    """Base class of every parse tree node."""


# ========== Suffixes ==========

@dataclass(frozen=True)
class TargetNumberSuffix(Node):
    """`tN`, `rM` or `tNrM`; a missing part falls back to its default."""
    target: Optional[int]
    raise_interval: Optional[int]

    @property
    def notation(self) -> str:
        text = f"t{self.target}" if self.target is not None else ""
        if self.raise_interval is not None:
            text += f"r{self.raise_interval}"
        return text


_KEEP_TEXT = {
    KeepOperation.HIGHEST: 'k',
    KeepOperation.LOWEST: 'kl',
    KeepOperation.ADVANTAGE: 'adv',
    KeepOperation.DISADVANTAGE: 'dis',
}


@dataclass(frozen=True)
class KeepSuffix(Node):
    """`k`, `kl`, `adv` or `dis`, with an optional count (default 1)."""
    operation: KeepOperation
    count: Optional[int]

    @property
    def notation(self) -> str:
        return _KEEP_TEXT[self.operation] + ('' if self.count is None else str(self.count))


@dataclass(frozen=True)
class SuccessSuffix(Node):
    """`sN` success threshold with an optional `fM` failure threshold."""
    success_target: int
    fail_target: Optional[int]

    @property
    def notation(self) -> str:
        text = f"s{self.success_target}"
        return text if self.fail_target is None else text + f"f{self.fail_target}"


# ========== Terms ==========

@dataclass(frozen=True)
class IntLiteral(Node):
    value: int
    position: int


@dataclass(frozen=True)
class VariableRef(Node):
    name: str
    position: int


@dataclass(frozen=True)
class GygaxRange(Node):
    """`A--B`: uniform integer between A and B inclusive."""
    low: int
    high: int
    position: int


@dataclass(frozen=True)
class GenericRoll(Node):
    """`[N]d(S|%)[!][suffix]`."""
    count: Optional[int]
    sides: int
    percentile: bool
    acing: bool
    keep: Optional[KeepSuffix]
    success: Optional[SuccessSuffix]
    target: Optional[TargetNumberSuffix]
    position: int

    @property
    def notation(self) -> str:
        text = f"{self.count or ''}d{'%' if self.percentile else self.sides}"
        if self.acing:
            text += "!"
        for suffix in (self.keep, self.success, self.target):
            if suffix is not None:
                text += suffix.notation
        return text


@dataclass(frozen=True)
class FudgeRoll(Node):
    """`[N]dF`; four dice when N is omitted."""
    count: Optional[int]
    position: int


@dataclass(frozen=True)
class CarcosaRoll(Node):
    """`[N]d?`: the die size itself is rolled first."""
    count: Optional[int]
    position: int


@dataclass(frozen=True)
class SavageRoll(Node):
    """`[N]sT[wW][tn]`: Savage Worlds trait die with a wild die."""
    count: Optional[int]
    trait_sides: int
    wild_sides: Optional[int]
    target: Optional[TargetNumberSuffix]
    position: int

    @property
    def notation(self) -> str:
        text = f"s{self.trait_sides}"
        if self.wild_sides is not None:
            text += f"w{self.wild_sides}"
        if self.target is not None:
            text += self.target.notation
        return text


@dataclass(frozen=True)
class SavageExtrasRoll(Node):
    """`[N]eS[tn]`: Savage Worlds extras, acing die without a wild die."""
    count: Optional[int]
    sides: int
    target: Optional[TargetNumberSuffix]
    position: int

    @property
    def notation(self) -> str:
        text = f"e{self.sides}"
        return text if self.target is None else text + self.target.notation


@dataclass(frozen=True)
class WegRoll(Node):
    """`NW`: West End Games D6, the last die is an acing wild die."""
    count: int
    position: int


# ========== Expressions ==========

@dataclass(frozen=True)
class BinaryOp(Node):
    operator: str
    left: Node
    right: Node
    position: int


@dataclass(frozen=True)
class UnaryOp(Node):
    operator: str
    operand: Node
    position: int


@dataclass(frozen=True)
class Bounded(Node):
    """`expr[min:max]`; either bound may be omitted."""
    operand: Node
    minimum: Optional[Node]
    maximum: Optional[Node]
    position: int


@dataclass(frozen=True)
class Assignment(Node):
    """`@name := expr`."""
    name: str
    expression: Node
    position: int


# ========== Statements ==========

@dataclass(frozen=True)
class RollOnce(Node):
    expression: Node
    position: int


@dataclass(frozen=True)
class RollTimes(Node):
    """`Nx expr`."""
    count: int
    expression: Node
    position: int


@dataclass(frozen=True)
class RollBatch(Node):
    """`Nx[expr; expr; ...]`."""
    count: int
    expressions: Tuple[Node, ...]
    position: int


@dataclass(frozen=True)
class IronswornRoll(Node):
    """`iron[+/-mod]`."""
    operator: Optional[str]
    modifier: Optional[Node]
    position: int


@dataclass(frozen=True)
class FlagStatement(Node):
    """`#name`."""
    name: str
    position: int


@dataclass(frozen=True)
class Command(Node):
    """Top level: statements separated by ';'."""
    statements: Tuple[Node, ...]
