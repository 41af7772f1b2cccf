"""
Recursive-descent parser for the R2 dice grammar.

Supports:
- 2d6, d%, 4d6!, 4d6k3, 2d20adv, 10d6s5f1, 3d8t5r2 (generic rolls)
- s8, 2s10w8t6r2 (Savage Worlds wild rolls), 4e8 (extras)
- 4dF (Fudge), 2d? (Carcosa), 5W (West End D6), 1--100 (Gygax range)
- + - * / % arithmetic, parentheses, expr[min:max] bounds
- @var := expr assignments and @var references
- 3x2d6 repetition, 2x[d20; 2d6] batches, iron+2 (Ironsworn), #flag
- statements separated by ';'

Grammar (precedence from loosest to tightest):

    command        := statement (';' statement)* EOF
    statement      := INT 'x' ('[' expr (';' expr)* ']' | expr)
                    | 'iron' (('+'|'-') unary)? | FLAG | expr
    expr           := VAR ':=' expr | additive
    additive       := multiplicative (('+'|'-') multiplicative)*
    multiplicative := unary (('*'|'/'|'%') unary)*
    unary          := ('-'|'+') unary | postfix
    postfix        := primary ('[' expr? ':' expr? ']')*
"""

from typing import List, Optional

from .errors import DiceSyntaxError
from .lexer import ASSIGN, EOF, FLAG, GYGAX, INT, VAR, Token, tokenize
from .models import KeepOperation
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
    KeepSuffix,
    Node,
    RollBatch,
    RollOnce,
    RollTimes,
    SavageExtrasRoll,
    SavageRoll,
    SuccessSuffix,
    TargetNumberSuffix,
    UnaryOp,
    VariableRef,
    WegRoll,
)

# Deepest parse tree accepted: parentheses, prefix signs, bounds,
# assignments and chained operators each add one level
MAX_NESTING_DEPTH = 50

_KEEP_OPERATIONS = {
    'k': KeepOperation.HIGHEST,
    'kl': KeepOperation.LOWEST,
    'adv': KeepOperation.ADVANTAGE,
    'dis': KeepOperation.DISADVANTAGE,
}


class _Parser:
    """Single-use parser over one token list."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    # ========== Token helpers ==========

    def peek(self, offset: int = 0) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.type != EOF:
            self.index += 1
        return token

    def error(self, message: str, token: Optional[Token] = None) -> DiceSyntaxError:
        token = token or self.peek()
        return DiceSyntaxError(token.position, message)

    def descend(self, token: Token):
        """Enter one nesting level; callers restore self.depth when done."""
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise self.error(f"Expression is nested more than {MAX_NESTING_DEPTH} levels deep", token)

    def expect_symbol(self, symbol: str) -> Token:
        token = self.peek()
        if not token.is_symbol(symbol):
            raise self.error(f"Expected '{symbol}', found {token}")
        return self.advance()

    def expect_word(self, word: str) -> Token:
        token = self.peek()
        if not token.is_word(word):
            raise self.error(f"Expected '{word}', found {token}")
        return self.advance()

    def expect_int(self, what: str) -> int:
        token = self.peek()
        if token.type != INT:
            raise self.error(f"Expected {what}, found {token}")
        self.advance()
        return int(token.text)

    def optional_int(self) -> Optional[int]:
        if self.peek().type == INT:
            return int(self.advance().text)
        return None

    # ========== Statements ==========

    def parse_command(self) -> Command:
        statements = [self.parse_statement()]
        while self.peek().is_symbol(';'):
            self.advance()
            statements.append(self.parse_statement())

        token = self.peek()
        if token.type != EOF:
            raise self.error(f"Unexpected {token}")
        return Command(statements=tuple(statements))

    def parse_statement(self) -> Node:
        token = self.peek()

        if token.type == INT and self.peek(1).is_word('x'):
            count = int(self.advance().text)
            self.advance()
            if self.peek().is_symbol('['):
                self.advance()
                expressions = [self.parse_expr()]
                while self.peek().is_symbol(';'):
                    self.advance()
                    expressions.append(self.parse_expr())
                self.expect_symbol(']')
                return RollBatch(count=count, expressions=tuple(expressions), position=token.position)
            return RollTimes(count=count, expression=self.parse_expr(), position=token.position)

        if token.is_word('iron'):
            self.advance()
            operator = modifier = None
            if self.peek().is_symbol('+', '-'):
                operator = self.advance().text
                modifier = self.parse_unary()
            return IronswornRoll(operator=operator, modifier=modifier, position=token.position)

        if token.type == FLAG:
            self.advance()
            return FlagStatement(name=token.text, position=token.position)

        if token.type == EOF:
            raise self.error("Expected an expression, found end of input")

        return RollOnce(expression=self.parse_expr(), position=token.position)

    # ========== Expressions ==========

    def parse_expr(self) -> Node:
        token = self.peek()
        depth = self.depth
        self.descend(token)
        try:
            if token.type == VAR and self.peek(1).type == ASSIGN:
                self.advance()
                self.advance()
                return Assignment(name=token.text, expression=self.parse_expr(), position=token.position)
            return self.parse_additive()
        finally:
            self.depth = depth

    def parse_additive(self) -> Node:
        left = self.parse_multiplicative()
        depth = self.depth
        try:
            while self.peek().is_symbol('+', '-'):
                operator = self.advance()
                self.descend(operator)
                right = self.parse_multiplicative()
                left = BinaryOp(operator=operator.text, left=left, right=right, position=operator.position)
        finally:
            self.depth = depth
        return left

    def parse_multiplicative(self) -> Node:
        left = self.parse_unary()
        depth = self.depth
        try:
            while self.peek().is_symbol('*', '/', '%'):
                operator = self.advance()
                self.descend(operator)
                right = self.parse_unary()
                left = BinaryOp(operator=operator.text, left=left, right=right, position=operator.position)
        finally:
            self.depth = depth
        return left

    def parse_unary(self) -> Node:
        token = self.peek()
        if token.is_symbol('-', '+'):
            self.advance()
            depth = self.depth
            self.descend(token)
            try:
                operand = self.parse_unary()
            finally:
                self.depth = depth
            return UnaryOp(operator=token.text, operand=operand, position=token.position)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        depth = self.depth
        try:
            while self.peek().is_symbol('['):
                bracket = self.advance()
                self.descend(bracket)
                minimum = None if self.peek().is_symbol(':') else self.parse_expr()
                self.expect_symbol(':')
                maximum = None if self.peek().is_symbol(']') else self.parse_expr()
                self.expect_symbol(']')
                node = Bounded(operand=node, minimum=minimum, maximum=maximum, position=bracket.position)
        finally:
            self.depth = depth
        return node

    def parse_primary(self) -> Node:
        token = self.peek()

        if token.type == GYGAX:
            self.advance()
            low, high = token.text.split('--')
            return GygaxRange(low=int(low), high=int(high), position=token.position)

        if token.type == VAR:
            self.advance()
            return VariableRef(name=token.text, position=token.position)

        if token.is_symbol('('):
            self.advance()
            expression = self.parse_expr()
            self.expect_symbol(')')
            return expression

        count = None
        if token.type == INT:
            following = self.peek(1)
            if not following.is_word('d', 's', 'e', 'w'):
                self.advance()
                return IntLiteral(value=int(token.text), position=token.position)
            count = int(self.advance().text)

        keyword = self.peek()
        if keyword.is_word('d'):
            return self.parse_dice(count, token.position)
        if keyword.is_word('s'):
            return self.parse_savage(count, token.position)
        if keyword.is_word('e'):
            return self.parse_extras(count, token.position)
        if keyword.is_word('w') and count is not None:
            self.advance()
            return WegRoll(count=count, position=token.position)

        raise self.error(f"Expected a number, roll, variable or '(', found {keyword}", keyword)

    # ========== Rolls ==========

    def parse_dice(self, count: Optional[int], position: int) -> Node:
        self.expect_word('d')
        token = self.peek()

        if token.is_word('f'):
            self.advance()
            return FudgeRoll(count=count, position=position)
        if token.is_symbol('?'):
            self.advance()
            return CarcosaRoll(count=count, position=position)

        percentile = token.is_symbol('%')
        if percentile:
            self.advance()
            sides = 100
        else:
            sides = self.expect_int("die sides after 'd'")

        acing = self.peek().is_symbol('!')
        if acing:
            self.advance()

        keep = success = target = None
        token = self.peek()
        if token.is_word(*_KEEP_OPERATIONS):
            self.advance()
            keep = KeepSuffix(operation=_KEEP_OPERATIONS[token.text], count=self.optional_int())
            target = self.parse_target_number()
        elif token.is_word('s'):
            self.advance()
            success_target = self.expect_int("success threshold after 's'")
            fail_target = None
            if self.peek().is_word('f'):
                self.advance()
                fail_target = self.expect_int("failure threshold after 'f'")
            success = SuccessSuffix(success_target=success_target, fail_target=fail_target)
        else:
            target = self.parse_target_number()

        return GenericRoll(
            count=count,
            sides=sides,
            percentile=percentile,
            acing=acing,
            keep=keep,
            success=success,
            target=target,
            position=position
        )

    def parse_savage(self, count: Optional[int], position: int) -> SavageRoll:
        self.expect_word('s')
        trait_sides = self.expect_int("trait die sides after 's'")
        wild_sides = None
        if self.peek().is_word('w'):
            self.advance()
            wild_sides = self.expect_int("wild die sides after 'w'")
        return SavageRoll(
            count=count,
            trait_sides=trait_sides,
            wild_sides=wild_sides,
            target=self.parse_target_number(),
            position=position
        )

    def parse_extras(self, count: Optional[int], position: int) -> SavageExtrasRoll:
        self.expect_word('e')
        sides = self.expect_int("die sides after 'e'")
        return SavageExtrasRoll(
            count=count,
            sides=sides,
            target=self.parse_target_number(),
            position=position
        )

    def parse_target_number(self) -> Optional[TargetNumberSuffix]:
        target = raise_interval = None
        if self.peek().is_word('t'):
            self.advance()
            target = self.expect_int("target number after 't'")
            if self.peek().is_word('r'):
                self.advance()
                raise_interval = self.expect_int("raise interval after 'r'")
        elif self.peek().is_word('r'):
            self.advance()
            raise_interval = self.expect_int("raise interval after 'r'")
        else:
            return None
        return TargetNumberSuffix(target=target, raise_interval=raise_interval)


class DiceParser:
    """Parser for R2 dice notation."""

    @classmethod
    def parse(cls, notation: str) -> Command:
        """
        Parse dice notation into a parse tree.

        Examples:
            "2d6+3"   -> Command((RollOnce(BinaryOp('+', GenericRoll(...), IntLiteral(3))),))
            "3x4d6k3" -> Command((RollTimes(3, GenericRoll(...)),))

        Args:
            notation: Dice notation string

        Returns:
            Command node

        Raises:
            DiceSyntaxError: If notation is invalid
        """
        if not isinstance(notation, str):
            raise DiceSyntaxError(0, "Notation must be a string")
        if not notation.strip():
            raise DiceSyntaxError(0, "Notation cannot be empty")

        return _Parser(tokenize(notation)).parse_command()

    @classmethod
    def validate(cls, notation: str) -> bool:
        """
        Check if notation is valid without evaluating it.

        Args:
            notation: Dice notation string

        Returns:
            True if valid, False otherwise
        """
        try:
            cls.parse(notation)
            return True
        except DiceSyntaxError:
            return False
