"""
Modifier normalization for single-roll expressions.

Players type suffixes in whatever order comes to mind ("s8+2t4",
"4d6+2k3"); the grammar wants them in a fixed order. normalize() rewrites
a single roll into

    [Nx] base [!] [keep] [tN] [rM] [+/-mod]

and leaves anything else untouched:

    normalize("s8+2r4t5")   -> "s8t5r4+2"
    normalize("5d20!+3k2")  -> "5d20!k2+3"
    normalize("2d6+1d4")    -> "2d6+1d4"
"""

import re
from typing import Dict, Optional

_REPEAT = re.compile(r'^(\d+[xX])(.*)$', re.DOTALL)

# Roll bases; the text of the base is kept exactly as typed
_GENERIC_BASE = re.compile(r'^(\d*[dD](?:\d+|%))(!?)(.*)$', re.DOTALL)
_SAVAGE_BASE = re.compile(r'^(\d*[sS]\d+(?:[wW]\d+)?)(.*)$', re.DOTALL)
_EXTRAS_BASE = re.compile(r'^(\d*[eE]\d+)(.*)$', re.DOTALL)

_SUFFIX = re.compile(
    r"""
    (?P<keep>kl|k|adv|dis)(?P<keep_count>\d*)
    | t(?P<target>\d+)
    | r(?P<interval>\d+)
    | (?P<modifier>[+-]\d+)
    """,
    re.IGNORECASE | re.VERBOSE,
)


def _split_suffixes(rest: str, allow_keep: bool) -> Optional[Dict[str, str]]:
    """
    Split the text after a roll base into suffix parts.

    Returns:
        Dict of category -> canonical text, or None when the text holds
        anything but suffixes or a category appears twice
    """
    parts = {}
    position = 0
    while position < len(rest):
        match = _SUFFIX.match(rest, position)
        if match is None:
            return None

        if match.group('keep'):
            category = 'keep'
            text = match.group('keep').lower() + match.group('keep_count')
        elif match.group('target'):
            category, text = 'target', 't' + match.group('target')
        elif match.group('interval'):
            category, text = 'raise', 'r' + match.group('interval')
        else:
            category, text = 'modifier', match.group('modifier')

        if category in parts or (category == 'keep' and not allow_keep):
            return None
        parts[category] = text
        position = match.end()
    return parts


def _rebuild(prefix: str, base: str, rest: str, allow_keep: bool) -> Optional[str]:
    parts = _split_suffixes(rest, allow_keep)
    if parts is None:
        return None
    return prefix + base + ''.join(parts.get(c, '') for c in ('keep', 'target', 'raise', 'modifier'))


def normalize(expression: str) -> str:
    """
    Reorder the suffixes of a single roll into grammar order.

    Keep operators and t/r letters are lower-cased; the repeat prefix and
    roll base are preserved as typed. The result is idempotent.

    Args:
        expression: Raw expression text

    Returns:
        Normalized expression, or the input unchanged when it is not a
        single roll followed only by suffixes
    """
    prefix, body = '', expression
    repeat = _REPEAT.match(expression)
    if repeat:
        prefix, body = repeat.group(1), repeat.group(2)

    generic = _GENERIC_BASE.match(body)
    if generic:
        base = generic.group(1) + generic.group(2)
        normalized = _rebuild(prefix, base, generic.group(3), allow_keep=True)
        return expression if normalized is None else normalized

    for pattern in (_SAVAGE_BASE, _EXTRAS_BASE):
        match = pattern.match(body)
        if match:
            normalized = _rebuild(prefix, match.group(1), match.group(2), allow_keep=False)
            return expression if normalized is None else normalized

    return expression


__all__ = ['normalize']
