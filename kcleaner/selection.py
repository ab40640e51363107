"""
Kernel selection module.

Parses the index selection expressions accepted by 'kcleaner --delete',
such as '2', '1,3' or '1-3,5,8-10'.
"""

import re
from typing import Set


_ALLOWED_CHARS = set("0123456789,-")
_INDEX_PATTERN = re.compile(r'^\d+$')
_RANGE_PATTERN = re.compile(r'^(\d*)-(\d*)$')


class SelectionError(ValueError):
    """
    Raised when a selection expression is malformed or out of range.

    Attributes:
        token: The offending character or token
    """

    def __init__(self, message: str, token: str):
        super().__init__(message)
        self.token = token


def _check_characters(expression: str) -> None:
    for char in expression:
        if char not in _ALLOWED_CHARS:
            raise SelectionError(f"Invalid character in selection: '{char}'", char)


def _parse_token(token: str, count: int) -> range:
    """
    Parse a single token into a range of 1-based kernel numbers.

    Args:
        token: A bare number ('4') or an inclusive range ('2-5')
        count: Number of kernels in the list

    Returns:
        range: The kernel numbers denoted by the token

    Raises:
        SelectionError: If the token is out of range or malformed
    """
    if _INDEX_PATTERN.match(token):
        number = int(token)
        if number < 1 or number > count:
            raise SelectionError(f"Invalid kernel number: {token}", token)
        return range(number, number + 1)

    match = _RANGE_PATTERN.match(token)
    if not match or not match.group(1) or not match.group(2):
        raise SelectionError(f"Invalid range: {token}", token)

    start = int(match.group(1))
    end = int(match.group(2))
    if start < 1 or end > count or start > end:
        raise SelectionError(f"Invalid range: {token}", token)
    return range(start, end + 1)


def parse_selection(expression: str, count: int) -> Set[int]:
    """
    Parse a selection expression into zero-based kernel indices.

    Grammar:
        expr  := token (',' token)*
        token := INT | INT '-' INT

    Numbers in the expression are 1-based positions in the kernel list and
    ranges are inclusive. Overlapping tokens select an index only once.
    Empty tokens (e.g. '1,,2' or a trailing comma) are ignored, so an empty
    expression selects nothing.

    Args:
        expression: Selection expression as typed by the user
        count: Number of kernels in the list

    Returns:
        Set[int]: Zero-based indices into the kernel list

    Raises:
        SelectionError: On an invalid character, an out-of-range number,
            or a malformed or inverted range
    """
    _check_characters(expression)

    selected = set()
    for token in expression.split(","):
        if not token:
            continue
        for number in _parse_token(token, count):
            selected.add(number - 1)

    return selected
