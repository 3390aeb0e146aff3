"""Iterative Fibonacci over fixed-width unsigned integers.

Values are 64-bit unsigned: every addition wraps modulo 2**64, so large
indices silently overflow instead of growing without bound.
"""

from __future__ import annotations

U64_BITS = 64
U64_MASK = (1 << U64_BITS) - 1


class InvalidArgument(SystemExit):
    """Fatal error for an index that has no Fibonacci value.

    Derives from SystemExit: an uncaught instance ends the process with
    status 1 and the message on stderr, and ``except Exception`` handlers
    do not intercept it.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def fib(n: int) -> int:
    """Compute the n-th Fibonacci number as a wrapped 64-bit unsigned value.

    Args:
        n: Sequence index, starting at 1.

    Returns:
        The Fibonacci number, in the range [0, 2**64).

    Raises:
        InvalidArgument: If n is zero or negative.
    """
    if n < 0:
        raise InvalidArgument(f"{n} is negative!")
    if n == 0:
        raise InvalidArgument("zero is not a right argument to fibonacci()!")
    if n == 1:
        return 1

    total = 0
    last = 0
    curr = 1
    for _ in range(1, n):
        total = (last + curr) & U64_MASK
        last = curr
        curr = total
    return total
