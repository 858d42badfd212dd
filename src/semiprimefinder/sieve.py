# -----------------------------------------------------------------------------
#  sieve.py
#  Sieve of Eratosthenes with O(1) primality and next-prime queries
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterator
from math import isqrt

from semiprimefinder.utility import check_size

# Returned by next_prime() when the range is exhausted; 0 is never prime.
NO_PRIME = 0


class PrimeSieve:
    """
    Precomputed primality table over [0, size].

    `_composite[i]` is non-zero iff i is not prime. The table is filled once
    in the constructor and never changes afterwards.
    """

    def __init__(self, size: int):
        self.size = check_size(size)
        self._composite = bytearray(self.size + 1)
        self._composite[0:2] = b"\x01" * min(2, self.size + 1)
        self._fill()

    def _fill(self) -> None:
        n = self.size
        if n < 4:
            return
        # 2 is handled on its own so the main loop can step over even i
        self._cross_off(2)
        for i in range(3, isqrt(n) + 1, 2):
            if not self._composite[i]:
                self._cross_off(i)

    def _cross_off(self, p: int) -> None:
        # smaller multiples of p carry a smaller prime factor and are already marked
        start = p * p
        self._composite[start::p] = b"\x01" * len(range(start, self.size + 1, p))

    # --- queries -----------------------------------------------------------

    def is_prime(self, n: int) -> bool:
        """
        True iff 0 < n <= size and n is prime.
        Out-of-range values are reported as "not prime", never as an error.
        """
        return 0 < n <= self.size and not self._composite[n]

    def next_prime(self, start: int) -> int:
        """
        Smallest prime strictly greater than `start` and <= size,
        or NO_PRIME (0) when there is none.
        """
        if start < 2:
            return 2 if self.size >= 2 else NO_PRIME
        # every prime above 2 is odd
        n = start + 1 if start % 2 == 0 else start + 2
        composite = self._composite
        while n <= self.size:
            if not composite[n]:
                return n
            n += 2
        return NO_PRIME

    def primes(self) -> list[int]:
        """All primes <= size in ascending order."""
        return list(self)

    def count(self) -> int:
        return self.size + 1 - sum(self._composite)

    def __iter__(self) -> Iterator[int]:
        return (i for i, c in enumerate(self._composite) if not c)

    def __contains__(self, n: object) -> bool:
        return isinstance(n, int) and self.is_prime(n)

    def __len__(self) -> int:
        return self.size + 1

    def __repr__(self) -> str:
        return f"PrimeSieve(size={self.size})"


def build_sieve(size: int) -> PrimeSieve:
    """Construct a PrimeSieve over [0, size]; InvalidArgumentError if size < 0."""
    return PrimeSieve(size)
