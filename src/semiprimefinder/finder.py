# -----------------------------------------------------------------------------
#  finder.py
#  Near-semiprime search: prime tuples whose product is one off a prime
# -----------------------------------------------------------------------------

"""
Finds "semiprimes" by building every product of two or more primes that
stays within range and checking whether the product plus or minus one is a
prime number.

Strictly speaking these are semiprime+1 / semiprime-1 values; the program
calls them semiprimes for brevity, and the products themselves "real
semiprimes".

Example (size = 10):

    2 × 2 = 4      →  3 = 4 - 1,  5 = 4 + 1
    2 × 3 = 6      →  5 = 6 - 1,  7 = 6 + 1
    2 × 2 × 2 = 8  →  7 = 8 - 1

With the default "overwrite" policy the last registration of a target wins,
so the result is {3: -1·(2, 2), 5: -1·(2, 3), 7: -1·(2, 2, 2)}.
"""

from __future__ import annotations

from math import isqrt, prod

from sympy import isprime

from semiprimefinder.progress import Progress
from semiprimefinder.sequence import Sequence
from semiprimefinder.sieve import NO_PRIME, PrimeSieve, build_sieve
from semiprimefinder.utility import InvalidArgumentError, check_size, debug

OVERWRITE = "overwrite"
KEEP_FIRST = "keep_first"
COLLISION_POLICIES = (OVERWRITE, KEEP_FIRST)


class SemiprimeFinder:
    """
    Enumerate non-decreasing prime tuples (length >= 2) with product <= size
    and record every product±1 that is prime and <= size.

    Parameters:
        size:     highest number investigated (N)
        sieve:    optional prebuilt PrimeSieve; must cover at least `size`
        policy:   what to do when a target is reached by a second, different
                  factorization: "overwrite" (last wins) or "keep_first"
        keep_all: also collect every distinct factorization per target
        progress: draw a progress bar over the starting primes
    """

    def __init__(
        self,
        size: int,
        *,
        sieve: PrimeSieve | None = None,
        policy: str = OVERWRITE,
        keep_all: bool = False,
        progress: bool = False,
    ):
        self.size = check_size(size)
        if policy not in COLLISION_POLICIES:
            raise InvalidArgumentError(
                f"unknown collision policy {policy!r}; expected one of {', '.join(COLLISION_POLICIES)}"
            )
        if sieve is None:
            sieve = build_sieve(self.size)
        elif sieve.size < self.size:
            raise InvalidArgumentError(f"sieve covers {sieve.size}, search needs {self.size}")

        self.sieve = sieve
        self.policy = policy
        self.limit = isqrt(self.size)   # largest possible smallest factor
        self.progress = progress

        self.semiprimes: dict[int, Sequence] = {}
        self.factorizations: dict[int, list[Sequence]] | None = {} if keep_all else None
        self.collisions = 0
        self.tuples_checked = 0
        self._complete = False

    # --- driver --------------------------------------------------------------

    def run(self) -> dict[int, Sequence]:
        """Fill `semiprimes` for the whole range. A second call is a no-op."""
        if self._complete:
            return self.semiprimes

        bar = Progress(self.limit, enabled=self.progress)
        prime = self.sieve.next_prime(1)
        while prime != NO_PRIME and prime <= self.limit:
            lengths = self.combinations_from(prime)
            debug(f"start {prime}: tuple lengths 2..{lengths + 1}")
            bar.update(prime, f"smallest factor {prime}")
            prime = self.sieve.next_prime(prime)
        bar.done()

        self._complete = True
        debug(
            f"size {self.size}: {len(self.semiprimes)} semiprimes from "
            f"{self.tuples_checked} tuples, {self.collisions} collision(s)"
        )
        return self.semiprimes

    def combinations_from(self, start: int) -> int:
        """
        Try tuple lengths 2, 3, ... for the smallest factor `start` until a
        length produces nothing. Returns the number of productive lengths.
        """
        length = 2
        while self.combinations(start, length):
            length += 1
        return length - 2

    def combinations(self, start: int, length: int) -> bool:
        """
        Register every non-decreasing tuple of `length` primes that begins
        with `start` and whose product is <= size.

        Returns True if at least one such tuple exists. Single factors are
        never results, so length < 2 registers nothing and returns False.
        """
        if length < 2 or not self.sieve.is_prime(start):
            return False
        return self._extend(start, start, length - 1, (start,))

    def _extend(self, product: int, min_prime: int, remaining: int, factors: tuple[int, ...]) -> bool:
        """
        Multiply `product` by `remaining` more primes, each >= the previous one.

        For example _extend(6, 5, 2, (2, 3)) registers 6·5·5, 6·5·7, 6·5·11,
        6·7·7, ... as long as the products stay <= size.

        Returns True iff at least one complete tuple stayed within range.
        False means a longer tuple with the same prefix cannot fit either.
        """
        if remaining == 0:
            if product > self.size:
                return False
            self._register(product, factors)
            return True

        produced = False
        prime = min_prime
        while prime != NO_PRIME:
            if not self._extend(product * prime, prime, remaining - 1, factors + (prime,)):
                # products only grow with the next factor
                break
            produced = True
            prime = self.sieve.next_prime(prime)
        return produced

    # --- registration ----------------------------------------------------------

    def _register(self, real_semiprime: int, factors: tuple[int, ...]) -> None:
        """Check real_semiprime+1 and real_semiprime-1; +1 is registered first."""
        self.tuples_checked += 1
        if real_semiprime + 1 <= self.size and self.sieve.is_prime(real_semiprime + 1):
            self._store(Sequence(1, factors))
        if self.sieve.is_prime(real_semiprime - 1):
            self._store(Sequence(-1, factors))

    def _store(self, seq: Sequence) -> None:
        target = seq.target
        if self.factorizations is not None:
            known = self.factorizations.setdefault(target, [])
            if seq not in known:
                known.append(seq)

        old = self.semiprimes.get(target)
        if old is None:
            self.semiprimes[target] = seq
            return
        if old == seq:
            return
        self.collisions += 1
        if self.policy == OVERWRITE:
            self.semiprimes[target] = seq

    # --- accessors ----------------------------------------------------------------

    def primes(self) -> list[int]:
        return [p for p in self.sieve.primes() if p <= self.size]


def find_semiprimes(size: int, *, policy: str = OVERWRITE, progress: bool = False) -> dict[int, Sequence]:
    """Run a fresh search over [2, size] and return {target: Sequence}."""
    return SemiprimeFinder(size, policy=policy, progress=progress).run()


def verify_semiprimes(semiprimes: dict[int, Sequence], size: int) -> list[int]:
    """
    Independent re-check of a result mapping with sympy's primality test.
    Returns the sorted targets whose record breaks an invariant.
    """
    bad: list[int] = []
    for target, seq in semiprimes.items():
        factors = seq.factors
        ok = (
            seq.k >= 2
            and seq.target == target
            and target <= size
            and isprime(target)
            and all(a <= b for a, b in zip(factors, factors[1:]))
            and all(isprime(f) for f in factors)
            and prod(factors) <= size
        )
        if not ok:
            bad.append(target)
    return sorted(bad)
