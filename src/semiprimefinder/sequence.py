from __future__ import annotations

from dataclasses import dataclass
from math import prod

SIGNS = (1, -1)


@dataclass(frozen=True)
class Sequence:
    """
    One discovered semiprime: target = prod(factors) + sign.

    Immutable value with structural equality; two records are equal iff
    they have the same sign and the same factor tuple.
    """
    sign: int                  # +1 or -1
    factors: tuple[int, ...]   # non-decreasing primes, len >= 2

    def __post_init__(self) -> None:
        if self.sign not in SIGNS:
            raise ValueError(f"sign must be +1 or -1, got {self.sign!r}")
        # accept any iterable, store a tuple
        object.__setattr__(self, "factors", tuple(self.factors))

    @property
    def base(self) -> int:
        """The real semiprime (product of the factors)."""
        return prod(self.factors)

    @property
    def target(self) -> int:
        return self.base + self.sign

    @property
    def k(self) -> int:
        return len(self.factors)
