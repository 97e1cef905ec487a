from abc import ABC, abstractmethod
from typing import Final, Iterator

# the two multipliers of the double hashing scheme, distinct primes larger than the alphabet size
HASH_PRIME_A: Final[int] = 151
HASH_PRIME_B: Final[int] = 163


def polynomial_hash(s: str, a: int, m: int) -> int:
    """
    Hash a string to an integer in [0, m)

    hash(s, a, m) = (sum_{i=0}^{len-1} a^(len - i + 1) * s[i]) mod m

    where s[i] ranges over the UTF-8 bytes of `s`.
    Each term is reduced modulo m as it is accumulated so the intermediate values stay small.
    """
    data = s.encode("utf-8")
    length = len(data)
    h = 0
    for i, byte in enumerate(data):
        h = (h + pow(a, length - i + 1, m) * byte) % m
    return h


class HashFamily(ABC):
    @abstractmethod
    def __call__(self, column_index: int, item: str, table_size: int) -> int:
        pass


class DoubleHashFamily(HashFamily):
    """
    A pair of polynomial string hashes combined into a double hashing probe sequence

    Column 0 gives the starting bucket and column 1 gives the probe step.
    """

    def __init__(self, multipliers: tuple[int, int] = (HASH_PRIME_A, HASH_PRIME_B)):
        self.multipliers = multipliers
        if multipliers[0] == multipliers[1]:
            raise ValueError(
                f"The multipliers of a double hash family must be distinct: not {multipliers}"
            )

    def __call__(self, column_index, item, table_size):
        return polynomial_hash(item, self.multipliers[column_index], table_size)

    def step(self, item: str, table_size: int) -> int:
        # hash_b + 1 is never zero, but it is congruent to zero when hash_b == table_size - 1
        step = self(1, item, table_size) + 1
        return step if step < table_size else 1

    def probe(self, item: str, table_size: int, attempt: int) -> int:
        """
        Return the bucket visited by the `attempt`-th (0-based) probe for `item`

        index(i) = (hash_a + i * (hash_b + 1)) mod table_size
        """
        return (self(0, item, table_size) + attempt * self.step(item, table_size)) % table_size

    def probe_sequence(self, item: str, table_size: int) -> Iterator[int]:
        """
        Lazily yield the first `table_size` buckets of the probe sequence for `item`

        Both hashes are computed once. Over a prime `table_size` the sequence is a permutation
        of all the buckets.
        """
        index = self(0, item, table_size)
        step = self.step(item, table_size)
        for _ in range(table_size):
            yield index
            index = (index + step) % table_size
