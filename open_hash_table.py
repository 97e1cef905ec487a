import logging
from dataclasses import dataclass
from typing import Final, Optional, Union

from hash_family import DoubleHashFamily
from primes import next_prime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Empty:
    """
    A slot that has never held an entry

    Reaching an empty slot ends every probe sequence
    """


@dataclass(frozen=True, slots=True)
class Tombstone:
    """
    A slot whose entry was deleted

    Probe sequences continue past a tombstone so that entries inserted further along the same
    sequence stay reachable, but insert is free to reuse it.
    """


@dataclass(slots=True)
class Occupied:
    """
    A live key-value pair owned by the table
    """

    key: str
    value: str

    def key_matches(self, candidate_key: str) -> bool:
        return candidate_key is self.key or candidate_key == self.key


Slot = Union[Empty, Tombstone, Occupied]

EMPTY: Final[Empty] = Empty()
TOMBSTONE: Final[Tombstone] = Tombstone()


def make_buckets(size: int) -> list[Slot]:
    return [EMPTY] * size


class OpenHashTable:
    """
    A string-keyed hash table which resolves collisions using open addressing and double hashing

    Notes
    -----
        * The number of buckets is always ``next_prime(BASE_SIZE << size_index)``, so the
          probe step of the double hashing scheme is coprime with the number of buckets
          and every probe sequence visits every bucket.

        * ``self._count`` counts ``Occupied`` slots only, tombstones are not counted.

        * Before inserting a new key, the table grows to the next size class if the insert could push the
          load above ``MAX_LOAD`` percent. Before a delete, it shrinks to the previous size class
          if the load is below ``MIN_LOAD`` percent. It never shrinks below size class 0.

        * Resizing re-inserts the live entries only, which is how tombstones are reclaimed.

        * The table is not thread safe.
    """

    # the bucket count of size class k is next_prime(BASE_SIZE << k)
    BASE_SIZE: Final[int] = 50
    # load thresholds, in percent
    MAX_LOAD: Final[int] = 70
    MIN_LOAD: Final[int] = 10

    __slots__ = ("_size_index", "_size", "_count", "_buckets", "_hash_family")

    def __init__(self, *, size_index: int = 0):
        """
        Parameters
        ----------
        size_index : int, optional
            The size class to create the table at. The default is 0, the smallest size class.
            It must be an int >= 0.
        """
        self._size_index: int = size_index
        self._validate_attributes()
        self._hash_family: DoubleHashFamily = DoubleHashFamily()
        self._size: int = next_prime(self.BASE_SIZE << size_index)
        self._count: int = 0
        self._buckets: Optional[list[Slot]] = make_buckets(self._size)

    def _validate_attributes(self):
        if isinstance(self._size_index, bool) or not isinstance(self._size_index, int):
            raise ValueError(
                f"The size index must be an integer: not {self._size_index!r}"
            )
        if self._size_index < 0:
            raise ValueError(f"The size index must be >= 0: not {self._size_index}")

    @property
    def size(self) -> int:
        return self._size

    @property
    def size_index(self) -> int:
        return self._size_index

    @property
    def count(self) -> int:
        return self._count

    @property
    def load(self) -> int:
        # integer percentage, this is what the resize thresholds are compared against
        return self._count * 100 // self._size

    def _live_buckets(self) -> list[Slot]:
        if self._buckets is None:
            raise RuntimeError("The hash table has been destroyed")
        return self._buckets

    def _should_grow_table(self) -> bool:
        """
        Return True if inserting one more entry would push the load above MAX_LOAD

        Checking the prospective count keeps the load at or below MAX_LOAD after every insert
        """
        return (self._count + 1) * 100 // self._size > self.MAX_LOAD

    def _should_shrink_table(self) -> bool:
        return self.load < self.MIN_LOAD

    def _resize(self, new_size_index: int):
        """
        Move every live entry into a fresh bucket array at size class `new_size_index`

        Parameters
        ----------
        new_size_index : int
            The size class to resize to. Negative values are refused and leave the table unchanged.

        Notes
        -----
        Entries are re-inserted, not copied verbatim, because their probe sequences depend on the
        number of buckets. Tombstones and empty slots are not carried over.
        The new state is built in a temporary table and swapped in at the end, so a failure
        part way through (such as a MemoryError) leaves this table untouched.
        """
        if new_size_index < 0:
            logger.debug("Refusing to shrink below size class 0 (size=%d)", self._size)
            return

        resized = OpenHashTable(size_index=new_size_index)
        for slot in self._live_buckets():
            if isinstance(slot, Occupied):
                resized.insert(slot.key, slot.value)

        logger.debug(
            "Resized from %d buckets (class %d) to %d buckets (class %d) with %d entries",
            self._size,
            self._size_index,
            resized._size,
            resized._size_index,
            resized._count,
        )

        self._size_index, resized._size_index = resized._size_index, self._size_index
        self._size, resized._size = resized._size, self._size
        self._buckets, resized._buckets = resized._buckets, self._buckets
        self._count = resized._count
        resized.destroy()

    def _grow_table(self):
        self._resize(self._size_index + 1)

    def _shrink_table(self):
        self._resize(self._size_index - 1)

    def _find_entry(self, key: str) -> Optional[tuple[int, Occupied]]:
        """
        Return the bucket index and the entry holding `key`, or None if `key` is absent

        The search stops at the first empty slot and skips tombstones.
        """
        buckets = self._live_buckets()
        for bucket_index in self._hash_family.probe_sequence(key, self._size):
            slot = buckets[bucket_index]
            if isinstance(slot, Empty):
                return None
            if isinstance(slot, Occupied) and slot.key_matches(key):
                return bucket_index, slot
        return None

    def _find_free_bucket_index(self, key: str) -> Optional[int]:
        """
        Return the bucket a new entry for `key` belongs in, or None if the probe sequence has none

        That is the first tombstone passed before reaching an empty slot, otherwise the empty slot.
        The caller must already know that `key` is absent.
        """
        buckets = self._live_buckets()
        for bucket_index in self._hash_family.probe_sequence(key, self._size):
            if not isinstance(buckets[bucket_index], Occupied):
                return bucket_index
        return None

    def insert(self, key: str, value: str) -> None:
        """
        Insert `key` with `value`, overwriting the value if `key` is already present

        An overwrite replaces the entry in place and never resizes. A new key may first grow the
        table, then goes into the first tombstone of its probe sequence if there is one, otherwise
        into the empty slot that ends the sequence. The lookup walks past tombstones, so `key`
        can never end up stored twice.

        Raises
        ------
        RuntimeError
            If the table has been destroyed, or if the probe sequence found no free slot,
            which cannot happen while the load is kept at or below MAX_LOAD
        """
        if (found := self._find_entry(key)) is not None:
            bucket_index, _ = found
            # overwrite old value
            self._buckets[bucket_index] = Occupied(key, value)
            return

        if self._should_grow_table():
            self._grow_table()

        free_index = self._find_free_bucket_index(key)
        if free_index is None:
            raise RuntimeError(
                f"No free bucket in the probe sequence of {key!r} (count={self._count}, size={self._size})"
            )
        self._buckets[free_index] = Occupied(key, value)
        self._count += 1

    def search(self, key: str) -> Optional[str]:
        """
        Return the value stored for `key`, or None if `key` is absent

        Never resizes the table.
        """
        if (found := self._find_entry(key)) is None:
            return None
        _, entry = found
        return entry.value

    def delete(self, key: str) -> None:
        """
        Delete `key` from the table. Deleting an absent key is a no-op.

        The shrink check runs before the lookup, so deleting an absent key can still shrink the table.
        """
        self._live_buckets()
        if self._should_shrink_table():
            self._shrink_table()

        if (found := self._find_entry(key)) is not None:
            bucket_index, _ = found
            self._buckets[bucket_index] = TOMBSTONE
            self._count -= 1

    def destroy(self) -> None:
        """
        Release every slot. Any further operation on the table raises RuntimeError.
        """
        if self._buckets is not None:
            self._buckets.clear()
        self._buckets = None
        self._count = 0

    def __setitem__(self, key: str, value: str):
        self.insert(key, value)

    def __getitem__(self, key: str) -> str:
        if (value := self.search(key)) is None:
            raise KeyError(key)
        return value

    def __delitem__(self, key: str):
        self.delete(key)

    def __contains__(self, key: str) -> bool:
        return self._find_entry(key) is not None

    def __len__(self) -> int:
        return self._count

    def __repr__(self):
        if self._buckets is None:
            return f"{type(self).__name__}(destroyed)"
        return (
            f"{type(self).__name__}(size={self._size}, size_index={self._size_index}, "
            f"count={self._count}, load={self.load}%)"
        )


def create() -> OpenHashTable:
    return OpenHashTable()


def destroy(table: OpenHashTable) -> None:
    table.destroy()


def insert(table: OpenHashTable, key: str, value: str) -> None:
    table.insert(key, value)


def search(table: OpenHashTable, key: str) -> Optional[str]:
    return table.search(key)


def delete(table: OpenHashTable, key: str) -> None:
    table.delete(key)


def main():
    table = create()
    insert(table, "chien", "dog")
    print(f"Key = 'chien', Value = {search(table, 'chien')}")
    destroy(table)


if __name__ == "__main__":
    main()
