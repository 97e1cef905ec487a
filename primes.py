from math import isqrt
from typing import Final

import numpy as np

# the smallest prime, everything below it is rejected by the sieve
SMALLEST_PRIME: Final[int] = 2


def primes_up_to(n: int) -> np.ndarray:
    """
    Sieve of Eratosthenes over the inclusive range [0, n]

    Parameters
    ----------
    n : int
        The upper bound of the sieve

    Returns
    -------
    np.ndarray
        A sorted array of all the primes <= n (empty if n < 2)
    """
    if n < SMALLEST_PRIME:
        return np.empty(0, dtype=np.int64)

    sieve = np.ones(n + 1, dtype=bool)
    sieve[:2] = False
    for p in range(2, isqrt(n) + 1):
        if sieve[p]:
            sieve[p * p :: p] = False
    return np.flatnonzero(sieve)


def is_prime(n: int) -> bool:
    if n < SMALLEST_PRIME:
        return False
    if n % 2 == 0:
        return n == 2
    # trial division by odd numbers is enough for bucket counts
    divisor = 3
    while divisor * divisor <= n:
        if n % divisor == 0:
            return False
        divisor += 2
    return True


def next_prime(n: int) -> int:
    """
    Return the smallest prime >= n

    By Bertrand's postulate there is always a prime in (n, 2n], so sieving the window
    [n, 2n] is guaranteed to find one.

    Raises
    ------
    ValueError
        If n is negative
    """
    if n < 0:
        raise ValueError(f"Expected a non-negative integer: not {n}")
    if n <= SMALLEST_PRIME:
        return SMALLEST_PRIME

    candidates = primes_up_to(2 * n)
    return int(candidates[np.searchsorted(candidates, n)])
