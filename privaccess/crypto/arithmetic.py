"""
Modular Arithmetic
==================

Arbitrary-precision modular arithmetic on Python integers.

``power_mod`` is the foundation of the Schnorr protocol; the remaining
helpers support group validation and the geofence circuit's field
arithmetic.

Version: 0.1.0
"""

import secrets

from privaccess.errors import InvalidInputError


_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71)


def power_mod(base: int, exponent: int, modulus: int) -> int:
    """
    Compute ``base ** exponent % modulus`` by binary square-and-multiply.

    Runs in O(log exponent) multiplications. Requires ``exponent >= 0`` and
    ``modulus > 1``; other inputs are undefined and never supplied by callers.
    """
    result = 1
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus
    return result % modulus


def mod_inverse(value: int, modulus: int) -> int:
    """Multiplicative inverse of ``value`` modulo ``modulus``."""
    try:
        return pow(value, -1, modulus)
    except ValueError as e:
        raise InvalidInputError(f"{value} has no inverse modulo {modulus}") from e


def is_quadratic_residue(value: int, prime: int) -> bool:
    """Euler's criterion for an odd prime modulus."""
    value %= prime
    if value == 0:
        return True
    return power_mod(value, (prime - 1) // 2, prime) == 1


def sqrt_mod(value: int, prime: int) -> int:
    """
    Square root of ``value`` modulo an odd ``prime`` (Tonelli-Shanks).

    Returns one of the two roots.

    Raises:
        InvalidInputError: If ``value`` is not a quadratic residue.
    """
    value %= prime
    if value == 0:
        return 0
    if not is_quadratic_residue(value, prime):
        raise InvalidInputError(f"{value} is not a quadratic residue modulo {prime}")
    if prime % 4 == 3:
        return power_mod(value, (prime + 1) // 4, prime)

    # prime - 1 = q * 2^s with q odd
    q, s = prime - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while is_quadratic_residue(z, prime):
        z += 1

    m = s
    c = power_mod(z, q, prime)
    t = power_mod(value, q, prime)
    root = power_mod(value, (q + 1) // 2, prime)

    while t != 1:
        i, t_sq = 0, t
        while t_sq != 1:
            t_sq = (t_sq * t_sq) % prime
            i += 1
        b = power_mod(c, 1 << (m - i - 1), prime)
        m = i
        c = (b * b) % prime
        t = (t * c) % prime
        root = (root * b) % prime

    return root


def is_probable_prime(n: int, rounds: int = 32) -> bool:
    """Miller-Rabin primality test with random bases."""
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False

    d, r = n - 1, 0
    while d % 2 == 0:
        d //= 2
        r += 1

    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2
        x = power_mod(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(r - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


def int_to_bytes(value: int, length: int) -> bytes:
    """Big-endian fixed-width encoding of a non-negative integer."""
    if value < 0:
        raise InvalidInputError("Cannot encode a negative integer")
    try:
        return value.to_bytes(length, "big")
    except OverflowError as e:
        raise InvalidInputError(f"Integer does not fit in {length} bytes") from e
