"""
Group Parameters
================

Immutable description of the prime-order subgroup of Z*_P used by the
Schnorr protocol. P is a safe prime (P = 2Q + 1) and G generates the
subgroup of order Q.

Parameters are built once at startup and passed explicitly to every prover
and verifier, so tests can run several parameter sets side by side.

Version: 0.1.0
"""

import secrets
from dataclasses import dataclass
from functools import lru_cache

from privaccess.config import GroupSettings, get_settings
from privaccess.crypto.arithmetic import is_probable_prime, power_mod
from privaccess.errors import InvalidInputError


@dataclass(frozen=True)
class GroupParameters:
    """Safe-prime group {P, G, Q}."""

    modulus: int
    generator: int
    order: int

    def __post_init__(self) -> None:
        p, g, q = self.modulus, self.generator, self.order
        if p < 5:
            raise InvalidInputError("Group modulus must be at least 5")
        if p != 2 * q + 1:
            raise InvalidInputError("Group modulus must equal 2 * order + 1")
        if not 1 < g < p - 1:
            raise InvalidInputError("Generator must lie in (1, P - 1)")
        if power_mod(g, q, p) != 1:
            raise InvalidInputError("Generator does not generate the order-Q subgroup")

    @classmethod
    def from_safe_prime(cls, prime: int, generator: int) -> "GroupParameters":
        """Derive Q = (P - 1) / 2 and build the parameter set."""
        return cls(modulus=prime, generator=generator, order=(prime - 1) // 2)

    @classmethod
    def from_settings(cls, group: GroupSettings) -> "GroupParameters":
        """Build parameters from ``GROUP_*`` settings."""
        params = cls.from_safe_prime(group.prime, group.generator)
        if group.strict_validation:
            params.validate_primality()
        return params

    @property
    def element_size(self) -> int:
        """Byte length of a group element in canonical encoding."""
        return (self.modulus.bit_length() + 7) // 8

    @property
    def bits(self) -> int:
        return self.modulus.bit_length()

    def validate_primality(self, rounds: int = 32) -> None:
        """
        Check that P and Q are (probable) primes.

        Raises:
            InvalidInputError: If either is composite.
        """
        if not is_probable_prime(self.order, rounds):
            raise InvalidInputError("Group order Q is not prime")
        if not is_probable_prime(self.modulus, rounds):
            raise InvalidInputError("Group modulus P is not prime")

    def is_element(self, value: int) -> bool:
        """True if ``value`` lies in [1, P - 1]."""
        return 1 <= value <= self.modulus - 1

    def is_exponent(self, value: int) -> bool:
        """True if ``value`` lies in [0, Q - 1]."""
        return 0 <= value <= self.order - 1

    def is_subgroup_element(self, value: int) -> bool:
        """True if ``value`` is a member of the order-Q subgroup."""
        return self.is_element(value) and power_mod(value, self.order, self.modulus) == 1

    def random_exponent(self) -> int:
        """Uniform draw from [1, Q - 1] using the OS CSPRNG."""
        return secrets.randbelow(self.order - 1) + 1

    def exp(self, exponent: int) -> int:
        """G^exponent mod P."""
        return power_mod(self.generator, exponent, self.modulus)


@lru_cache
def default_group_parameters() -> GroupParameters:
    """Group parameters from the process settings, built once."""
    return GroupParameters.from_settings(get_settings().group)
