"""
Cryptographic Primitives
========================

Arbitrary-precision modular arithmetic and the safe-prime group used by
the Schnorr proof protocol.

Usage:
    from privaccess.crypto import GroupParameters, power_mod

    params = GroupParameters.from_safe_prime(23, 2)
    y = power_mod(params.generator, 6, params.modulus)
"""

from privaccess.crypto.arithmetic import (
    int_to_bytes,
    is_probable_prime,
    is_quadratic_residue,
    mod_inverse,
    power_mod,
    sqrt_mod,
)
from privaccess.crypto.group import GroupParameters, default_group_parameters


__all__ = [
    "power_mod",
    "mod_inverse",
    "sqrt_mod",
    "is_quadratic_residue",
    "is_probable_prime",
    "int_to_bytes",
    "GroupParameters",
    "default_group_parameters",
]
