"""
Role Registry
=============

Maps Schnorr public keys to roles and roles to permissions.

Only public keys are stored. Private keys issued by ``provision`` are
handed to the caller and not retained.

Version: 0.1.0
"""

from collections.abc import Mapping

from privaccess.crypto.group import GroupParameters
from privaccess.errors import InvalidInputError
from privaccess.logging import get_logger
from privaccess.zk.schnorr import KeyPair


logger = get_logger(__name__)


ROLE_PERMISSIONS: dict[str, list[str]] = {
    "ADMIN": ["read", "write", "delete"],
    "FACULTY": ["read", "write"],
    "STUDENT": ["read"],
}


class RoleRegistry:
    """
    Public-key based role store.

    Usage:
        registry = RoleRegistry(params)
        key_pair = registry.provision("STUDENT")
        registry.role_for(key_pair.public_key)  # "STUDENT"
    """

    def __init__(
        self,
        params: GroupParameters,
        permissions: Mapping[str, list[str]] | None = None,
    ) -> None:
        self.params = params
        self._permissions = {
            name.upper(): list(perms) for name, perms in (permissions or ROLE_PERMISSIONS).items()
        }
        self._roles_by_key: dict[int, str] = {}

    @classmethod
    def from_private_keys(
        cls,
        params: GroupParameters,
        private_keys: Mapping[str, int],
        permissions: Mapping[str, list[str]] | None = None,
    ) -> "RoleRegistry":
        """Register the public keys derived from pre-shared role secrets."""
        registry = cls(params, permissions)
        for role, private_key in private_keys.items():
            registry.register(role, KeyPair.from_private_key(params, private_key).public_key)
        return registry

    @property
    def roles(self) -> list[str]:
        return list(self._permissions)

    def _normalize(self, role: str) -> str:
        name = role.upper()
        if name not in self._permissions:
            raise InvalidInputError(f"Unknown role: {role}")
        return name

    def register(self, role: str, public_key: int) -> None:
        """
        Bind a public key to a role.

        Raises:
            InvalidInputError: If the role is unknown or the key is not a
                subgroup element
        """
        name = self._normalize(role)
        if not self.params.is_subgroup_element(public_key):
            raise InvalidInputError("Public key is not an element of the order-Q subgroup")
        self._roles_by_key[public_key] = name
        logger.info("role_key_registered", role=name)

    def provision(self, role: str) -> KeyPair:
        """Issue a fresh key pair for ``role`` and register its public key."""
        name = self._normalize(role)
        key_pair = KeyPair.generate(self.params)
        self.register(name, key_pair.public_key)
        return key_pair

    def revoke(self, public_key: int) -> bool:
        """Remove a public key; returns False if it was not registered."""
        role = self._roles_by_key.pop(public_key, None)
        if role is not None:
            logger.info("role_key_revoked", role=role)
        return role is not None

    def role_for(self, public_key: int) -> str | None:
        """Role bound to ``public_key``, if any."""
        return self._roles_by_key.get(public_key)

    def permissions(self, role: str) -> list[str]:
        """Permissions granted to ``role``."""
        return list(self._permissions[self._normalize(role)])
