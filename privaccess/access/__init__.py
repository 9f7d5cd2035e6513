"""
Access Control
==============

Role registry, door registry and the access-decision collaborator.

Usage:
    from privaccess.access import AccessController, RoleRegistry

    roles = RoleRegistry(params)
    key_pair = roles.provision("STUDENT")
    controller = AccessController(params, roles)
    decision = await controller.decide(request)
"""

from privaccess.access.controller import AccessController, AccessDecider
from privaccess.access.models import (
    DEFAULT_DOORS,
    AccessDecision,
    AccessLogEntry,
    AccessRequest,
    Door,
)
from privaccess.access.roles import ROLE_PERMISSIONS, RoleRegistry


__all__ = [
    "AccessController",
    "AccessDecider",
    "AccessRequest",
    "AccessDecision",
    "AccessLogEntry",
    "Door",
    "DEFAULT_DOORS",
    "RoleRegistry",
    "ROLE_PERMISSIONS",
]
