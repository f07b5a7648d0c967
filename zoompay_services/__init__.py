"""
Zoompay Services.

Stateful collaborators around the lifecycle engine:
- identity: resolve the acting user from a stored profile (sign-in gate)
- role_router: designation -> permitted operations, queries, landing screen
"""

from zoompay_services.identity import ActorDirectory, actor_from_profile
from zoompay_services.role_router import (
    Operation,
    Query,
    available_operations,
    can_perform,
    landing_screen,
    permitted_operations,
    permitted_queries,
)

__all__ = [
    "ActorDirectory",
    "actor_from_profile",
    "Operation",
    "Query",
    "available_operations",
    "can_perform",
    "landing_screen",
    "permitted_operations",
    "permitted_queries",
]
