"""Tier checks against the configured role policy."""
from typing import Iterable, Mapping, Union

from grant.models.enums import Tier


class RoleGate:
    """
    Decides whether a caller's roles satisfy a named tier.

    Plain set intersection - tiers are not nested. An unknown tier has no
    eligible roles, so the check fails closed.
    """

    def __init__(self, policy: Mapping[str, Iterable[str]]):
        self._policy = {
            str(tier): frozenset(str(role) for role in roles)
            for tier, roles in policy.items()
        }

    def eligible_roles(self, tier: Union[Tier, str]) -> frozenset:
        key = tier.value if isinstance(tier, Tier) else tier
        return self._policy.get(key, frozenset())

    def is_at_least(self, caller_role_ids: Iterable[str], tier: Union[Tier, str]) -> bool:
        eligible = self.eligible_roles(tier)
        if not eligible:
            return False
        return any(role_id in eligible for role_id in caller_role_ids)
