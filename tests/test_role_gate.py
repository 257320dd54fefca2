"""Tests for tier checks."""
from grant.models.enums import Tier
from grant.services.role_gate import RoleGate


def test_member_of_tier_passes():
    gate = RoleGate({"MR": {"a", "b"}})
    assert gate.is_at_least(["x", "b"], Tier.MR) is True
    assert gate.is_at_least(["a"], "MR") is True


def test_non_member_fails():
    gate = RoleGate({"MR": {"a"}})
    assert gate.is_at_least(["x", "y"], Tier.MR) is False


def test_no_roles_fails():
    gate = RoleGate({"MR": {"a"}})
    assert gate.is_at_least([], Tier.MR) is False


def test_unknown_tier_fails_closed():
    gate = RoleGate({"MR": {"a"}})
    assert gate.is_at_least(["a"], "ADMIN") is False
    assert gate.is_at_least(["a"], Tier.HR) is False


def test_empty_tier_fails_closed():
    gate = RoleGate({"HR": set()})
    assert gate.is_at_least(["a"], Tier.HR) is False


def test_tiers_are_not_nested():
    """Holding an HR role says nothing about MR unless MR lists it too."""
    gate = RoleGate({"MR": {"mr"}, "HR": {"hr"}})
    assert gate.is_at_least(["hr"], Tier.HR) is True
    assert gate.is_at_least(["hr"], Tier.MR) is False


def test_policy_is_copied():
    roles = {"a"}
    gate = RoleGate({"MR": roles})
    roles.add("b")
    assert gate.is_at_least(["b"], Tier.MR) is False
