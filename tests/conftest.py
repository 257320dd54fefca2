"""Pytest configuration and shared fixtures."""
import os

# Keep the module-level engine off disk during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from grant.api.schemas import Interaction
from grant.database import Base
from grant.models.officer import Officer
from grant.models.audit import OfficerAuditLog
from grant.services.audit import AuditTrail
from grant.services.dispatcher import InteractionDispatcher
from grant.services.role_gate import RoleGate
from grant.services.roster import OfficerRoster

MR_ROLE = "role-mr"
HR_ROLE = "role-hr"
DEVELOPER_ID = "900"
CALLER_ID = "100"


@pytest.fixture
def session_factory():
    """Build fresh in-memory databases; each call is an independent store."""
    sessions = []

    def make():
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        session = sessionmaker(bind=engine)()
        sessions.append(session)
        return session

    yield make

    for session in sessions:
        session.close()


@pytest.fixture
def db_session(session_factory):
    """Create a fresh in-memory database for each test."""
    return session_factory()


@pytest.fixture
def gate():
    # HR roles are folded into MR, as the env config is expected to do
    return RoleGate({"MR": {MR_ROLE, HR_ROLE}, "HR": {HR_ROLE}})


@pytest.fixture
def roster(db_session):
    return OfficerRoster(db_session)


@pytest.fixture
def audit(db_session):
    return AuditTrail(db_session)


@pytest.fixture
def dispatcher(roster, audit, gate):
    return InteractionDispatcher(roster, audit, gate, developer_ids={DEVELOPER_ID})


@pytest.fixture
def build_interaction():
    """
    Return a builder for APPLICATION_COMMAND interactions.

    `options` maps option name to value; `users` lists (id, username)
    pairs placed in the resolved side-table.
    """
    def build(command, subcommand=None, options=None, actor_id=CALLER_ID,
              username="caller", roles=(), users=(), interaction_type=2):
        leaf = [{"name": name, "value": value} for name, value in (options or {}).items()]
        if subcommand is not None:
            leaf = [{"name": subcommand, "type": 1, "options": leaf}]

        payload = {
            "type": interaction_type,
            "data": {
                "name": command,
                "options": leaf,
                "resolved": {"users": {uid: {"id": uid, "username": name} for uid, name in users}},
            },
            "member": {"user": {"id": actor_id, "username": username}, "roles": list(roles)},
        }
        return Interaction.model_validate(payload)

    return build


@pytest.fixture
def sample_officer(roster):
    """A registered officer with some marks."""
    officer = roster.register("200", "target")
    roster.update_marks("200", 5)
    return roster.find_by_discord_id(officer.discord_id)
