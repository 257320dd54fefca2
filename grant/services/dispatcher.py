"""
Interaction dispatcher - the authorization and routing core.

Every command invocation goes through a (command, subcommand) route
table. Each route names its handler and the access rule that is checked
before the handler runs, so the permission model can be read off the
table in one place.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, NamedTuple, Optional, Tuple

from grant.api.schemas import Interaction, InteractionResponse, MessageData, User
from grant.discord.commands import EXPORT_DEFAULT_LIMIT, command_names
from grant.discord.options import CommandOptions, resolve_user
from grant.models.audit import AuditAction
from grant.models.enums import InteractionType, MessageFlag, ResponseType, Tier
from grant.services.audit import AuditTrail
from grant.services.role_gate import RoleGate
from grant.services.roster import ImportRolledBack, OfficerRoster, clamp_limit
from grant.services.transfer import (
    InvalidPayload,
    build_export_envelope,
    decode_payload,
    encode_payload,
    fits_in_message,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_TEXT = "Internal error. Check server logs."


class Access(str, Enum):
    """Who may run a route."""
    PUBLIC = "public"
    MR = "MR"
    HR = "HR"
    SELF_OR_HR = "self_or_hr"  # Decided by the handler once the target is known
    DEVELOPER = "developer"


DENIED_TEXT = {
    Access.MR: "Permission denied: MR or higher required.",
    Access.HR: "Permission denied: HR or higher required.",
    Access.DEVELOPER: "Permission denied: developer only command.",
}


class Route(NamedTuple):
    handler: str
    access: Access


ROUTES: Dict[Tuple[str, Optional[str]], Route] = {
    ("ping", None): Route("_ping", Access.PUBLIC),
    ("echo", None): Route("_echo", Access.PUBLIC),
    ("marks", "get"): Route("_marks_get", Access.MR),
    ("marks", "add"): Route("_marks_adjust", Access.MR),
    ("marks", "subtract"): Route("_marks_adjust", Access.MR),
    ("officer", "register"): Route("_officer_register", Access.SELF_OR_HR),
    ("officer", "info"): Route("_officer_info", Access.SELF_OR_HR),
    ("officer", "remove"): Route("_officer_remove", Access.HR),
    ("officer", "promote"): Route("_officer_set_rank", Access.HR),
    ("officer", "demote"): Route("_officer_set_rank", Access.HR),
    ("officer", "blacklist"): Route("_officer_blacklist", Access.HR),
    ("command", "export"): Route("_developer_export", Access.DEVELOPER),
    ("command", "import"): Route("_developer_import", Access.DEVELOPER),
}


def message(content: str) -> InteractionResponse:
    """Reply visible only to the caller."""
    return InteractionResponse(
        type=ResponseType.CHANNEL_MESSAGE.value,
        data=MessageData(content=content, flags=MessageFlag.EPHEMERAL.value),
    )


def pong() -> InteractionResponse:
    return InteractionResponse(type=ResponseType.PONG.value)


def internal_error() -> InteractionResponse:
    return InteractionResponse(
        type=ResponseType.CHANNEL_MESSAGE.value,
        data=MessageData(content=INTERNAL_ERROR_TEXT),
    )


class DispatchResult(NamedTuple):
    response: InteractionResponse
    status_code: int = 200


@dataclass
class Invocation:
    """One command call: the raw interaction plus what handlers read from it."""
    interaction: Interaction
    options: CommandOptions
    actor: User
    is_hr: bool

    @property
    def subcommand(self) -> Optional[str]:
        return self.options.subcommand

    def target(self, option_name: str):
        return resolve_user(self.interaction, self.options.user_id(option_name))


class InteractionDispatcher:
    """Routes verified interactions, enforces access and mutates the roster."""

    def __init__(
        self,
        roster: OfficerRoster,
        audit: AuditTrail,
        gate: RoleGate,
        developer_ids: Iterable[str] = ()
    ):
        self.roster = roster
        self.audit = audit
        self.gate = gate
        self.developer_ids: FrozenSet[str] = frozenset(developer_ids)

    def handle(self, interaction: Interaction) -> DispatchResult:
        """
        Produce the reply for one interaction. Never raises.

        Unexpected faults are logged with full detail and turned into the
        generic internal-error reply with status 500.
        """
        try:
            return DispatchResult(self._dispatch(interaction))
        except Exception:
            logger.exception(
                "Interaction failed: type=%s command=%s actor=%s",
                interaction.type, interaction.data.name, interaction.actor.id,
            )
            return DispatchResult(internal_error(), 500)

    def _dispatch(self, interaction: Interaction) -> InteractionResponse:
        if interaction.type == InteractionType.PING:
            return pong()
        if interaction.type != InteractionType.APPLICATION_COMMAND:
            return message("Unsupported interaction type.")

        command = interaction.data.name
        if command not in command_names():
            return message("Unknown command.")

        options = CommandOptions.from_interaction(interaction)
        route = ROUTES.get((command, options.subcommand))
        if route is None:
            return message(f"Unknown {command} subcommand.")

        actor = interaction.actor
        call = Invocation(
            interaction=interaction,
            options=options,
            actor=actor,
            is_hr=self.gate.is_at_least(interaction.role_ids, Tier.HR),
        )
        logger.info("Dispatching /%s %s actor=%s", command, options.subcommand or "", actor.id)

        if not self._allowed(route.access, call):
            logger.info("Denied /%s %s for actor=%s (%s)",
                        command, options.subcommand or "", actor.id, route.access.value)
            return message(DENIED_TEXT[route.access])

        return getattr(self, route.handler)(call)

    def _allowed(self, access: Access, call: Invocation) -> bool:
        if access in (Access.PUBLIC, Access.SELF_OR_HR):
            return True
        if access == Access.DEVELOPER:
            return bool(call.actor.id) and call.actor.id in self.developer_ids
        return self.gate.is_at_least(call.interaction.role_ids, Tier(access.value))

    # ping / echo
    def _ping(self, call: Invocation) -> InteractionResponse:
        return message("Pong!")

    def _echo(self, call: Invocation) -> InteractionResponse:
        return message(call.options.string("input", ""))

    # marks
    def _marks_get(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        target_id = target.id if target is not None else call.actor.id

        officer = self.roster.find_by_discord_id(target_id)
        if officer is None:
            return message("Officer not found.")
        return message(f"{officer.discord_username} has **{int(officer.marks or 0)}** marks.")

    def _marks_adjust(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        amount = call.options.integer("amount")
        if target is None or amount is None or amount <= 0:
            return message("Invalid officer or amount.")

        officer = self.roster.find_by_discord_id(target.id)
        if officer is None:
            return message("Officer not found.")

        username = officer.discord_username
        current = int(officer.marks or 0)
        if call.subcommand == "add":
            new_marks = current + amount
            action = AuditAction.MARKS_ADD
        else:
            new_marks = max(0, current - amount)
            action = AuditAction.MARKS_SUBTRACT

        # Update first: the audit entry must describe a committed change
        self.roster.update_marks(target.id, new_marks)
        self.audit.log(action, call.actor.id, target.id, {"amount": amount, "new_marks": new_marks})

        return message(f"{username} now has **{new_marks}** marks.")

    # officer
    def _officer_register(self, call: Invocation) -> InteractionResponse:
        target = call.target("user")
        if target is not None:
            target_id, target_name = target.id, target.username
        else:
            target_id, target_name = call.actor.id, call.actor.username

        if target_id != call.actor.id and not call.is_hr:
            return message("Permission denied: HR required to register another officer.")
        if not target_id:
            return message("Officer argument is required.")

        self.roster.register(target_id, target_name)
        self.audit.log(AuditAction.REGISTER, call.actor.id, target_id, {"username": target_name})
        return message(f"Registered officer: {target_name}.")

    def _officer_info(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        target_id = target.id if target is not None else call.actor.id

        if target_id != call.actor.id and not call.is_hr:
            return message(DENIED_TEXT[Access.HR])

        officer = self.roster.find_by_discord_id(target_id)
        if officer is None:
            return message("Officer not found.")

        lines = [
            f"Officer: {officer.discord_username}",
            f"Marks: {int(officer.marks or 0)}",
            f"Rank: {officer.rank or 'N/A'}",
        ]
        # Blacklist status is HR-only, even on a self view
        if call.is_hr:
            lines.append(f"Blacklisted: {'Yes' if officer.is_blacklisted else 'No'}")
        return message("\n".join(lines))

    def _officer_remove(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        if target is None:
            return message("Officer argument is required.")

        # Every HR removal attempt is audited, found or not
        removed = self.roster.remove(target.id)
        self.audit.log(AuditAction.REMOVE, call.actor.id, target.id,
                       {"username": target.username, "removed": removed})
        return message("Officer removed." if removed else "Officer not found.")

    def _officer_set_rank(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        if target is None:
            return message("Officer argument is required.")

        if self.roster.find_by_discord_id(target.id) is None:
            return message("Officer not found.")

        rank = (call.options.string("rank") or "").strip()
        if not rank:
            return message("Rank is required.")

        # promote and demote are the same overwrite; only the audit tag differs
        self.roster.set_rank(target.id, rank)
        action = AuditAction.PROMOTE if call.subcommand == "promote" else AuditAction.DEMOTE
        self.audit.log(action, call.actor.id, target.id, {"rank": rank})
        return message(f"{target.username} updated to rank: {rank}.")

    def _officer_blacklist(self, call: Invocation) -> InteractionResponse:
        target = call.target("officer")
        if target is None:
            return message("Officer argument is required.")

        if self.roster.find_by_discord_id(target.id) is None:
            return message("Officer not found.")

        state = call.options.string("state", "off")
        blacklisted = state == "on"
        self.roster.set_blacklisted(target.id, blacklisted)
        self.audit.log(AuditAction.BLACKLIST, call.actor.id, target.id, {"state": state})
        return message(f"{target.username} blacklist state: {'ON' if blacklisted else 'OFF'}.")

    # command (developer maintenance)
    def _developer_export(self, call: Invocation) -> InteractionResponse:
        limit = clamp_limit(call.options.integer("limit", EXPORT_DEFAULT_LIMIT))
        offset = max(0, call.options.integer("offset", 0))

        rows = self.roster.export_officers(limit, offset)
        envelope = build_export_envelope(rows, limit, offset)
        encoded = encode_payload(envelope)
        if not fits_in_message(encoded):
            return message("Export too large for one Discord message. Re-run with a lower limit.")

        pagination = envelope["pagination"]
        self.audit.log(AuditAction.DEVELOPER_EXPORT, call.actor.id, None, {
            "rows": pagination["count"],
            "limit": limit,
            "offset": offset,
            "next_offset": pagination["next_offset"],
        })
        return message(f"Export payload:\n{encoded}")

    def _developer_import(self, call: Invocation) -> InteractionResponse:
        encoded = (call.options.string("payload") or "").strip()
        if not encoded:
            return message("Import payload is required.")

        try:
            document = decode_payload(encoded)
        except InvalidPayload as e:
            return message(str(e))

        try:
            count = self.roster.import_officers(document["rows"])
        except ImportRolledBack:
            return message("Import failed and was rolled back. Check server logs for details.")

        self.audit.log(AuditAction.DEVELOPER_IMPORT, call.actor.id, None, {"imported_rows": count})
        return message(f"Import successful. Rows processed: {count}.")
