"""Typed access to interaction options, and resolved-user lookup."""
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from grant.api.schemas import CommandOption, Interaction, ResolvedUser
from grant.discord.commands import option_spec, subcommand_names
from grant.models.enums import OptionType

logger = logging.getLogger(__name__)

_NESTING_TYPES = (OptionType.SUB_COMMAND.value, OptionType.SUB_COMMAND_GROUP.value)


class CommandOptions(Mapping):
    """
    Option values of one invocation, keyed by option name.

    Built from the interaction's option tree and filtered against the
    command schema, so handlers only ever see declared options.
    """

    def __init__(self, command: str, subcommand: Optional[str], values: Dict[str, Any]):
        self.command = command
        self.subcommand = subcommand
        self._values = dict(values)

    @classmethod
    def from_interaction(cls, interaction: Interaction) -> "CommandOptions":
        command = interaction.data.name
        options: List[CommandOption] = interaction.data.options
        subcommand = None

        # The first option of a command with subcommands is the subcommand itself.
        # Untyped options only count when the name is a declared subcommand.
        if options and (
            options[0].type in _NESTING_TYPES
            or (options[0].type is None and options[0].name in subcommand_names(command))
        ):
            subcommand = options[0].name
            options = options[0].options

        declared = option_spec(command, subcommand)
        values = {}
        for option in options:
            if option.name not in declared:
                logger.debug("Dropping undeclared option %r for /%s %s", option.name, command, subcommand or "")
                continue
            values[option.name] = option.value
        return cls(command, subcommand, values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def string(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(name)
        if value is None:
            return default
        return str(value)

    def integer(self, name: str, default: Optional[int] = None) -> Optional[int]:
        """Integer value, or `default` when absent or not integral."""
        value = self._values.get(name)
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else default
        try:
            return int(str(value).strip())
        except ValueError:
            return default

    def user_id(self, name: str) -> Optional[str]:
        value = self._values.get(name)
        return value if isinstance(value, str) and value else None


def resolve_user(interaction: Interaction, user_id: Any) -> Optional[ResolvedUser]:
    """
    Look a referenced user up in the interaction's resolved side-table.

    Returns None ("no target") unless user_id is a non-empty string that
    the platform actually resolved for this request.
    """
    if not isinstance(user_id, str) or not user_id:
        return None
    return interaction.data.resolved.users.get(user_id)
