"""
Static command schema.

This is the exact payload an external registration step publishes to the
platform. It is also read at request time to decide which options a
(command, subcommand) pair accepts and what type each one has.
"""
import json
from typing import Dict, List, Optional

from grant.models.enums import OptionType

EXPORT_DEFAULT_LIMIT = 50


def _user_option(name: str, description: str, required: bool) -> dict:
    return {"name": name, "description": description, "type": OptionType.USER.value, "required": required}


def _officer_and_amount_options() -> List[dict]:
    return [
        _user_option("officer", "Target officer", True),
        {
            "name": "amount",
            "description": "Positive integer amount",
            "type": OptionType.INTEGER.value,
            "required": True,
            "min_value": 1,
        },
    ]


def _rank_options() -> List[dict]:
    return [
        _user_option("officer", "Target user", True),
        {"name": "rank", "description": "New rank label", "type": OptionType.STRING.value, "required": True},
    ]


def _subcommand(name: str, description: str, options: List[dict]) -> dict:
    return {"type": OptionType.SUB_COMMAND.value, "name": name, "description": description, "options": options}


COMMANDS: List[dict] = [
    {
        "name": "ping",
        "description": "Check if Grant is alive",
        "type": 1,
    },
    {
        "name": "echo",
        "description": "Echo your input back",
        "type": 1,
        "options": [
            {"name": "input", "description": "Text to echo", "type": OptionType.STRING.value, "required": True},
        ],
    },
    {
        "name": "marks",
        "description": "Manage officer marks",
        "type": 1,
        "options": [
            _subcommand("add", "Add marks", _officer_and_amount_options()),
            _subcommand("subtract", "Subtract marks", _officer_and_amount_options()),
            _subcommand("get", "Get marks", [_user_option("officer", "Officer user", False)]),
        ],
    },
    {
        "name": "officer",
        "description": "Officer management",
        "type": 1,
        "options": [
            _subcommand("register", "Register an officer", [_user_option("user", "Target user (optional)", False)]),
            _subcommand("info", "Show officer info", [_user_option("officer", "Target user", False)]),
            _subcommand("remove", "Remove officer", [_user_option("officer", "Target user", True)]),
            _subcommand("promote", "Promote officer", _rank_options()),
            _subcommand("demote", "Demote officer", _rank_options()),
            _subcommand("blacklist", "Set blacklist status", [
                _user_option("officer", "Target user", True),
                {
                    "name": "state",
                    "description": "on to blacklist, off to unblacklist",
                    "type": OptionType.STRING.value,
                    "required": True,
                    "choices": [
                        {"name": "on", "value": "on"},
                        {"name": "off", "value": "off"},
                    ],
                },
            ]),
        ],
    },
    {
        "name": "command",
        "description": "Developer database maintenance commands",
        "type": 1,
        "options": [
            _subcommand("export", "Export officers as base64 JSON", [
                {
                    "name": "limit",
                    "description": f"Number of rows to export (1-500, default {EXPORT_DEFAULT_LIMIT})",
                    "type": OptionType.INTEGER.value,
                    "required": False,
                    "min_value": 1,
                    "max_value": 500,
                },
                {
                    "name": "offset",
                    "description": "Rows to skip before exporting (default 0)",
                    "type": OptionType.INTEGER.value,
                    "required": False,
                    "min_value": 0,
                },
            ]),
            _subcommand("import", "Import officers from base64 JSON export payload", [
                {
                    "name": "payload",
                    "description": "Base64 string returned by /command export",
                    "type": OptionType.STRING.value,
                    "required": True,
                },
            ]),
        ],
    },
]

_BY_NAME: Dict[str, dict] = {command["name"]: command for command in COMMANDS}


def command_names() -> List[str]:
    return list(_BY_NAME)


def subcommand_names(command: str) -> List[str]:
    definition = _BY_NAME.get(command, {})
    return [
        option["name"] for option in definition.get("options", [])
        if option["type"] == OptionType.SUB_COMMAND.value
    ]


def option_spec(command: str, subcommand: Optional[str] = None) -> Dict[str, int]:
    """
    Declared options (name -> OptionType value) for one leaf of the command tree.

    Unknown commands or subcommands have no declared options.
    """
    definition = _BY_NAME.get(command)
    if definition is None:
        return {}

    options = definition.get("options", [])
    if subcommand is not None:
        leaf = next(
            (o for o in options if o["type"] == OptionType.SUB_COMMAND.value and o["name"] == subcommand),
            None,
        )
        if leaf is None:
            return {}
        options = leaf.get("options", [])

    return {
        o["name"]: o["type"] for o in options
        if o["type"] not in (OptionType.SUB_COMMAND.value, OptionType.SUB_COMMAND_GROUP.value)
    }


def definitions_json() -> str:
    """Serialized schema, as handed to the registration step."""
    return json.dumps(COMMANDS)
