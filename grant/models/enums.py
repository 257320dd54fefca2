"""Enums for the interaction protocol and the permission tiers."""
from enum import Enum, IntEnum


class InteractionType(IntEnum):
    """Discriminant of an inbound interaction envelope."""
    PING = 1
    APPLICATION_COMMAND = 2


class ResponseType(IntEnum):
    """Discriminant of an outbound reply envelope."""
    PONG = 1
    CHANNEL_MESSAGE = 4


class OptionType(IntEnum):
    """Command option types used by the command schema."""
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    USER = 6


class MessageFlag(IntEnum):
    EPHEMERAL = 64


class Tier(str, Enum):
    """Named permission levels. Each is satisfied by its own configured role set."""
    MR = "MR"
    HR = "HR"
