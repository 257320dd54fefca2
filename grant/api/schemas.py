"""Pydantic schemas for the interaction envelope and the reply envelope."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Inbound interaction
class CommandOption(BaseModel):
    """One option, or a subcommand carrying its own nested options."""
    model_config = ConfigDict(extra="ignore")

    name: str
    type: Optional[int] = None
    value: Any = None
    options: List["CommandOption"] = Field(default_factory=list)


CommandOption.model_rebuild()


class ResolvedUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str = "unknown"


class ResolvedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    users: Dict[str, ResolvedUser] = Field(default_factory=dict)


class InteractionData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    options: List[CommandOption] = Field(default_factory=list)
    resolved: ResolvedData = Field(default_factory=ResolvedData)


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    username: str = "unknown"


class Member(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: User = Field(default_factory=User)
    roles: List[str] = Field(default_factory=list)


class Interaction(BaseModel):
    """
    Decoded interaction envelope.

    Only the fields the dispatcher reads are modelled; everything else the
    platform sends is ignored.
    """
    model_config = ConfigDict(extra="ignore")

    type: int
    data: InteractionData = Field(default_factory=InteractionData)
    member: Member = Field(default_factory=Member)
    user: Optional[User] = None  # Set instead of member outside a guild

    @field_validator("data", "member", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        # PING envelopes may carry explicit nulls
        return {} if value is None else value

    @property
    def actor(self) -> User:
        if not self.member.user.id and self.user is not None:
            return self.user
        return self.member.user

    @property
    def role_ids(self) -> List[str]:
        return self.member.roles


# Outbound reply
class MessageData(BaseModel):
    content: str
    flags: Optional[int] = None


class InteractionResponse(BaseModel):
    type: int
    data: Optional[MessageData] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SignatureErrorResponse(BaseModel):
    error: str = "invalid request signature"
