"""
Data models for the Lychii bot runtime.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class SessionState(Enum):
    """Connection state of a bot session."""
    DISCONNECTED = "disconnected"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class TransportEvent(Enum):
    """Events emitted by a transport."""
    AUTHENTICATED = "authenticated"
    CONNECTED = "connected"
    MESSAGE = "message"
    REACTION_ADDED = "reaction_added"
    DISCONNECTED = "disconnected"


@dataclass
class User:
    """A member of the team."""
    id: str
    name: str = ""
    profile: dict[str, Any] = field(default_factory=dict)


@dataclass
class Bot:
    """An integration that posted a message."""
    id: str
    name: str = ""


@dataclass
class Channel:
    """A public channel, private group or direct message conversation."""
    id: str
    name: str = ""
    members: list[str] = field(default_factory=list)
    is_private: bool = False


@dataclass
class Team:
    """The workspace the bot is logged into."""
    id: str
    name: str = ""
    domain: str = ""


@dataclass
class SelfIdentity:
    """The bot's own user record."""
    id: str
    name: str = ""
    bot_id: Optional[str] = None


@dataclass(frozen=True)
class IdentitySnapshot:
    """
    Identity state for one authenticated session.

    Built once after authentication and replaced wholesale when the
    session authenticates again.
    """
    self: SelfIdentity
    team: Team
    users: tuple[User, ...] = ()
    channels: dict[str, Channel] = field(default_factory=dict)
    default_channel: Optional[Channel] = None


@dataclass
class InboundMessage:
    """
    A message event as seen by plugins.

    The same instance is handed to every plugin for one dispatch, so
    changes made by one processor are visible to the ones after it.
    """
    text: str = ""
    raw_text: Optional[str] = None
    user: Optional[User] = None
    bot: Optional[Bot] = None
    channel: Optional[Channel] = None
    subtype: Optional[str] = None
    topic: Optional[str] = None
    is_direct_message: bool = False
    ts: Optional[str] = None
    thread_ts: Optional[str] = None

    def __post_init__(self):
        if self.text is None:
            self.text = ""
        if self.raw_text is None:
            self.raw_text = self.text

    @property
    def sender(self):
        """The user who sent the message, or the bot if it was an integration."""
        return self.user or self.bot

    @property
    def words(self) -> list[str]:
        """The (trimmed) text split on single spaces, for argument-style commands."""
        return self.text.split(" ")


Handler = Callable[[InboundMessage, "re.Match[str]"], Any]


@dataclass
class Processor:
    """A pattern registered by a plugin together with its callbacks."""
    pattern: "re.Pattern[str]"
    handler: Handler
    pre: Optional[Handler] = None
    use_raw_text: bool = False
