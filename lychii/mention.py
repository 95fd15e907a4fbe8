"""
Filtering of inbound messages down to the ones addressed to the bot.
"""

import re

from .models import IdentitySnapshot, InboundMessage


def self_pattern(bot_name: str) -> "re.Pattern[str]":
    """Pattern matching a leading address to the bot, e.g. "lychii " or "@Lychii "."""
    return re.compile(rf"^(@?{re.escape(bot_name)}\s)", re.IGNORECASE)


def is_acceptable(
    message: InboundMessage,
    identity: IdentitySnapshot,
    pattern: "re.Pattern[str]"
) -> bool:
    """
    Decide whether the bot should respond to a message.

    Messages sent by the bot itself are always rejected. Direct messages
    are always accepted. Anything else must open with an address to the bot.
    """
    me = identity.self
    if message.user is not None and message.user.id == me.id:
        return False
    if message.bot is not None and me.bot_id is not None and message.bot.id == me.bot_id:
        return False

    if message.is_direct_message:
        return True

    return pattern.search(message.text) is not None


def trim_message(message: InboundMessage, pattern: "re.Pattern[str]") -> InboundMessage:
    """Strip surrounding whitespace and the leading bot address, in place."""
    text = message.text.strip()
    if pattern.fullmatch(text + " "):
        # Address with no payload
        text = ""
    else:
        text = pattern.sub("", text, count=1)
    message.text = text
    return message
