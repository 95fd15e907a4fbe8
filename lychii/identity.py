"""
Identity snapshot assembly from an authentication payload.
"""

import logging
from typing import Optional

from .models import Channel, IdentitySnapshot, SelfIdentity, Team, User

logger = logging.getLogger(__name__)


def _to_channel(data: dict) -> Channel:
    return Channel(
        id=data.get("id", ""),
        name=data.get("name", ""),
        members=list(data.get("members") or []),
        is_private=bool(data.get("is_private", False)),
    )


def build_identity(payload: dict, default_channel_name: Optional[str]) -> IdentitySnapshot:
    """
    Build the identity snapshot for a freshly authenticated session.

    Args:
        payload: Authentication payload with self, team, users, channels
            and groups entries
        default_channel_name: Name of the group used for status posts

    Returns:
        IdentitySnapshot for the session
    """
    self_data = payload.get("self") or {}
    team_data = payload.get("team") or {}

    users = tuple(
        User(
            id=user.get("id", ""),
            name=user.get("name", ""),
            profile=dict(user.get("profile") or {}),
        )
        for user in payload.get("users") or []
    )

    # Last write wins when two channels share a name
    channels = {}
    for data in payload.get("channels") or []:
        if data.get("name"):
            channels[data["name"]] = _to_channel(data)

    me = SelfIdentity(id=self_data.get("id", ""), name=self_data.get("name", ""))
    for user in users:
        if user.id == me.id:
            me.bot_id = user.profile.get("bot_id")
            break

    default_channel = None
    for group in payload.get("groups") or []:
        if group.get("name") == default_channel_name:
            default_channel = _to_channel(group)
            break

    team = Team(
        id=team_data.get("id", ""),
        name=team_data.get("name", ""),
        domain=team_data.get("domain", ""),
    )

    logger.info(f"Logged in to team {team.name} as {me.name}")
    if me.bot_id is None:
        logger.warning(f"Could not resolve bot id for {me.id}; self-recognition of bot posts is disabled")
    if default_channel is None:
        logger.warning(f"Default channel '{default_channel_name}' not found; status announcements are disabled")
    else:
        logger.info(f"Default channel: {default_channel.name}")

    return IdentitySnapshot(
        self=me,
        team=team,
        users=users,
        channels=channels,
        default_channel=default_channel,
    )
