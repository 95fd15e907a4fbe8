"""
Slack transport built on Bolt's Socket Mode adapter.

Uses Socket Mode so the bot can run without a public URL.
"""

import json
import logging
import threading
from typing import Callable, Iterator, Optional

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk.errors import SlackApiError

from .models import Bot, Channel, InboundMessage, TransportEvent, User
from .transport import Transport

logger = logging.getLogger(__name__)


class SlackTransport(Transport):
    """Transport that talks to Slack through the Web API and Socket Mode."""

    def __init__(
        self,
        token: str,
        app_token: str,
        auto_reconnect: bool = True,
        app: Optional[App] = None,
        watchdog_interval: float = 5.0
    ):
        super().__init__()
        self.app = app if app is not None else App(token=token)
        self.app_token = app_token
        self.auto_reconnect = auto_reconnect
        self.watchdog_interval = watchdog_interval
        self.handler: Optional[SocketModeHandler] = None
        self.users: dict[str, User] = {}
        self.channels: dict[str, Channel] = {}

        # True between a hello frame and the loss of that session
        self._connected = False
        self._connection_lock = threading.Lock()
        self._watchdog: Optional[threading.Thread] = None
        self._watchdog_stop = threading.Event()

        @self.app.event("message")
        def handle_message(event):
            self._emit(TransportEvent.MESSAGE, self.to_message(event))

        @self.app.event("reaction_added")
        def handle_reaction(event):
            self._emit(TransportEvent.REACTION_ADDED, event)

    # ========================================================================
    # COMMANDS
    # ========================================================================

    def start(self) -> None:
        """Authenticate, then open the Socket Mode connection without blocking."""
        self._emit(TransportEvent.AUTHENTICATED, self.fetch_identity())

        self.handler = SocketModeHandler(
            self.app,
            self.app_token,
            logger=logger,
            auto_reconnect_enabled=self.auto_reconnect,
        )
        self.handler.client.on_message_listeners.append(self._on_socket_message)
        self.handler.client.on_close_listeners.append(self._on_socket_close)
        self.handler.client.on_error_listeners.append(self._on_socket_error)
        self.handler.connect()

        self._watchdog_stop.clear()
        self._watchdog = threading.Thread(
            target=self._watch_connection,
            name="lychii-connection-watchdog",
            daemon=True,
        )
        self._watchdog.start()

    def disconnect(self) -> None:
        """
        Close the Socket Mode connection.

        Must not be called from a Socket Mode callback: closing joins the
        threads those callbacks run on.
        """
        self._watchdog_stop.set()
        with self._connection_lock:
            self._connected = False
        if self.handler is not None:
            handler, self.handler = self.handler, None
            handler.close()

    def send(self, text: str, channel: Channel) -> None:
        self._post(channel=channel.id, text=text)

    def reply(self, text: str, message: InboundMessage) -> None:
        if message.channel is None:
            logger.error(f"Cannot reply to a message without a channel: {text[:50]}")
            return
        self._post(channel=message.channel.id, text=text, thread_ts=message.thread_ts)

    def _post(self, **kwargs) -> None:
        try:
            self.app.client.chat_postMessage(**kwargs)
        except SlackApiError as e:
            logger.error(f"Failed to post to {kwargs.get('channel')}: {e.response.get('error')}")

    # ========================================================================
    # AUTHENTICATION
    # ========================================================================

    def fetch_identity(self) -> dict:
        """
        Collect who the bot is and what it can see.

        Returns:
            Authentication payload with self, team, users, channels
            (public) and groups (private) entries
        """
        client = self.app.client
        auth = client.auth_test()
        team = self._fetch_team(auth)

        members = list(self._paginate(client.users_list, "members"))
        conversations = list(self._paginate(
            client.conversations_list,
            "channels",
            types="public_channel,private_channel",
            exclude_archived=True,
        ))

        self.users = {
            member["id"]: User(
                id=member["id"],
                name=member.get("name", ""),
                profile=dict(member.get("profile") or {}),
            )
            for member in members
        }
        self.channels = {
            conv["id"]: Channel(
                id=conv["id"],
                name=conv.get("name", ""),
                is_private=bool(conv.get("is_private", False)),
            )
            for conv in conversations
        }

        logger.info(
            f"Fetched {len(members)} users and {len(conversations)} conversations "
            f"for team {team['name']}"
        )

        return {
            "self": {"id": auth["user_id"], "name": auth.get("user", "")},
            "team": team,
            "users": members,
            "channels": [conv for conv in conversations if not conv.get("is_private")],
            "groups": [conv for conv in conversations if conv.get("is_private")],
        }

    def _fetch_team(self, auth) -> dict:
        team = {"id": auth.get("team_id", ""), "name": auth.get("team", ""), "domain": ""}
        try:
            info = self.app.client.team_info().get("team") or {}
        except SlackApiError as e:
            logger.warning(f"Could not fetch team info: {e.response.get('error')}")
            return team

        for key in ("id", "name", "domain"):
            if info.get(key):
                team[key] = info[key]
        return team

    @staticmethod
    def _paginate(method: Callable, key: str, **kwargs) -> Iterator[dict]:
        cursor = None
        while True:
            params = dict(kwargs, limit=200)
            if cursor:
                params["cursor"] = cursor
            response = method(**params)
            yield from response.get(key, [])
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break

    # ========================================================================
    # EVENTS
    # ========================================================================

    def _on_socket_message(self, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring non-JSON socket frame: {raw[:100]}")
            return

        if frame.get("type") == "hello":
            with self._connection_lock:
                self._connected = True
            self._emit(TransportEvent.CONNECTED)

    def _on_socket_close(self, code: int, reason: Optional[str] = None) -> None:
        self._connection_lost(f"closed by server with code {code} {reason or ''}".rstrip())

    def _on_socket_error(self, error: Exception) -> None:
        # The SDK drops the session after any OSError without a close frame
        if isinstance(error, OSError):
            self._connection_lost(f"{type(error).__name__}: {error}")
        else:
            logger.debug(f"Socket error: {error}")
            self._check_connection()

    def _watch_connection(self) -> None:
        while not self._watchdog_stop.wait(self.watchdog_interval):
            self._check_connection()

    def _check_connection(self) -> None:
        """Report a lost session the SDK tore down without telling its listeners."""
        handler = self.handler
        if handler is not None and not handler.client.is_connected():
            self._connection_lost("session is no longer active")

    def _connection_lost(self, reason: str) -> None:
        with self._connection_lock:
            if not self._connected:
                return
            self._connected = False

        logger.warning(f"Socket Mode connection lost: {reason}")
        self._emit(TransportEvent.DISCONNECTED)

    def to_message(self, event: dict) -> InboundMessage:
        """Convert a Slack message event into an InboundMessage."""
        user = None
        user_id = event.get("user")
        if user_id:
            user = self.users.get(user_id) or User(id=user_id)

        bot = None
        if event.get("bot_id"):
            bot = Bot(id=event["bot_id"], name=event.get("username", ""))

        channel_id = event.get("channel", "")
        channel = self.channels.get(channel_id) or Channel(id=channel_id)

        text = event.get("text") or ""
        return InboundMessage(
            text=text,
            raw_text=text,
            user=user,
            bot=bot,
            channel=channel,
            subtype=event.get("subtype"),
            topic=event.get("topic"),
            is_direct_message=event.get("channel_type") == "im",
            ts=event.get("ts"),
            thread_ts=event.get("thread_ts"),
        )
