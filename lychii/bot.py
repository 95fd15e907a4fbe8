"""
Session controller for the Lychii bot.

Handles:
- Loading and initializing plugins
- Tracking the connection state of the session
- Filtering inbound messages and fanning them out to plugins
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from .config import BotConfig
from .identity import build_identity
from .mention import is_acceptable, self_pattern, trim_message
from .models import IdentitySnapshot, InboundMessage, SessionState, TransportEvent
from .plugin import Plugin
from .plugin_loader import DEFAULT_PLUGINS_DIR, PluginLoader
from .slack_transport import SlackTransport
from .storage import Storage, open_storage
from .transport import Transport

logger = logging.getLogger(__name__)

JOIN_SUBTYPES = {"channel_join", "group_join"}
LEAVE_SUBTYPES = {"channel_leave", "group_leave"}
TOPIC_SUBTYPES = {"channel_topic", "group_topic"}
ROUTED_SUBTYPES = {"message", "bot_message"}


class LychiiBot:
    """Owns one bot session: its transport, identity and plugins."""

    def __init__(
        self,
        config: Optional[BotConfig] = None,
        transport: Optional[Transport] = None,
        **options
    ):
        self.config = (config or BotConfig()).with_options(**options)
        self.client = transport
        self.identity: Optional[IdentitySnapshot] = None
        self.plugins: list[Plugin] = []
        self.storage: Optional[Storage] = None
        self.plugin_loader = PluginLoader()
        self.state = SessionState.DISCONNECTED
        self.exit_code: Optional[int] = None

        self._self_pattern = None
        self._initialized_plugins: set[int] = set()
        self._stopped = threading.Event()

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def init(self) -> None:
        """Open storage, load and initialize plugins, then start the transport."""
        if self.config.storage.enable:
            logger.debug("Opening plugin storage...")
            self.storage = open_storage(self.config.storage.path)

        if self.client is None:
            self.client = SlackTransport(
                token=self.config.token,
                app_token=self.config.app_token,
                auto_reconnect=self.config.auto_reconnect,
            )

        self.client.on(TransportEvent.AUTHENTICATED, self._on_authenticated)
        self.client.on(TransportEvent.CONNECTED, self._on_connected)
        self.client.on(TransportEvent.MESSAGE, self._on_incoming_message)
        self.client.on(TransportEvent.REACTION_ADDED, self._on_reaction_added)
        self.client.on(TransportEvent.DISCONNECTED, self._on_disconnected)

        # Bundled plugins first, then the user's
        self.load_plugins(DEFAULT_PLUGINS_DIR)
        if self.config.plugin_dir_path:
            self.load_plugins(self.config.plugin_dir_path)
        self.init_plugins()

        self.state = SessionState.AUTHENTICATING
        self.client.start()

    def run(self) -> int:
        """
        Start the bot and block until it stops, then close the transport.

        Returns:
            Process exit status; non-zero when the bot stopped because it
            lost its connection
        """
        try:
            self.init()
            logger.info(f"Loaded {len(self.plugins)} plugins")
            logger.info("Bot is running! Press Ctrl+C to stop.")
            self._stopped.wait()
        finally:
            if self.client is not None:
                self.client.disconnect()
        return self.exit_code or 0

    def stop(self, exit_code: int = 0) -> None:
        """Release run() with the given exit status."""
        self.exit_code = exit_code
        self._stopped.set()

    # ========================================================================
    # PLUGINS
    # ========================================================================

    def load_plugins(self, plugin_dir_path: Union[str, Path]) -> list[Plugin]:
        """
        Register every plugin found at a path.

        Raises:
            FileNotFoundError: If the path does not exist
        """
        return [
            self.register_plugin(plugin)
            for plugin in self.plugin_loader.load(plugin_dir_path)
        ]

    def register_plugin(self, plugin_class: type[Plugin]) -> Plugin:
        """Instantiate a plugin and append it to the dispatch order."""
        logger.info(f"Register plugin: {plugin_class.__name__}")

        plugin = plugin_class(self)
        self.plugins.append(plugin)
        return plugin

    def init_plugins(self) -> None:
        """Call init() on every registered plugin that has not had it yet."""
        for plugin in self.plugins:
            if id(plugin) in self._initialized_plugins:
                continue
            self._initialized_plugins.add(id(plugin))

            init = getattr(plugin, "init", None)
            if callable(init):
                init()

    def get_plugin(self, name: str) -> Optional[Plugin]:
        """Get a registered plugin by class name."""
        for plugin in self.plugins:
            if type(plugin).__name__ == name:
                return plugin
        return None

    # ========================================================================
    # TRANSPORT EVENTS
    # ========================================================================

    def _on_authenticated(self, payload: dict) -> None:
        self.identity = build_identity(payload, self.config.default_channel)
        self._self_pattern = self_pattern(self.identity.self.name)
        self.state = SessionState.AUTHENTICATED

    def _on_connected(self) -> None:
        if self.state == SessionState.AUTHENTICATED:
            self.state = SessionState.CONNECTED
            logger.info(
                f"Connected to team {self.identity.team.name} as {self.identity.self.name}"
            )
            self._announce()
        elif self.state == SessionState.RECONNECTING:
            self.state = SessionState.CONNECTED
            logger.info("Reconnected")
        elif self.state == SessionState.CONNECTED:
            # Slack refreshes Socket Mode sessions every few hours
            logger.debug("Connection refreshed")
        else:
            logger.warning(f"Ignoring connected event while {self.state.value}")

    def _announce(self) -> None:
        channel = self.identity.default_channel
        if channel is None:
            logger.info("No default channel, skipping status announcement")
            return
        self.client.send(f"Hello! I'm {self.identity.self.name}", channel)

    def _on_disconnected(self) -> None:
        if self.state in (SessionState.DISCONNECTED, SessionState.RECONNECTING):
            return

        if self.config.auto_reconnect:
            self.state = SessionState.RECONNECTING
            logger.warning("Disconnected, waiting for reconnect")
        else:
            # Runs on a transport thread; run() closes the transport
            logger.error("Disconnected, terminating bot...")
            self.state = SessionState.DISCONNECTED
            self.stop(1)

    def _on_reaction_added(self, reaction) -> None:
        logger.debug(f"Reaction added: {reaction}")

    def _on_incoming_message(self, message: InboundMessage) -> None:
        if self.state != SessionState.CONNECTED:
            logger.debug(f"Ignoring message received while {self.state.value}")
            return

        sender = message.sender
        sender_name = sender.name if sender else "unknown"
        channel_name = message.channel.name if message.channel else "unknown"
        subtype = message.subtype or "message"

        if subtype in JOIN_SUBTYPES:
            logger.info(f"{sender_name} has joined {channel_name}")
            return
        if subtype in LEAVE_SUBTYPES:
            logger.info(f"{sender_name} has left {channel_name}")
            return
        if subtype in TOPIC_SUBTYPES:
            logger.info(f"{sender_name} set the topic in {channel_name} to {message.topic}")
            return
        if subtype not in ROUTED_SUBTYPES:
            logger.debug(f"Ignoring message subtype '{subtype}'")
            return

        if not is_acceptable(message, self.identity, self._self_pattern):
            return
        trim_message(message, self._self_pattern)

        logger.debug(f"Received from {sender_name} in {channel_name}: {message.text}")
        self._process_message(message)

    def _process_message(self, message: InboundMessage) -> None:
        for plugin in self.plugins:
            try:
                plugin.process_message(message)
            except Exception:
                logger.exception(f"Error in plugin '{type(plugin).__name__}'")
