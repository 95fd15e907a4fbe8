"""
Base class for bot plugins.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Union

from .models import Handler, InboundMessage, Processor

logger = logging.getLogger(__name__)


class Plugin:
    """
    Base class that all plugins extend.

    A plugin registers (pattern, handler) pairs, usually from init().
    Every message accepted by the bot is run through all of them in
    registration order; every processor whose pattern matches is called,
    not just the first.

    Handlers receive the message and the match object. The message is
    shared by all processors and plugins for one dispatch, so a pre-hook
    or handler may change it for the ones that follow.
    """

    def __init__(self, bot):
        self.bot = bot
        self.processors: list[Processor] = []

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def client(self):
        """The transport the bot is connected through."""
        return self.bot.client

    def init(self) -> None:
        """
        Called once after every plugin has been registered.
        Override to register processors or look up sibling plugins.
        """
        pass

    def register(
        self,
        pattern: Union[str, "re.Pattern[str]"],
        handler: Union[Handler, Mapping[str, Any]]
    ) -> Processor:
        """
        Register a processor.

        Args:
            pattern: Regex (string or compiled) searched for in the message text
            handler: Either a callable taking (message, match), or a mapping
                with a required "handler" and optional "pre" and
                "use_raw_text" entries

        Returns:
            The Processor appended to this plugin
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern)

        if callable(handler):
            processor = Processor(pattern=pattern, handler=handler)
        elif isinstance(handler, Mapping) and callable(handler.get("handler")):
            processor = Processor(
                pattern=pattern,
                handler=handler["handler"],
                pre=handler.get("pre"),
                use_raw_text=bool(handler.get("use_raw_text", False)),
            )
        else:
            raise ValueError(
                f"{self.name}: processor for {pattern.pattern!r} has no callable handler"
            )

        self.processors.append(processor)
        return processor

    def process_message(self, message: InboundMessage) -> None:
        """Run every matching processor against the message, in order."""
        for processor in self.processors:
            text = message.raw_text if processor.use_raw_text else message.text
            matches = processor.pattern.search(text or "")
            if not matches:
                continue

            try:
                if processor.pre is not None:
                    processor.pre(message, matches)
                processor.handler(message, matches)
            except Exception:
                logger.exception(
                    f"Error in plugin '{self.name}' processing {processor.pattern.pattern!r}"
                )
