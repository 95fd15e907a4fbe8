"""
Hi Lychii - greets anyone who says hi.
"""

from lychii.plugin import Plugin


class HiLychii(Plugin):
    """Replies to messages starting with hi or hello."""

    def init(self):
        self.register(r"(?i)^(hi|hello)", {
            "use_raw_text": True,
            "handler": self.greet,
        })

    def greet(self, message, matches):
        self.client.reply("Hello!", message)


def get_plugin():
    return HiLychii
