"""Shared fixtures: a fake transport and a typical authentication payload."""

import pytest

from lychii.bot import LychiiBot
from lychii.identity import build_identity
from lychii.models import Bot, Channel, InboundMessage, TransportEvent, User
from lychii.transport import Transport

BOT_NAME = "lychii"
BOT_USER_ID = "U1"
BOT_ID = "B1"


class FakeTransport(Transport):
    """In-memory transport that records what the bot sends."""

    def __init__(self, payload=None):
        super().__init__()
        self.payload = payload
        self.started = False
        self.disconnect_calls = 0
        self.sent = []
        self.replies = []

    def start(self):
        self.started = True
        if self.payload is not None:
            self._emit(TransportEvent.AUTHENTICATED, self.payload)

    def disconnect(self):
        self.disconnect_calls += 1

    def send(self, text, channel):
        self.sent.append((text, channel))

    def reply(self, text, message):
        self.replies.append((text, message))

    def emit(self, event, *args):
        self._emit(event, *args)


def make_payload(**overrides):
    payload = {
        "self": {"id": BOT_USER_ID, "name": BOT_NAME},
        "team": {"id": "T1", "name": "Acme"},
        "users": [
            {"id": "U2", "name": "alice", "profile": {}},
            {"id": BOT_USER_ID, "name": BOT_NAME, "profile": {"bot_id": BOT_ID}},
        ],
        "channels": [{"id": "C1", "name": "general"}],
        "groups": [{"id": "G1", "name": "private-integration"}],
    }
    payload.update(overrides)
    return payload


def make_message(text, *, user_id="U2", dm=False, subtype=None, bot_id=None, raw_text=None):
    return InboundMessage(
        text=text,
        raw_text=text if raw_text is None else raw_text,
        user=User(id=user_id, name="alice") if user_id else None,
        bot=None if bot_id is None else Bot(id=bot_id),
        channel=Channel(id="C1", name="general"),
        subtype=subtype,
        is_direct_message=dm,
    )


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def identity(payload):
    return build_identity(payload, "private-integration")


@pytest.fixture
def transport(payload):
    return FakeTransport(payload)


@pytest.fixture
def connected_bot(transport):
    """A bot that has authenticated and connected, with the bundled plugins loaded."""
    bot = LychiiBot(transport=transport)
    bot.init()
    transport.emit(TransportEvent.CONNECTED)
    return bot
