"""Tests for identity snapshot assembly."""

import dataclasses

import pytest

from lychii.identity import build_identity

from conftest import make_payload


def test_bot_id_and_default_channel_resolved():
    payload = {
        "self": {"id": "U1"},
        "team": {"id": "T1", "name": "Acme"},
        "users": [{"id": "U1", "profile": {"bot_id": "B1"}}],
        "channels": [],
        "groups": [{"name": "private-integration"}],
    }

    identity = build_identity(payload, "private-integration")

    assert identity.self.bot_id == "B1"
    assert identity.default_channel.name == "private-integration"


def test_self_and_team_copied(identity):
    assert identity.self.id == "U1"
    assert identity.self.name == "lychii"
    assert identity.team.id == "T1"
    assert identity.team.name == "Acme"
    assert [user.id for user in identity.users] == ["U2", "U1"]


def test_channels_indexed_by_name_skipping_unnamed():
    payload = make_payload(channels=[
        {"id": "C1", "name": "general"},
        {"id": "C2"},
        {"id": "C3", "name": "random"},
    ])

    identity = build_identity(payload, "private-integration")

    assert set(identity.channels) == {"general", "random"}
    assert identity.channels["random"].id == "C3"


def test_duplicate_channel_names_last_wins():
    payload = make_payload(channels=[
        {"id": "C1", "name": "general"},
        {"id": "C9", "name": "general"},
    ])

    identity = build_identity(payload, "private-integration")

    assert identity.channels["general"].id == "C9"


def test_first_matching_group_is_default_channel():
    payload = make_payload(groups=[
        {"id": "G1", "name": "other"},
        {"id": "G2", "name": "private-integration"},
        {"id": "G3", "name": "private-integration"},
    ])

    identity = build_identity(payload, "private-integration")

    assert identity.default_channel.id == "G2"


def test_missing_bot_user_is_not_fatal(caplog):
    payload = make_payload(users=[{"id": "U2", "name": "alice", "profile": {}}])

    identity = build_identity(payload, "private-integration")

    assert identity.self.bot_id is None
    assert "Could not resolve bot id" in caplog.text


def test_missing_default_channel_is_not_fatal(caplog):
    identity = build_identity(make_payload(groups=[]), "private-integration")

    assert identity.default_channel is None
    assert "Default channel 'private-integration' not found" in caplog.text


def test_snapshot_is_frozen(identity):
    with pytest.raises(dataclasses.FrozenInstanceError):
        identity.default_channel = None
