"""
Lychii - a Slack bot runtime with pluggable message handlers.
"""

from .models import (
    Bot,
    Channel,
    IdentitySnapshot,
    InboundMessage,
    Processor,
    SelfIdentity,
    SessionState,
    Team,
    TransportEvent,
    User,
)
from .config import BotConfig, StorageConfig, load_config
from .plugin import Plugin
from .plugin_loader import PluginLoader
from .storage import Storage
from .transport import Transport
from .bot import LychiiBot

__version__ = "0.1.0"

__all__ = [
    'Bot',
    'BotConfig',
    'Channel',
    'IdentitySnapshot',
    'InboundMessage',
    'LychiiBot',
    'Plugin',
    'PluginLoader',
    'Processor',
    'SelfIdentity',
    'SessionState',
    'Storage',
    'StorageConfig',
    'Team',
    'Transport',
    'TransportEvent',
    'User',
    'load_config',
]
