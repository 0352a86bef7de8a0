"""Websocket status server streaming cycle events to UI clients."""

from .config import ServerConfigurationError, UIServerConfig
from .events import ClientCommand, CommandParseError, parse_client_command
from .service import UIServer

__all__ = [
    "ClientCommand",
    "CommandParseError",
    "ServerConfigurationError",
    "UIServerConfig",
    "UIServer",
    "parse_client_command",
]
