"""perigee engine — interpreter sessions, boot files, and the OSC listener."""
from .bootfile import BOOT_FILE_NAME, BootFileResolver, expand_path, find_file_upwards
from .config import KeyMap, PerigeeConfig, SessionConfig
from .errors import BootFileNotFound, PerigeeError, SpawnError, WriteError
from .formatter import CommandFormatter, format_command
from .osc_server import OscServer, format_message, parse_instrument
from .process_session import ProcessSession, SessionState
from .subscription import Subscription

__all__ = [
    # Sessions
    "ProcessSession",
    "SessionState",
    "Subscription",
    "CommandFormatter",
    "format_command",
    # Boot files
    "BOOT_FILE_NAME",
    "BootFileResolver",
    "expand_path",
    "find_file_upwards",
    # Network
    "format_message",
    "OscServer",
    "parse_instrument",
    # Config
    "KeyMap",
    "PerigeeConfig",
    "SessionConfig",
    # Errors
    "BootFileNotFound",
    "PerigeeError",
    "SpawnError",
    "WriteError",
]
