from .events import EventLog, EventSink
from .gate import AccessGate, OpenGate, WhitelistGate
from .logging_config import setup_logging
from .service import FundService
from .settings import FundSettings, get_settings

__all__ = [
    "AccessGate",
    "EventLog",
    "EventSink",
    "FundService",
    "FundSettings",
    "OpenGate",
    "WhitelistGate",
    "get_settings",
    "setup_logging",
]
