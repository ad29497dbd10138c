"""Core severity scale, sink state machine and digest composition."""

from .composer import ComposedMessage, compose_body, compose_message, compose_subject
from .entry import LogEntry, render_entry
from .errors import ConfigurationError, DigestlogError, ErrorCategory, UnknownLevelError
from .levels import (
    Severity,
    from_stdlib_level,
    get_all_levels,
    get_level_name,
    get_level_priority,
    parse_severity,
)
from .lifecycle import AtexitRegistrar, UnitOfWork, get_process_registrar
from .sink import AggregatingSink
from .state import SinkState

__all__ = [
    "AggregatingSink",
    "AtexitRegistrar",
    "ComposedMessage",
    "ConfigurationError",
    "DigestlogError",
    "ErrorCategory",
    "LogEntry",
    "Severity",
    "SinkState",
    "UnitOfWork",
    "UnknownLevelError",
    "compose_body",
    "compose_message",
    "compose_subject",
    "from_stdlib_level",
    "get_all_levels",
    "get_level_name",
    "get_level_priority",
    "get_process_registrar",
    "parse_severity",
    "render_entry",
]
