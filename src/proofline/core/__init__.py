"""Core utilities for Proofline."""

from .changes import ChangeEvent, ChangeKind, add_listener, notify_changed, remove_listener
from .env import load_env
from .errors import AccessDenied, NotFound, ProoflineError, TransportError, ValidationError
from .logs import clear_logs, get_event_logger, get_logs, log_message

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "add_listener",
    "remove_listener",
    "notify_changed",
    "load_env",
    "ProoflineError",
    "AccessDenied",
    "NotFound",
    "ValidationError",
    "TransportError",
    "get_event_logger",
    "log_message",
    "get_logs",
    "clear_logs",
]
