"""Requests, the request channel and the terminal event pipeline."""

from .channel import ChannelClosedError, RequestChannel
from .handler import handle_global_command, handle_key_event, handle_mouse_event, start_event_handler
from .terminal import mouse_tracking, read_terminal_events

__all__ = [
    "ChannelClosedError",
    "RequestChannel",
    "handle_global_command",
    "handle_key_event",
    "handle_mouse_event",
    "mouse_tracking",
    "read_terminal_events",
    "start_event_handler",
]
