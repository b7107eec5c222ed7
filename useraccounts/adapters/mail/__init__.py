"""Mail adapters - notification delivery."""

from .console import ConsoleEmailSender
from .dispatcher import ThreadedMailDispatcher

__all__ = ["ConsoleEmailSender", "ThreadedMailDispatcher"]
