"""Logging adapters implementing LoggerProtocol."""

from sse_bridge.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
