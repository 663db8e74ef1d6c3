"""sse-bridge: stream pub/sub backplane channels to clients over Server-Sent Events."""

__version__ = "0.1.0"
