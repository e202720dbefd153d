"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class ConnectionError(ProtocolError):
    """Failed to reach a remote FetchTime server."""


class EnvelopeDecodeError(ProtocolError):
    """A wire message could not be decoded into a request envelope."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Malformed envelope" + (f": {detail}" if detail else ""))
