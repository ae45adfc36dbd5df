"""Exception types raised by the memory layer."""


class MemoryBridgeError(Exception):
    """Base class for memory layer errors."""


class ValidationError(MemoryBridgeError, ValueError):
    """Input rejected before any call to the memory store."""


class StoreError(MemoryBridgeError):
    """The memory store failed (network, auth, or server-side rejection)."""
