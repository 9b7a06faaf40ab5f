"""Error types raised by the notification core."""


class ValidationError(ValueError):
    """Raised when required notification fields are missing or blank."""


class NotFoundError(LookupError):
    """Raised when an operation references an unknown notification."""


class DeliveryError(RuntimeError):
    """Raised when a realtime message cannot be written to a connection."""


class MailError(RuntimeError):
    """Raised by mail transports when a message cannot be delivered."""


class PresenceInconsistency(RuntimeError):
    """Connection lifecycle event that does not match the registry state."""


__all__ = [
    "ValidationError",
    "NotFoundError",
    "DeliveryError",
    "MailError",
    "PresenceInconsistency",
]
