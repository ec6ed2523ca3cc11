"""Exception hierarchy for Subscription Scanner."""


class SubscriptionScannerError(Exception):
    """Base exception for all Subscription Scanner errors."""


class DecodeError(SubscriptionScannerError):
    """Raised when a transport-encoded message body cannot be decoded."""


class MessageParseError(SubscriptionScannerError):
    """Raised when a single message has an unexpected shape."""


class SourceError(SubscriptionScannerError):
    """Raised when the mail source cannot be reached or queried."""


class AuthError(SourceError):
    """Raised when credentials are missing, expired, or rejected."""
