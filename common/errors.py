from typing import Any, Dict, Optional


class OfferError(Exception):
    """Base for every error raised while sending a seller offer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(OfferError):
    """Raised when the configuration file or a setting can't be used."""
    pass


class SubmissionError(OfferError):
    """Any failure before the offer was accepted. Fatal for that order."""
    pass


class MissingTokenError(SubmissionError):
    """The seller's session cookie carries no csrf_token."""

    def __init__(self, message: str = "csrf_token not found in session cookie"):
        super().__init__(message)


class InvalidCookieError(SubmissionError):
    """The party login cookie is not shaped like a steamLoginSecure cookie."""
    pass


class EncryptionError(SubmissionError):
    """Public key could not be loaded or the cipher failed."""
    pass


class TransportError(SubmissionError):
    """Network failure, timeout, HTTP error status or an unreadable body."""
    pass


class SubmissionRejectedError(SubmissionError):
    """The marketplace answered with a code other than the success sentinel."""

    def __init__(self, code: str, server_message: str):
        super().__init__(f"API returned error: {server_message}",
                         {"code": code, "msg": server_message})
        self.code = code
        self.server_message = server_message


class StatusQueryError(OfferError):
    """Order status lookup failed. Never fatal: the offer was already placed."""
    pass
