"""Errors raised while parsing password-store records."""


class PassEntryError(Exception):
    """Base error for this package."""


class EncodingError(PassEntryError):
    """Raised when a record body cannot be decoded as text."""


class MalformedOtpUri(PassEntryError):
    """Raised when an otpauth:// line cannot be parsed as a URI."""


class InvalidCounter(PassEntryError):
    """Raised when a HOTP line has a missing or non-numeric counter."""
