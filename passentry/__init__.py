"""Parser and model for pass-compatible password-store records."""

from passentry.core.entry import PasswordEntry
from passentry.core.errors import (
    EncodingError,
    InvalidCounter,
    MalformedOtpUri,
    PassEntryError,
)
from passentry.version import get_version

__version__ = get_version()

__all__ = [
    "EncodingError",
    "InvalidCounter",
    "MalformedOtpUri",
    "PassEntryError",
    "PasswordEntry",
    "__version__",
]
