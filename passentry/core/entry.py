"""Data model for a single password-store entry."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from .errors import EncodingError
from .otp import (
    HOTP_PREFIX,
    TOTP_PREFIX,
    find_otp_line,
    iter_lines,
    parse_counter,
    parse_otp_uri,
    replace_counter,
)

logger = logging.getLogger(__name__)

USERNAME_FIELDS: tuple[str, ...] = ("login", "username")

_FIELD_SEPARATOR_RE = re.compile(r": *")


class PasswordEntry:
    """
    A single entry in a password store, parsed from its decrypted body.

    The first line of the body is the password. Everything after it is
    "extra content", which may hold ``login:``/``username:`` lines and one
    ``otpauth://`` line for TOTP or HOTP.

    Attributes:
        password: First line of the body (may be empty)
        extra_content: Text after the first line, HOTP counter normalized
        totp_secret: Secret of the TOTP URI line, if any
        hotp_secret: Secret of the HOTP URI line, if any
        hotp_counter: Counter parsed from the HOTP URI line, if any
    """

    def __init__(self, content: str, username_fields: Sequence[str] = USERNAME_FIELDS):
        self._content = content
        self._username_fields = tuple(f.lower() for f in username_fields)
        self._incremented = False

        parts = content.split("\n", 1)
        self._has_extra_part = len(parts) > 1
        self.password: str = parts[0]

        self.totp_secret: str | None = None
        totp_line = find_otp_line(content, TOTP_PREFIX)
        if totp_line is not None:
            self.totp_secret = parse_otp_uri(totp_line).secret

        self.hotp_secret: str | None = None
        self.hotp_counter: int | None = None
        hotp_line = find_otp_line(content, HOTP_PREFIX)
        if hotp_line is not None:
            hotp_uri = parse_otp_uri(hotp_line)
            self.hotp_secret = hotp_uri.secret
            self.hotp_counter = parse_counter(hotp_uri)

        extra = parts[1] if self._has_extra_part else ""
        if self.has_hotp():
            extra = replace_counter(extra, self.hotp_counter)
        self.extra_content: str = extra

        self._username = self._find_username()

        logger.debug(
            f"Parsed entry: extra={self.has_extra_content()} "
            f"username={self.has_username()} totp={self.has_totp()} hotp={self.has_hotp()}"
        )

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        encoding: str = "utf-8",
        username_fields: Sequence[str] = USERNAME_FIELDS,
    ) -> "PasswordEntry":
        """
        Build an entry from a decrypted byte buffer.

        Raises:
            EncodingError: If the bytes are not valid text in ``encoding``
        """
        try:
            content = data.decode(encoding)
        except UnicodeDecodeError as e:
            raise EncodingError(f"Record body is not valid {encoding}: {e}") from e
        return cls(content, username_fields=username_fields)

    @property
    def username(self) -> str:
        """Username from the first ``login:``/``username:`` line, or empty string."""
        return self._username or ""

    def has_extra_content(self) -> bool:
        return len(self.extra_content) != 0

    def has_username(self) -> bool:
        return bool(self._username)

    def has_totp(self) -> bool:
        return self.totp_secret is not None

    def has_hotp(self) -> bool:
        return self.hotp_secret is not None and self.hotp_counter is not None

    def hotp_is_incremented(self) -> bool:
        return self._incremented

    def increment_hotp(self) -> None:
        """
        Bump the HOTP counter inside ``extra_content``.

        The new value is always ``hotp_counter + 1`` where ``hotp_counter`` is
        the value parsed at construction, so repeated calls do not accumulate.
        Persisting the new body is up to the caller.
        """
        for line in iter_lines(self._content):
            if line.startswith(HOTP_PREFIX):
                self.extra_content = replace_counter(self.extra_content, self.hotp_counter + 1)
                self._incremented = True

        if self._incremented:
            logger.info(f"HOTP counter incremented to {self.hotp_counter + 1}")
        else:
            logger.debug("No HOTP line in entry, counter left unchanged")

    def to_text(self) -> str:
        """
        Reassemble the record body from the password and current extra content.

        Returns:
            ``password`` alone if the original body had no line break,
            otherwise ``password + "\\n" + extra_content``
        """
        if not self._has_extra_part:
            return self.password
        return f"{self.password}\n{self.extra_content}"

    def _find_username(self) -> str | None:
        for line in iter_lines(self.extra_content):
            lowered = line.lower()
            for name in self._username_fields:
                if lowered.startswith(f"{name}:"):
                    return _FIELD_SEPARATOR_RE.split(line, maxsplit=1)[1]
        return None

    def __repr__(self) -> str:
        return (
            f"PasswordEntry(username={self.username!r}, "
            f"totp={self.has_totp()}, hotp={self.has_hotp()}, "
            f"hotp_counter={self.hotp_counter!r})"
        )
