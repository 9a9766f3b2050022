"""Recognition of otpauth:// lines embedded in a record body.

Lines look like::

    otpauth://totp/<label>?secret=<value>&issuer=<value>
    otpauth://hotp/<label>?secret=<value>&counter=<integer>

Only field extraction happens here. Secrets are not validated as base32 and
no codes are generated.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field

from .errors import InvalidCounter, MalformedOtpUri

TOTP_PREFIX = "otpauth://totp/"
HOTP_PREFIX = "otpauth://hotp/"

_COUNTER_RE = re.compile(r"counter=[0-9]+")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

# Signed 64-bit range
_COUNTER_MIN = -(2**63)
_COUNTER_MAX = 2**63 - 1


@dataclass(frozen=True)
class OtpUri:
    """Parsed representation of an otpauth:// line.

    Attributes:
        otp_type: "totp" or "hotp"
        label: Decoded label (path component without the leading slash)
        params: First value of each query parameter, blank values kept
        raw: The line the URI was parsed from
    """

    otp_type: str
    label: str
    params: dict[str, str] = field(default_factory=dict)
    raw: str = ""

    @property
    def secret(self) -> str | None:
        return self.params.get("secret")

    @property
    def issuer(self) -> str | None:
        return self.params.get("issuer")

    @property
    def raw_counter(self) -> str | None:
        return self.params.get("counter")


def iter_lines(content: str) -> list[str]:
    """Split text on newlines, dropping trailing empty lines."""
    lines = content.split("\n")
    while lines and not lines[-1]:
        lines.pop()
    return lines


def find_otp_line(content: str, prefix: str) -> str | None:
    """Return the first line of ``content`` starting with ``prefix``."""
    for line in iter_lines(content):
        if line.startswith(prefix):
            return line
    return None


def parse_otp_uri(line: str) -> OtpUri:
    """
    Parse an otpauth:// line.

    Args:
        line: A line starting with the TOTP or HOTP prefix

    Returns:
        OtpUri with its query parameters decoded

    Raises:
        MalformedOtpUri: If the line is not a parseable URI
    """
    try:
        parts = urllib.parse.urlsplit(line)
        query = urllib.parse.parse_qsl(
            parts.query, keep_blank_values=True, errors="strict"
        )
        label = urllib.parse.unquote(parts.path.lstrip("/"), errors="strict")
    except ValueError as e:
        raise MalformedOtpUri(f"Cannot parse OTP URI: {e}") from e

    params: dict[str, str] = {}
    for key, value in query:
        params.setdefault(key, value)

    return OtpUri(otp_type=parts.netloc, label=label, params=params, raw=line)


def parse_counter(uri: OtpUri) -> int:
    """
    Read the HOTP counter of a parsed URI.

    Raises:
        InvalidCounter: If the counter is missing, not a base-10 integer, or
            outside the signed 64-bit range
    """
    raw = uri.raw_counter
    if raw is None:
        raise InvalidCounter("HOTP URI has no 'counter' parameter")
    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidCounter(f"HOTP counter is not an integer: {raw!r}")

    counter = int(raw)
    if not _COUNTER_MIN <= counter <= _COUNTER_MAX:
        raise InvalidCounter(f"HOTP counter out of range: {raw}")
    return counter


def replace_counter(text: str, value: int) -> str:
    """Rewrite the first ``counter=<digits>`` occurrence in ``text``."""
    return _COUNTER_RE.sub(f"counter={value}", text, count=1)
