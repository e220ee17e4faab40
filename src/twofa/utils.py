import re
from typing import Optional


def _redact_secret(text: Optional[str]) -> Optional[str]:
    """Redact base-32 key material for safe display.

    Keeps a short readable prefix of the secret followed by an ellipsis, the
    same way a token would be truncated in a log line.
    """
    if not text:
        return text

    def _redact_token(m: re.Match) -> str:
        tok = m.group(0)
        return tok[:4] + "…"

    # long runs of base-32 alphabet characters (upper or lower case, optional padding)
    return re.sub(r"\b[A-Za-z2-7]{12,}=*", _redact_token, text)


class KeychainError(Exception):
    """Base class for every keychain and code-generation failure."""


class MalformedLine(KeychainError, ValueError):
    """A non-blank keychain line that does not hold exactly `name digits secret`.

    Can be constructed with just a reason, or with the keyword args `lineno`
    and `source` once the parser knows where the line came from.
    """

    def __init__(self, reason: str = "malformed key", *, lineno: Optional[int] = None, source: Optional[str] = None):
        self.reason = reason
        self.lineno = lineno
        self.source = source
        super().__init__(reason)

    def at(self, lineno: int, source: Optional[str] = None) -> "MalformedLine":
        return MalformedLine(self.reason, lineno=lineno, source=source)

    def __str__(self) -> str:
        where = ""
        if self.lineno is not None:
            where = f"{self.source or '<keychain>'}:{self.lineno}: "
        return where + (_redact_secret(self.reason) or "")


class InvalidDigitCount(KeychainError, ValueError):
    def __init__(self, digits: int):
        self.digits = digits
        super().__init__(f"invalid digit count {digits!r}: must be between 1 and 9")


class InvalidSecretEncoding(KeychainError, ValueError):
    """The stored secret is not valid RFC 4648 base-32."""

    def __init__(self, secret: str):
        self.secret = secret
        # only a short prefix of the secret ever reaches the message
        super().__init__(f"invalid base32 secret '{secret[:4]}…'")


class KeyNotFound(KeychainError, LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no such key: {name}")
