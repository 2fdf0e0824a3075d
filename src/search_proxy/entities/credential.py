"""Upstream credential domain entity."""

from dataclasses import dataclass, field

PREVIEW_LENGTH = 8


@dataclass(frozen=True)
class Credential:
    """An API authorization token bound to its configuration slot.

    The token never appears in ``repr()`` output; use ``preview`` for
    anything that ends up in logs or responses.

    Attributes:
        slot: The numeric slot the token was read from (1-based)
        token: The raw bearer token
    """

    slot: int
    token: str = field(repr=False)

    @property
    def preview(self) -> str:
        """Redacted form of the token, safe for logs and responses."""
        return redact(self.token)

    def __str__(self) -> str:
        return f"#{self.slot} {self.preview}"


def redact(token: str, length: int = PREVIEW_LENGTH) -> str:
    """Return the first ``length`` characters of a token followed by an ellipsis."""
    return f"{token[:length]}..."
