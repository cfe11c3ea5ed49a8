"""
Authorized client tokens.

Tokens come from the ``server.auth`` config key. When none are configured
a single random token is generated and logged so the operator can pick it
up from the startup output.
"""

import uuid
from collections.abc import Iterable, Iterator

from tracker.core.logging import get_logger

logger = get_logger(__name__)


class TokenTable:
    """Immutable set of bearer tokens. Comparison is exact and case-sensitive."""

    def __init__(self, tokens: Iterable[str], generated: bool = False) -> None:
        self._tokens = frozenset(tokens)
        self.generated = generated

    def is_authorized(self, token: str) -> bool:
        return token in self._tokens

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tokens))

    def __len__(self) -> int:
        return len(self._tokens)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenTable):
            return self._tokens == other._tokens
        if isinstance(other, (set, frozenset)):
            return self._tokens == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __repr__(self) -> str:
        # Token values are credentials
        return f"TokenTable(size={len(self._tokens)}, generated={self.generated})"


def generate_token() -> str:
    return str(uuid.uuid4())


def build_token_table(raw_tokens: Iterable[str]) -> TokenTable:
    """
    Build the token table from configured values.

    Entries are stripped of surrounding whitespace, empty entries are
    dropped and duplicates collapse. Never returns an empty table.

    Args:
        raw_tokens: Configured token strings

    Returns:
        TokenTable: Configured tokens, or one freshly generated token
    """
    entries = [token.strip() for token in raw_tokens]
    entries = [token for token in entries if token]
    tokens = set(entries)

    if len(tokens) < len(entries):
        logger.info(
            "Duplicate authorization tokens collapsed",
            configured=len(entries),
            unique=len(tokens),
        )

    if tokens:
        return TokenTable(tokens)

    generated = generate_token()
    logger.warning(
        "Empty 'server.auth' config key. Auto generated token",
        token=generated,
    )
    return TokenTable([generated], generated=True)
