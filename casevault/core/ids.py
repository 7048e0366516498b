"""Reversible short ids for internal integer primary keys.

Tokens are produced with sqids using the deployment alphabet and minimum
length. Changing either setting changes the mapping for every id, so both are
deployment-time constants.
"""

from functools import lru_cache

from sqids import Sqids

from casevault.config import settings
from casevault.core.exceptions import NotFoundError

MAX_ID = 2**63 - 1


class IdDecodeError(ValueError):
    """Raised when a token is not the canonical encoding of a single id."""


class IdObfuscator:
    def __init__(self, alphabet: str, min_length: int):
        self._sqids = Sqids(alphabet=alphabet, min_length=min_length)

    def encode(self, value: int) -> str:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"id must be an integer, got {type(value).__name__}")
        if value < 0 or value > MAX_ID:
            raise ValueError(f"id {value} is outside the supported range 0..{MAX_ID}")
        return self._sqids.encode([value])

    def decode(self, token: str) -> list[int]:
        """Decode ``token`` back to ``[id]``.

        sqids accepts several spellings for some numbers; only the one
        ``encode`` produces is valid here so the mapping stays a bijection.
        """
        if not token:
            raise IdDecodeError("empty id token")
        numbers = self._sqids.decode(token)
        if len(numbers) != 1 or not 0 <= numbers[0] <= MAX_ID:
            raise IdDecodeError(f"invalid id token: {token!r}")
        if self._sqids.encode(numbers) != token:
            raise IdDecodeError(f"non-canonical id token: {token!r}")
        return numbers

    def decode_id(self, token: str) -> int:
        return self.decode(token)[0]


@lru_cache(maxsize=1)
def get_id_obfuscator() -> IdObfuscator:
    return IdObfuscator(settings.sqids_alphabet, settings.sqids_min_length)


def decode_path_id(token: str, label: str = "resource") -> int:
    """Decode a path parameter; undecodable tokens are reported as not found."""
    try:
        return get_id_obfuscator().decode_id(token)
    except IdDecodeError:
        raise NotFoundError(f"The {label} `{token}` does not exist!")
