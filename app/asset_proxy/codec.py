"""
    Encoding of asset UUIDs as compact, URL-safe base62 tokens.

    A UUID (128 bits) always fits in 22 base62 symbols, so tokens are
    zero-padded to that width.
"""
import uuid
from typing import Union

BASE62_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
BASE = len(BASE62_CHARS)
TOKEN_LENGTH = 22

_INDEX = {char: idx for idx, char in enumerate(BASE62_CHARS)}
_HEX_DIGITS = set("0123456789abcdefABCDEF")


class CodecError(ValueError):
    """Base class for identifier codec errors."""


class InvalidTokenError(CodecError):
    """Raised when a token contains a character outside the base62 alphabet."""
    def __init__(self, char: str):
        self.char = char
        super().__init__(f"Invalid base62 character: {char!r}")


class InvalidIdentifierError(CodecError):
    """Raised when a value is not a 32 hex digit UUID."""


def uuid_to_base62(identifier: Union[str, uuid.UUID]) -> str:
    """
        Encode a UUID to a 22 character base62 token.

        "8f2a4b1c-7d8e-4f12-b345-6789abcdef01" -> fixed width token, most
        significant symbol first.
    """
    hex_digits = str(identifier).replace("-", "")
    if len(hex_digits) != 32 or not set(hex_digits) <= _HEX_DIGITS:
        raise InvalidIdentifierError(f"Invalid UUID: {identifier!r}")

    num = int(hex_digits, 16)
    chars = []
    while num > 0:
        num, rem = divmod(num, BASE)
        chars.append(BASE62_CHARS[rem])

    return "".join(reversed(chars)).rjust(TOKEN_LENGTH, BASE62_CHARS[0])


def base62_to_uuid(token: str) -> str:
    """
        Decode a base62 token back to a dashed, lowercase UUID string.

        The token length is not checked. Values wider than 128 bits keep
        their leading 32 hex digits.
    """
    num = 0
    for char in token:
        idx = _INDEX.get(char)
        if idx is None:
            raise InvalidTokenError(char)
        num = num * BASE + idx

    hex_digits = format(num, "032x")
    return "-".join([
        hex_digits[0:8],
        hex_digits[8:12],
        hex_digits[12:16],
        hex_digits[16:20],
        hex_digits[20:32],
    ])
