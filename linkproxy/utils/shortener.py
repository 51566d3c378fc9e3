"""Shortcode generation utility

Short codes are derived from a SHA-256 digest of a seed string. The caller
mixes a uniqueness salt (typically the current time) into the seed, so codes
are not predictable from the target alone.

Functions:
    code_length(kind) -> int
        Length of a short code for a link kind (folders get shorter codes).
    generate_shortcode(seed, length) -> str
        Single digest attempt: render a digest prefix in base36 at a fixed length.
    mint_shortcode(seed, kind, lookup, fingerprint, max_attempts) -> str
        Collision-aware generation against the link store.

Example:
    >>> from linkproxy.utils.shortener import generate_shortcode
    >>> generate_shortcode('https://example.org/a.bin', length=6)
    'adskjn'
"""

import hashlib
import logging
import string
from collections.abc import Callable

from linkproxy.exceptions import CodeGenerationExhaustedError
from linkproxy.utils.constants import FILE_CODE_LENGTH, FOLDER_CODE_LENGTH, MAX_RETRY_ATTEMPTS


logger = logging.getLogger(__name__)

ALPHABET = string.digits + string.ascii_lowercase
BASE = len(ALPHABET)  # base36: 0-9 followed by a-z
PAD_CHARACTER = ALPHABET[0]

# Number of hex digits of the digest reinterpreted as an integer (32 bits)
DIGEST_PREFIX_WIDTH = 8


def code_length(kind: str) -> int:
    """Return the short code length mandated by a link kind ('file' or 'folder')."""
    return FOLDER_CODE_LENGTH if kind == 'folder' else FILE_CODE_LENGTH


def _to_base36(number: int) -> str:
    if number == 0:
        return ALPHABET[0]
    digits = []
    while number:
        number, remainder = divmod(number, BASE)
        digits.append(ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_shortcode(seed: str, length: int = FILE_CODE_LENGTH) -> str:
    """Generate a fixed-length base36 code from a seed string

    Algorithm:
        1- SHA-256 the seed and take the first 8 hex digits of the digest
        2- Reinterpret them as an unsigned integer
        3- Render the integer in base36 (most significant digit first)
        4- Truncate to `length`, or right-pad with '0' when shorter

    Args:
        seed (str):
            Non-empty seed string. Must already carry a uniqueness salt.
        length (int):
            Exact length of the returned code.

    Returns:
        str: code of exactly `length` characters from [0-9a-z].

    Raises:
        TypeError: If seed is not a string or length is not an integer.
        ValueError: If seed is empty or length is not positive.

    Example:
        >>> generate_shortcode('/docs1735689600000', length=5)
        '4w3rp'
    """
    if not isinstance(seed, str):
        raise TypeError(f'Seed must be of type string (given type: {type(seed)}).')
    if not seed:
        raise ValueError('Seed must be a non-empty string.')
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    digest = hashlib.sha256(seed.encode('utf-8')).hexdigest()
    number = int(digest[:DIGEST_PREFIX_WIDTH], 16)
    return _to_base36(number)[:length].ljust(length, PAD_CHARACTER)


def mint_shortcode(
    seed: str,
    kind: str,
    lookup: Callable[[str], str | None],
    fingerprint: str,
    max_attempts: int = MAX_RETRY_ATTEMPTS,
) -> str:
    """Generate a short code that does not clash with a different stored link

    Each attempt re-hashes the seed with the attempt counter appended
    ('<seed>-1', '<seed>-2', ...). A code is accepted when nothing is stored
    under it, or when the stored link has the same content fingerprint
    (re-creating an identical link is idempotent).

    Args:
        seed (str):
            Seed string, already salted by the caller (e.g. target + current time).
        kind (str):
            Link kind ('file' or 'folder'); selects the code length.
        lookup (Callable[[str], str | None]):
            Returns the content fingerprint stored under a code, or None if the code is free.
        fingerprint (str):
            Content fingerprint of the link being created.
        max_attempts (int):
            Retry ceiling. Defaults to MAX_RETRY_ATTEMPTS.

    Returns:
        str: accepted short code.

    Raises:
        CodeGenerationExhaustedError: If every attempt collided with a different link.

    Example:
        >>> mint_shortcode('https://example.org/a.bin1735689600000', 'file', lambda code: None, '{...}')
        '15qmil'
    """
    length = code_length(kind)

    for attempt in range(max_attempts):
        attempt_seed = f'{seed}-{attempt}' if attempt else seed
        shortcode = generate_shortcode(attempt_seed, length=length)

        existing = lookup(shortcode)
        if existing is None or existing == fingerprint:
            return shortcode

        logger.debug('Short code collision, retrying.', extra={'shortcode': shortcode, 'attempt': attempt})

    raise CodeGenerationExhaustedError(f'Failed to generate a unique short code after {max_attempts} attempts.')
