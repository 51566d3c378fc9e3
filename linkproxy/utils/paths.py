"""Path normalization helpers shared by all source backends

Paths are canonicalized to a single leading separator with no repeated or
trailing separators. The empty path and '/' both denote the root.

Functions:
    normalize(path: str | None) -> str
        Collapse repeated separators and return the canonical '/a/b' form.
    join(base: str | None, sub: str | None) -> str
        Normalize both fragments, concatenate and normalize again.
    split(path: str | None) -> list[str]
        Return the non-empty segments of a path.

Example:
    >>> normalize('//docs///guide/')
    '/docs/guide'
    >>> normalize('')
    '/'
    >>> join('/docs', 'guide')
    '/docs/guide'
    >>> join(join('/docs', 'guide'), '')
    '/docs/guide'

NOTE:
    Backends decide for themselves whether the leading separator is kept for
    their upstream call (e.g. the repository contents API is relative-path based).
"""

SEPARATOR = '/'


def split(path: str | None) -> list[str]:
    if not path:
        return []
    return [segment for segment in path.split(SEPARATOR) if segment]


def normalize(path: str | None) -> str:
    """Return the canonical form of a path

    Args:
        path (str | None):
            Arbitrary path fragment. None is treated as the root.

    Returns:
        str: '/'-prefixed path without repeated or trailing separators.

    Example:
        >>> normalize('a//b/')
        '/a/b'
    """
    return SEPARATOR + SEPARATOR.join(split(path))


def join(base: str | None, sub: str | None) -> str:
    """Join two path fragments into a canonical path

    Both fragments are normalized independently before concatenation, so
    repeated joins are idempotent.

    Example:
        >>> join('/docs/', '/guide//intro')
        '/docs/guide/intro'
        >>> join('/', '')
        '/'
    """
    return normalize(f'{normalize(base)}{SEPARATOR}{normalize(sub)}')
