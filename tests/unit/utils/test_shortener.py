"""Unit tests for short code generation

Test coverage includes:

1. generate_shortcode()
   - Produces exactly `length` characters from the base36 alphabet.
   - Is deterministic for a given seed (regression values).
   - Right-pads with '0' when the base36 rendering is shorter than `length`.
   - Rejects invalid seeds and lengths.
2. code_length()
   - Folder codes are shorter than file codes.
3. mint_shortcode()
   - Returns the first code when it is free.
   - Treats an identical stored link as success (idempotent).
   - Retries with '<seed>-<attempt>' on a collision with a different link.
   - Raises CodeGenerationExhaustedError after the retry ceiling.
"""

import string
from unittest.mock import MagicMock, call

import pytest

from linkproxy.exceptions import CodeGenerationExhaustedError
from linkproxy.utils.shortener import generate_shortcode, mint_shortcode, code_length
from linkproxy.utils.constants import FILE_CODE_LENGTH, FOLDER_CODE_LENGTH, MAX_RETRY_ATTEMPTS


BASE36 = set(string.digits + string.ascii_lowercase)

SEED = 'https://example.org/a.bin1735689600000'


# -------------------------------
# 1. generate_shortcode()
# -------------------------------


@pytest.mark.parametrize('seed', ['x', 'seed', SEED, '/docs1735689600000', 'ünïcødé'])
@pytest.mark.parametrize('length', [FOLDER_CODE_LENGTH, FILE_CODE_LENGTH, 1, 12])
def test_generate_shortcode_length_and_alphabet(seed, length):
    code = generate_shortcode(seed, length=length)
    assert len(code) == length
    assert set(code) <= BASE36


@pytest.mark.parametrize(
    'seed, length, expected',
    [
        ('https://example.org/a.bin', 6, 'adskjn'),
        ('/docs1735689600000', 5, '4w3rp'),
        (SEED, 6, '15qmil'),
        ('seed', 6, '74od3q'),
        ('seed', 5, '74od3'),
        ('x', 6, 'clwksi'),
    ],
)
def test_generate_shortcode_regression(seed, length, expected):
    assert generate_shortcode(seed, length=length) == expected


@pytest.mark.parametrize('seed, expected', [('pad19', '4m6ww0'), ('pad90', 'qq47n0')])
def test_generate_shortcode_pads_short_renderings(seed, expected):
    assert generate_shortcode(seed, length=6) == expected


def test_generate_shortcode_is_deterministic():
    assert generate_shortcode(SEED) == generate_shortcode(SEED)


@pytest.mark.parametrize('seed, length, error', [
    (None, 6, TypeError),
    (123, 6, TypeError),
    ('', 6, ValueError),
    ('seed', 0, ValueError),
    ('seed', -1, ValueError),
    ('seed', '6', TypeError),
    ('seed', True, TypeError),
])
def test_generate_shortcode_invalid_input(seed, length, error):
    with pytest.raises(error):
        generate_shortcode(seed, length=length)


# -------------------------------
# 2. code_length()
# -------------------------------


def test_code_length():
    assert code_length('folder') == FOLDER_CODE_LENGTH == 5
    assert code_length('file') == FILE_CODE_LENGTH == 6
    assert code_length('folder') < code_length('file')


# -------------------------------
# 3. mint_shortcode()
# -------------------------------


def test_mint_shortcode_free_code():
    lookup = MagicMock(return_value=None)

    assert mint_shortcode(SEED, 'file', lookup, '{"url": "a"}') == '15qmil'
    lookup.assert_called_once_with('15qmil')


def test_mint_shortcode_identical_content_is_idempotent():
    lookup = MagicMock(return_value='{"url": "a"}')

    assert mint_shortcode(SEED, 'file', lookup, '{"url": "a"}') == '15qmil'
    lookup.assert_called_once_with('15qmil')


def test_mint_shortcode_retries_with_attempt_counter():
    stored = {'15qmil': '{"url": "other"}', 'xzgmoz': '{"url": "other"}'}
    lookup = MagicMock(side_effect=stored.get)

    code = mint_shortcode(SEED, 'file', lookup, '{"url": "a"}')

    assert code == generate_shortcode(f'{SEED}-2') == '1seorm'
    assert lookup.call_args_list == [call('15qmil'), call('xzgmoz'), call('1seorm')]


def test_mint_shortcode_uses_folder_length():
    code = mint_shortcode('/docs1735689600000', 'folder', lambda code: None, '{}')
    assert code == '4w3rp'


def test_mint_shortcode_exhausted():
    lookup = MagicMock(return_value='{"url": "other"}')

    with pytest.raises(CodeGenerationExhaustedError, match=f'after {MAX_RETRY_ATTEMPTS} attempts'):
        mint_shortcode(SEED, 'file', lookup, '{"url": "a"}')

    assert lookup.call_count == MAX_RETRY_ATTEMPTS
    assert len({c.args[0] for c in lookup.call_args_list}) == MAX_RETRY_ATTEMPTS
