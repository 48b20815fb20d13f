"""Shortcode and record id generation utilities

This module generates unpredictable, URL-safe tokens for short codes and
URL record identifiers.

Functions:
    generate_shortcode(length=7, alphabet=SHORTCODE_ALPHABET):
        Generate a random token suitable for use as a URL slug.
    generate_record_id(length=21):
        Generate a random, globally unique URL record identifier.

Example:
    >>> from linkshortener.utils import generate_shortcode
    >>> generate_shortcode()
    'V1StGXR'
"""

import secrets

from linkshortener.utils.constants import SHORTCODE_ALPHABET, SHORTCODE_LENGTH, RECORD_ID_LENGTH


def generate_shortcode(length: int = SHORTCODE_LENGTH, alphabet: str = SHORTCODE_ALPHABET) -> str:
    """Generate a random URL-safe token.

    Characters are drawn with the `secrets` CSPRNG, so consecutive codes
    carry no visible pattern and cannot be predicted from earlier ones.

    Args:
        length (int, optional):
            Number of characters in the token. Defaults to 7.

        alphabet (str, optional):
            Characters to draw from. Defaults to [A-Za-z0-9_-].

    Returns:
        str: A random token of exactly `length` characters.

    NOTE:
        - Uniqueness is NOT guaranteed here. Callers must check for collisions
          and the registry rejects duplicates atomically at write time.
    """
    if not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if not alphabet:
        raise ValueError('Alphabet must be a non-empty string.')

    return ''.join(secrets.choice(alphabet) for _ in range(length))


def generate_record_id(length: int = RECORD_ID_LENGTH) -> str:
    """Generate a URL record identifier (21 URL-safe characters, ~126 bits of entropy)"""
    return generate_shortcode(length=length)
