"""
Token Utility - Secure random base58 strings

Uses Python's secrets module so every token is cryptographically secure.
The base58 alphabet drops the look-alike characters 0, O, I and l, so
tokens are safe to read aloud, print, store and put in URLs.
"""
import secrets


BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def generate_secure_token(length: int = 24) -> str:
    """
    Generate a random base58 string (cryptographically secure)

    The length is counted in characters, not bytes. Each character carries
    log2(58) ~ 5.86 bits, so 24 characters give roughly 140 bits.

    Args:
        length: Number of characters in the token (default 24)

    Returns:
        str: Random token of exactly `length` base58 characters

    Raises:
        ValueError: If length is smaller than 1

    Example:
        >>> token = generate_secure_token()
        >>> print(token)
        'pX27zsMN2ViQKta1bGfLmVJE'
    """
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError(f"Token length must be a positive integer, got {length!r}")
    return "".join(secrets.choice(BASE58_ALPHABET) for _ in range(length))
