"""
secure_token - random token columns for SQLAlchemy models
"""
from secure_token.core.exceptions import (
    DetachedRecordError,
    PendingChangesError,
    SecureTokenError,
    TokenGenerationError,
    TokenNotDeclaredError,
)
from secure_token.core.secure_token import (
    SecureTokenField,
    SecureTokenMixin,
    declared_secure_tokens,
    generate_unique_secure_token,
    get_secure_token_field,
    has_secure_token,
    regenerate_token,
    secure_token,
)
from secure_token.utils.token import BASE58_ALPHABET, generate_secure_token

__version__ = "1.0.0"

__all__ = [
    # Declaration
    "has_secure_token",
    "secure_token",
    "SecureTokenField",
    "SecureTokenMixin",
    "get_secure_token_field",
    "declared_secure_tokens",

    # Generation
    "generate_secure_token",
    "generate_unique_secure_token",
    "regenerate_token",
    "BASE58_ALPHABET",

    # Errors
    "SecureTokenError",
    "TokenGenerationError",
    "TokenNotDeclaredError",
    "DetachedRecordError",
    "PendingChangesError",
]
