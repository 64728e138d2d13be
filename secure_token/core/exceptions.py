"""
Exceptions raised by the secure token layer itself

Database errors are never wrapped: they reach the caller unchanged.
"""


class SecureTokenError(Exception):
    """Base class for secure token errors"""


class TokenGenerationError(SecureTokenError):
    """No free token was found within the allowed number of attempts"""

    def __init__(self, attribute: str, attempts: int):
        self.attribute = attribute
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique value for '{attribute}' "
            f"after {attempts} attempts; use a larger token_size"
        )


class TokenNotDeclaredError(SecureTokenError):
    """Regeneration requested for an attribute without a secure token"""

    def __init__(self, model: type, attribute: str):
        self.model = model
        self.attribute = attribute
        super().__init__(
            f"{model.__name__}.{attribute} is not declared with has_secure_token"
        )


class DetachedRecordError(SecureTokenError):
    """The record has no session to persist the regenerated token"""


class PendingChangesError(SecureTokenError):
    """The session holds changes to other objects that a commit would persist"""

    def __init__(self, attribute: str, others: list):
        self.attribute = attribute
        self.others = others
        super().__init__(
            f"Cannot regenerate '{attribute}': the session has {len(others)} other "
            f"pending change(s); flush or roll them back first"
        )
