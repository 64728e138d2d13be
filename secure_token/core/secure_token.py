"""
Secure token fields for SQLAlchemy models

has_secure_token() links a token column of a mapped class to:
- a before_insert hook that fills the column when it is still empty
- a SecureTokenField handle that can regenerate and commit a new value

Example:
    class User(Base):
        __tablename__ = "users"
        id = Column(Integer, primary_key=True)
        token = Column(String(24), unique=True)
        auth_secret = Column(String(80))

    has_secure_token(User)
    has_secure_token(User, "auth_secret", token_size=80)

    user = User()
    db.add(user)
    db.commit()
    user.token                          # => "pX27zsMN2ViQKta1bGfLmVJE"
    regenerate_token(user)              # => True
    regenerate_token(user, "auth_secret")

With uniq=True the column is checked against existing rows before a value
is used. The check and the INSERT/UPDATE are not atomic, so two concurrent
writers can still store the same value: add a unique index on the column
to guard against that (even more unlikely) case.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from sqlalchemy import Column, event, exists, inspect, select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, object_session

from secure_token.config import settings
from secure_token.core.exceptions import (
    DetachedRecordError,
    PendingChangesError,
    TokenGenerationError,
    TokenNotDeclaredError,
)
from secure_token.utils.token import generate_secure_token

logger = logging.getLogger(__name__)

REGISTRY_ATTRIBUTE = "__secure_tokens__"


# ============= GENERATION =============

def generate_unique_secure_token(
    exists_check: Callable[[str], bool],
    size: int,
    uniq: bool,
    max_attempts: Optional[int] = None,
    attribute: str = "token",
) -> str:
    """
    Generate a token, optionally retrying until it is not already stored

    Args:
        exists_check: Callable telling whether a candidate is already stored.
            Only called when uniq is True; its errors propagate as is.
        size: Token length in characters
        uniq: Retry until exists_check returns False
        max_attempts: Maximum number of candidates to try (default
            settings.MAX_UNIQUE_ATTEMPTS)
        attribute: Column name, used in log and error messages

    Returns:
        str: The generated token

    Raises:
        TokenGenerationError: If every candidate was already taken
    """
    if not uniq:
        return generate_secure_token(size)

    if max_attempts is None:
        max_attempts = settings.MAX_UNIQUE_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        candidate = generate_secure_token(size)
        if not exists_check(candidate):
            logger.debug(f"Unique '{attribute}' found after {attempt} attempt(s)")
            return candidate
        logger.warning(f"Token collision on '{attribute}' (attempt {attempt}/{max_attempts})")

    raise TokenGenerationError(attribute, max_attempts)


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


# ============= FIELD HANDLE =============

@dataclass(frozen=True, eq=False)
class SecureTokenField:
    """
    Token configuration of one column on one mapped class

    Created by has_secure_token(); immutable afterwards.
    """

    model: type
    attribute: str
    token_size: int
    uniq: bool
    max_attempts: int
    column: Column

    def __repr__(self):
        return (
            f"<SecureTokenField({self.model.__name__}.{self.attribute}, "
            f"token_size={self.token_size}, uniq={self.uniq})>"
        )

    def value_exists(self, bind: Union[Session, Connection], candidate: str) -> bool:
        """Check whether any stored row already holds candidate"""
        query = select(exists().where(self.column == candidate))
        return bool(bind.scalar(query))

    def generate(self, bind: Optional[Union[Session, Connection]] = None) -> str:
        """
        Generate a new value for this column

        Args:
            bind: Session or Connection used for the uniqueness check.
                Required when the field was declared with uniq=True.
        """
        if self.uniq and bind is None:
            raise ValueError(f"A session is required to generate a unique '{self.attribute}'")
        return generate_unique_secure_token(
            lambda candidate: self.value_exists(bind, candidate),
            self.token_size,
            self.uniq,
            max_attempts=self.max_attempts,
            attribute=self.attribute,
        )

    def before_first_persist(self, record, bind: Optional[Union[Session, Connection]] = None) -> None:
        """Fill the column if it is empty; a value set by the caller is kept"""
        if _is_blank(getattr(record, self.attribute)):
            setattr(record, self.attribute, self.generate(bind))

    def regenerate(self, record, db: Optional[Session] = None) -> bool:
        """
        Replace the token of record and commit it right away

        Args:
            record: Instance of the declaring model
            db: Session to use (default: the session the record belongs to)

        Returns:
            True once the new value is committed

        Raises:
            DetachedRecordError: If no session is available
            PendingChangesError: If other objects in the session have
                unsaved changes; the commit would persist them too
            SQLAlchemyError: If the commit fails. The session is rolled back
                first, so the record must be reloaded before it is used again.
        """
        session = db if db is not None else object_session(record)
        if session is None:
            raise DetachedRecordError(
                f"Cannot regenerate '{self.attribute}': "
                f"{type(record).__name__} is not attached to a session"
            )

        # The commit below must only write this record
        others = [obj for obj in (*session.new, *session.dirty, *session.deleted) if obj is not record]
        if others:
            raise PendingChangesError(self.attribute, others)

        if record not in session:
            session.add(record)

        setattr(record, self.attribute, self.generate(session))
        try:
            session.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to regenerate {type(record).__name__}.{self.attribute}: {e}")
            session.rollback()
            raise

        logger.info(f"Regenerated {type(record).__name__}.{self.attribute}")
        return True

    def _before_insert(self, mapper, connection, target):
        self.before_first_persist(target, connection)


# ============= DECLARATION =============

def has_secure_token(
    model: type,
    attribute: Optional[str] = None,
    *,
    token_size: Optional[int] = None,
    uniq: bool = False,
    max_attempts: Optional[int] = None,
) -> SecureTokenField:
    """
    Declare a secure token column on a mapped class

    Args:
        model: SQLAlchemy mapped class owning the column
        attribute: Column attribute name (default settings.DEFAULT_ATTRIBUTE)
        token_size: Token length in characters (default settings.DEFAULT_TOKEN_SIZE)
        uniq: Check existing rows so the value is not already stored
        max_attempts: Bound for the uniqueness loop (default settings.MAX_UNIQUE_ATTEMPTS)

    Returns:
        SecureTokenField: Handle for generating and regenerating the column

    Raises:
        ValueError: If an option is invalid, the attribute is not a mapped
            column or it is already declared on the model
    """
    if attribute is None:
        attribute = settings.DEFAULT_ATTRIBUTE
    if token_size is None:
        token_size = settings.DEFAULT_TOKEN_SIZE
    if max_attempts is None:
        max_attempts = settings.MAX_UNIQUE_ATTEMPTS

    if isinstance(token_size, bool) or not isinstance(token_size, int) or token_size < 1:
        raise ValueError(f"token_size must be a positive integer, got {token_size!r}")
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
        raise ValueError(f"max_attempts must be a positive integer, got {max_attempts!r}")

    mapper = inspect(model, raiseerr=False)
    if mapper is None:
        raise ValueError(f"{model!r} is not a mapped class")
    if attribute not in mapper.column_attrs:
        raise ValueError(f"{model.__name__} has no mapped column '{attribute}'")

    inherited = _find_field(model, attribute)
    if inherited is not None:
        raise ValueError(
            f"{model.__name__}.{attribute} already has a secure token "
            f"(declared on {inherited.model.__name__})"
        )

    column = mapper.column_attrs[attribute].columns[0]
    length = getattr(column.type, "length", None)
    if length is not None and length < token_size:
        logger.warning(
            f"{model.__name__}.{attribute} holds {length} characters "
            f"but tokens are {token_size} long"
        )

    token_field = SecureTokenField(model, attribute, token_size, bool(uniq), max_attempts, column)
    _registry(model)[attribute] = token_field
    event.listen(model, "before_insert", token_field._before_insert, propagate=True)

    logger.info(f"Declared secure token {model.__name__}.{attribute} (size={token_size}, uniq={bool(uniq)})")
    return token_field


def secure_token(attribute: Optional[str] = None, **options):
    """
    Class decorator form of has_secure_token

    Example:
        @secure_token("api_key", token_size=32, uniq=True)
        class ApiClient(Base):
            ...
    """
    def decorator(model):
        has_secure_token(model, attribute, **options)
        return model
    return decorator


def _registry(model: type) -> Dict[str, SecureTokenField]:
    # Only the fields declared on model itself; inherited ones are found through the MRO
    registry = model.__dict__.get(REGISTRY_ATTRIBUTE)
    if registry is None:
        registry = {}
        setattr(model, REGISTRY_ATTRIBUTE, registry)
    return registry


def _find_field(model: type, attribute: str) -> Optional[SecureTokenField]:
    for klass in model.__mro__:
        field = klass.__dict__.get(REGISTRY_ATTRIBUTE, {}).get(attribute)
        if field is not None:
            return field
    return None


def declared_secure_tokens(model: type) -> Dict[str, SecureTokenField]:
    """All secure token fields of model, inherited ones included"""
    fields = {}
    for klass in reversed(model.__mro__):
        fields.update(klass.__dict__.get(REGISTRY_ATTRIBUTE, {}))
    return fields


def get_secure_token_field(model: type, attribute: Optional[str] = None) -> SecureTokenField:
    """Return the declared field for attribute, raising TokenNotDeclaredError otherwise"""
    if attribute is None:
        attribute = settings.DEFAULT_ATTRIBUTE
    field = _find_field(model, attribute)
    if field is None:
        raise TokenNotDeclaredError(model, attribute)
    return field


# ============= REGENERATION =============

def regenerate_token(record, attribute: Optional[str] = None, db: Optional[Session] = None) -> bool:
    """
    Regenerate a declared token column of record and commit it

    Example:
        >>> regenerate_token(user, "auth_token")
        True
    """
    return get_secure_token_field(type(record), attribute).regenerate(record, db)


class SecureTokenMixin:
    """Adds regenerate_secure_token() to a declarative model"""

    def regenerate_secure_token(self, attribute: Optional[str] = None, db: Optional[Session] = None) -> bool:
        return regenerate_token(self, attribute, db)
