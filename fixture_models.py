"""
Record types used by the tests
"""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from secure_token import SecureTokenMixin, has_secure_token


FixtureBase = declarative_base()


class User(SecureTokenMixin, FixtureBase):
    """
    Model User - users table

    Token columns:
    - token: 24 characters, filled on first save
    - auth_token: 24 characters, checked against existing rows (uniq)
    - auth_secret: 80 characters
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    token = Column(String(24), nullable=True)
    auth_token = Column(String(24), unique=True, nullable=True)
    auth_secret = Column(String(80), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class ApiKey(FixtureBase):
    """Single uniq token column"""

    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True)
    key = Column(String(16), unique=True)


class Invite(FixtureBase):
    """Unique column without the uniqueness check, for constraint errors"""

    __tablename__ = "invites"

    id = Column(Integer, primary_key=True)
    code = Column(String(8), unique=True)


has_secure_token(User)
has_secure_token(User, "auth_token", uniq=True)
has_secure_token(User, "auth_secret", token_size=80)
has_secure_token(ApiKey, "key", token_size=16, uniq=True)
has_secure_token(Invite, "code", token_size=8)
