"""
Library configuration settings
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Secure token settings loaded from environment variables"""

    # Token defaults
    DEFAULT_ATTRIBUTE: str = "token"
    DEFAULT_TOKEN_SIZE: int = 24

    # Upper bound for the uniqueness loop
    MAX_UNIQUE_ATTEMPTS: int = 1000

    class Config:
        env_prefix = "SECURE_TOKEN_"
        env_file = ".env"
        case_sensitive = True


settings = Settings()
