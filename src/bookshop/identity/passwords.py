"""Password hashing and generation."""

import secrets

import bcrypt

from bookshop import settings

RESET_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!@#$%^&*()"


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def generate_password(length: int | None = None) -> str:
    """Draw a password uniformly from RESET_ALPHABET using the OS CSPRNG."""
    length = length or settings.RESET_PASSWORD_LENGTH
    return "".join(secrets.choice(RESET_ALPHABET) for _ in range(length))
