"""bcrypt-backed password hashing."""

import bcrypt

from course_api.application.interfaces import PasswordHasher


class BcryptPasswordHasher(PasswordHasher):
    """Salted adaptive hashing; the work factor is configurable per deployment."""

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    def hash(self, plain_password: str) -> str:
        password = (plain_password or "").encode("utf-8")
        if not password:
            raise ValueError("Password is empty")
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plain_password: str, password_hash: str) -> bool:
        password = (plain_password or "").encode("utf-8")
        hashed = (password_hash or "").encode("utf-8")
        if not password or not hashed:
            return False
        try:
            return bcrypt.checkpw(password, hashed)
        except ValueError:
            return False
