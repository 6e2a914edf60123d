"""Abstract interface for one-way credential hashing."""

from abc import ABC, abstractmethod


class PasswordHasher(ABC):

    @abstractmethod
    def hash(self, plain_password: str) -> str:
        """Return a salted, adaptive hash of ``plain_password``."""
        ...

    @abstractmethod
    def verify(self, plain_password: str, password_hash: str) -> bool:
        """Check ``plain_password`` against ``password_hash`` in constant time."""
        ...
