"""
Password hashing via argon2-cffi.
"""
from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class HashingService:
    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_config(cls, config) -> "HashingService":
        return cls(
            time_cost=config.get("ARGON2_TIME_COST", 3),
            memory_cost=config.get("ARGON2_MEMORY_COST", 65536),
            parallelism=config.get("ARGON2_PARALLELISM", 4),
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password using Argon2 (random salt per call)."""
        return self._ph.hash(password)

    def compare(self, password: str, password_hash: str) -> bool:
        """Verify a plaintext password against a stored hash.
        A mismatch or a malformed hash both yield False.
        """
        try:
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
