from __future__ import annotations

from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str:
        raise NotImplementedError

    def verify(self, plaintext: str, password_hash: str) -> bool:
        raise NotImplementedError


class WerkzeugPasswordHasher:
    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        try:
            return check_password_hash(password_hash, plaintext)
        except (TypeError, ValueError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False
