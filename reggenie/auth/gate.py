"""Entry gate: admin access code or guest access, backed by the local store.

This is an access convenience, not authentication. The code is stored in
plain text next to the rest of the local cache.
"""

import hmac
import logging
from enum import Enum
from typing import Optional

from reggenie.database.local_store import LocalStorage, get_local_storage

logger = logging.getLogger(__name__)

ADMIN_CODE_KEY = "aide_admin_code"
FALLBACK_CODE = "admin"
MIN_CODE_LENGTH = 4


class AccessRole(str, Enum):
    ADMIN = "admin"
    GUEST = "guest"


class AuthError(ValueError):
    pass


class AccessGate:
    def __init__(self, storage: Optional[LocalStorage] = None):
        self.storage = storage or get_local_storage()

    def _stored_code(self) -> Optional[str]:
        return self.storage.get_item(ADMIN_CODE_KEY)

    def is_registered(self) -> bool:
        return bool(self._stored_code())

    def register(self, code: str, confirm: str) -> AccessRole:
        if self.is_registered():
            raise AuthError("An admin access code is already registered")
        if len((code or "").strip()) < MIN_CODE_LENGTH:
            raise AuthError(f"Code must be at least {MIN_CODE_LENGTH} characters")
        if code.strip() != (confirm or "").strip():
            raise AuthError("Codes do not match")

        self.storage.set_item(ADMIN_CODE_KEY, code.strip())
        logger.info("Admin access code registered")
        return AccessRole.ADMIN

    def login(self, code: str) -> AccessRole:
        attempt = (code or "").strip()
        stored = self._stored_code()

        if stored and hmac.compare_digest(attempt, stored):
            return AccessRole.ADMIN

        # Before any code is registered the literal fallback is accepted once and kept
        if not stored and attempt == FALLBACK_CODE:
            self.storage.set_item(ADMIN_CODE_KEY, FALLBACK_CODE)
            logger.warning("Admin access granted with fallback code; register a new code")
            return AccessRole.ADMIN

        raise AuthError("Invalid Access Code")

    def verify(self, code: Optional[str]) -> bool:
        stored = self._stored_code()
        if not stored or not code:
            return False
        return hmac.compare_digest(code.strip(), stored)

    def reset(self) -> None:
        self.storage.remove_item(ADMIN_CODE_KEY)
        logger.info("Admin access code reset")

    @staticmethod
    def guest() -> AccessRole:
        return AccessRole.GUEST


def get_access_gate() -> AccessGate:
    return AccessGate(get_local_storage())


def recover_access_code(storage: Optional[LocalStorage] = None) -> bool:
    """Clear a forgotten admin code from the host running the service.

    Returns whether a code was registered. The HTTP reset needs the current
    code, so this is the path when nobody remembers it.
    """
    gate = AccessGate(storage)
    registered = gate.is_registered()
    gate.reset()
    return registered


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if recover_access_code():
        logger.info("Admin access code cleared; register a new code on next login")
    else:
        logger.info("No admin access code was registered")
