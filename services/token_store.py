# services/token_store.py
import logging
from pathlib import Path
from typing import Optional

from configurations.config import AUTH_TOKEN_FILE

logger = logging.getLogger(__name__)


class TokenStore:
    """
    Keeps the login token between runs in a small text file.
    Read once at start-up, written on login, removed on logout.
    """

    def __init__(self, path: str = AUTH_TOKEN_FILE):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        return token or None

    def save(self, token: str) -> None:
        self.path.write_text(token, encoding="utf-8")
        logger.info(f"Auth token stored at {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Auth token cleared")
