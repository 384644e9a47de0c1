# models/session.py
from pydantic import BaseModel
from typing import Optional


GUEST_TOKEN = "guest_mode"


class Session(BaseModel):
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_guest(self) -> bool:
        return self.token == GUEST_TOKEN
