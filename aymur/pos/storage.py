"""
Cart storage backends for CartStore.

A backend only has to load the last saved payload and save a new one.
Payloads are the JSON form of CartState, held orders included.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class CartStorage(ABC):
    @abstractmethod
    def load(self) -> Optional[dict]:
        """Return the last saved payload, or None if nothing was saved."""

    @abstractmethod
    def save(self, payload: dict) -> None:
        """Replace the saved payload."""


class MemoryCartStorage(CartStorage):
    def __init__(self, payload: Optional[dict] = None):
        self.payload = payload
        self.saves = 0

    def load(self) -> Optional[dict]:
        return self.payload

    def save(self, payload: dict) -> None:
        self.payload = payload
        self.saves += 1


class JsonFileCartStorage(CartStorage):
    """One JSON file per cart session; writes go through a temp file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def save(self, payload: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
