"""
Durable per-session cart storage

Carts are kept as one JSON document per session, the server-side
counterpart of the browser's localStorage entry.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List

from pydantic import ValidationError

from app.core.exceptions import StorageError
from app.schemas.cart import CartLineItem

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_-]")


class JsonFileCartStorage:
    """Reads and writes cart item lists under a directory"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, session_key: str) -> Path:
        safe = _SAFE_KEY.sub("_", session_key)
        if not safe:
            raise StorageError("Empty session key")
        return self.directory / f"{safe}.json"

    def load(self, session_key: str) -> List[CartLineItem]:
        """
        Read a stored cart

        A missing file is an empty cart. Anything unreadable raises
        StorageError.
        """
        path = self.path_for(session_key)
        if not path.exists():
            return []

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Unreadable cart data in {path.name}: {e}") from e

        if not isinstance(raw, list):
            raise StorageError(f"Cart data in {path.name} is not a list")

        try:
            return [CartLineItem.model_validate(entry) for entry in raw]
        except ValidationError as e:
            raise StorageError(f"Invalid cart item in {path.name}: {e}") from e

    def save(self, session_key: str, items: List[CartLineItem]) -> None:
        """Replace the stored cart atomically"""
        path = self.path_for(session_key)
        payload = json.dumps([item.model_dump(mode="json") for item in items])

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error(f"Failed to save cart {path.name}: {str(e)}")
            raise StorageError(f"Could not save cart: {e}") from e

