"""Audio blob storage used by answer ingestion."""
from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Protocol

from providers.base import audio_extension


class AudioStore(Protocol):
    def save(self, key: str, data: bytes, mime_type: str) -> str: ...


def audio_key(org_id: str, session_id: str, question_index: int, mime_type: str) -> str:
    """Storage key for one recording; the millisecond suffix keeps re-submissions apart."""

    stamp = int(time.time() * 1000)
    return f"audio/{org_id}/{session_id}/{question_index}_{stamp}.{audio_extension(mime_type)}"


class LocalAudioStore:
    """Write recordings under a root directory, keyed by storage key."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def save(self, key: str, data: bytes, mime_type: str) -> str:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"audio key escapes storage root: {key}")
        os.makedirs(path.parent, exist_ok=True)
        path.write_bytes(data)
        return key
