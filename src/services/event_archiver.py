"""Append-only JSONL archive of Slack events."""

import json
import threading
from pathlib import Path
from typing import Any, Union

from src.utils.errors import ArchiveError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

LOCK_STRIPES = 64


def serialize_event(event: Any) -> str:
    """
    Single-line compact JSON for one archive record.

    Non-ASCII is escaped so lone surrogates from the payload survive the
    UTF-8 file encoding.
    """
    return json.dumps(event, separators=(",", ":"))


class EventArchiver:
    """
    Write events under an archive root.

    Appends to the same file are serialized with a striped lock (one of
    a fixed set, chosen by path hash), so concurrent requests never
    interleave partial lines. Nothing is deduplicated: a redelivered
    event is appended again.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser().resolve()
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def resolve(self, relative_path: str) -> Path:
        """Absolute path under the root for a relative archive path."""
        target = (self.root / relative_path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ArchiveError(f"archive path escapes root: {relative_path}")
        return target

    def lock_for(self, path: Path) -> threading.Lock:
        return self._locks[hash(path) % len(self._locks)]

    def append(self, relative_path: str, event: Any) -> Path:
        """Append ``event`` as one JSON line to ``relative_path``."""
        target = self.resolve(relative_path)
        line = serialize_event(event) + "\n"

        with self.lock_for(target):
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "a", encoding="utf-8") as f:
                f.write(line)

        logger.debug("Event archived", archive_file=relative_path, line_bytes=len(line))
        return target

    def write_json(self, relative_path: str, document: Any) -> Path:
        """Write (or replace) a JSON document at ``relative_path``."""
        target = self.resolve(relative_path)
        with self.lock_for(target):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(serialize_event(document), encoding="utf-8")
        return target
