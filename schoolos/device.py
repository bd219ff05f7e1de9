"""
School OS — Audit Device Identifier
======================================
A stable per-install identifier stamped on audit events.

Generated once, persisted locally, reused across sessions on the
same install. Callers read it here and pass it in ExecutionContext;
the Command Bus never reaches for it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger("schoolos.device")


class DeviceIdProvider(Protocol):
    def get_device_id(self) -> str:
        ...


class StaticDeviceIdProvider:
    def __init__(self, device_id: str):
        if not device_id or not isinstance(device_id, str):
            raise ValueError("device_id must be a non-empty string.")
        self._device_id = device_id

    def get_device_id(self) -> str:
        return self._device_id


class FileDeviceIdProvider:
    """
    Reads the device id from a file, creating it on first use.

    The value is cached after the first read; the lock only guards
    first initialization.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._device_id: Optional[str] = None

    @property
    def path(self) -> Path:
        return self._path

    def get_device_id(self) -> str:
        if self._device_id is not None:
            return self._device_id

        with self._lock:
            if self._device_id is None:
                self._device_id = self._load_or_create()
        return self._device_id

    def _load_or_create(self) -> str:
        if self._path.exists():
            stored = self._path.read_text(encoding="utf-8").strip()
            if stored:
                return stored
            logger.warning(f"Device id file {self._path} is empty; regenerating")

        device_id = str(uuid.uuid4())
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(device_id + "\n", encoding="utf-8")
        logger.info(f"Generated device id {device_id} at {self._path}")
        return device_id


def default_device_id_provider() -> FileDeviceIdProvider:
    from schoolos.conf import get_device_id_path

    return FileDeviceIdProvider(get_device_id_path())
