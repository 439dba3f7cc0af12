from __future__ import annotations

from collections.abc import Callable
import errno
from pathlib import Path

import pytest


class _FullDisk:
    """File handle whose writes fail after the file was created."""

    def __init__(self, handle) -> None:
        self._handle = handle

    def write(self, data: bytes) -> int:
        raise OSError(errno.ENOSPC, "No space left on device")

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> _FullDisk:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@pytest.fixture
def fill_disk(monkeypatch: pytest.MonkeyPatch) -> Callable[[Path], None]:
    """Make exclusive-create writes in a directory fail once the file exists."""
    real_open = Path.open

    def apply(directory: Path) -> None:
        full = directory.resolve()

        def fake_open(self: Path, mode: str = "r", *args, **kwargs):
            handle = real_open(self, mode, *args, **kwargs)
            if "x" in mode and self.parent.resolve() == full:
                return _FullDisk(handle)
            return handle

        monkeypatch.setattr(Path, "open", fake_open)

    return apply
