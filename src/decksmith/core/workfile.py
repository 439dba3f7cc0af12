"""Scoped work files: filesystem artifacts paired with a release action.

A :class:`ScopedWorkFile` is released exactly once. Composite work files own
their children, and releasing the parent fans out to every child even when an
earlier release failed; the collected failures are raised together afterwards.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from .exceptions import ReleaseError


ReleaseAction = Callable[[], None]


def _noop() -> None:
    return


def _unlink_action(path: Path) -> ReleaseAction:
    def _unlink() -> None:
        path.unlink(missing_ok=True)

    return _unlink


@dataclass(eq=False)
class ScopedWorkFile:
    """A materialized path whose owner must call :meth:`release` once."""

    path: Path
    action: ReleaseAction = field(default=_noop, repr=False)
    children: list[ScopedWorkFile] = field(default_factory=list)
    _released: bool = field(default=False, init=False, repr=False)

    @classmethod
    def borrowed(cls, path: Path | str) -> ScopedWorkFile:
        """Wrap a file owned by someone else; releasing leaves it untouched."""
        return cls(Path(path))

    @classmethod
    def owned(
        cls, path: Path | str, children: Iterable[ScopedWorkFile] = ()
    ) -> ScopedWorkFile:
        """Wrap a file created by the caller; releasing deletes it."""
        target = Path(path)
        return cls(target, _unlink_action(target), list(children))

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Run the release action, then release every child exhaustively."""
        if self._released:
            return
        self._released = True
        errors: list[BaseException] = []
        try:
            self.action()
        except Exception as exc:
            errors.append(exc)
        for child in self.children:
            try:
                child.release()
            except ReleaseError as exc:
                errors.extend(exc.errors)
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise ReleaseError(errors)

    def __enter__(self) -> ScopedWorkFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def write_new_file(path: Path, data: bytes) -> None:
    """Create ``path`` exclusively and write ``data``; a partial file is removed."""
    handle = path.open("xb")
    try:
        with handle:
            handle.write(data)
    except BaseException:
        path.unlink(missing_ok=True)
        raise


def release_all(work_files: Sequence[ScopedWorkFile]) -> None:
    """Release every work file, aggregating failures into one ``ReleaseError``."""
    errors: list[BaseException] = []
    for work_file in work_files:
        try:
            work_file.release()
        except ReleaseError as exc:
            errors.extend(exc.errors)
    if errors:
        raise ReleaseError(errors)


__all__ = ["ReleaseAction", "ScopedWorkFile", "release_all", "write_new_file"]
