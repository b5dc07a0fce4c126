"""Run-scoped scratch directory with registered temporary artifacts."""

from __future__ import annotations

import shutil
import tempfile
import uuid
from pathlib import Path
from types import TracebackType
from typing import List, Optional, Type

from shared.config import settings
from shared.logging import log_debug, log_error


class RunWorkspace:
    """Own the scratch directory and temp files of a single pipeline run.

    Every artifact is registered as soon as its path is chosen. ``cleanup``
    removes them in reverse registration order, then the scratch directory,
    and is a no-op on subsequent calls. Removal errors are logged only.
    """

    def __init__(self, root: Path | None = None, run_id: str | None = None) -> None:
        self.run_id = run_id or uuid.uuid4().hex
        self._root = Path(root) if root is not None else Path(settings.TMP_DIR)
        self.directory: Optional[Path] = None
        self._paths: List[Path] = []
        self._closed = False

    def create(self) -> Path:
        if self.directory is None:
            self._root.mkdir(parents=True, exist_ok=True)
            self.directory = Path(tempfile.mkdtemp(prefix="run-", dir=self._root))
            log_debug("workspace_created", run_id=self.run_id, path=str(self.directory))
        return self.directory

    def path(self, name: str) -> Path:
        """Return ``name`` inside the scratch directory, already registered."""
        return self.register(self.create() / name)

    def register(self, path: Path) -> Path:
        if self._closed:
            raise RuntimeError("workspace already cleaned up")
        path = Path(path)
        if path not in self._paths:
            self._paths.append(path)
        return path

    @property
    def registered(self) -> List[Path]:
        return list(self._paths)

    def cleanup(self) -> None:
        if self._closed:
            return
        self._closed = True
        for path in reversed(self._paths):
            try:
                if path.is_dir():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            except OSError as exc:
                log_error("cleanup_failed", run_id=self.run_id, path=str(path), error=str(exc))
        self._paths.clear()
        if self.directory is not None:
            try:
                shutil.rmtree(self.directory)
            except FileNotFoundError:
                pass
            except OSError as exc:
                log_error(
                    "cleanup_failed",
                    run_id=self.run_id,
                    path=str(self.directory),
                    error=str(exc),
                )
        log_debug("workspace_cleaned", run_id=self.run_id)

    def __enter__(self) -> "RunWorkspace":
        self.create()
        return self

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()


__all__ = ["RunWorkspace"]
