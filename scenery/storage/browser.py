# scenery/storage/browser.py
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import FrozenSet, Iterable, List, Optional

from PIL import Image

logger = logging.getLogger(__name__)

SOURCES = ("data",)


def image_extensions() -> FrozenSet[str]:
    """Extensions (lower case, with dot) of every format Pillow can open."""
    return frozenset(
        ext.lower()
        for ext, fmt in Image.registered_extensions().items()
        if fmt in Image.OPEN
    )


class LocalFileBrowser:
    """
    Lists files of a local data root. Paths in and out are relative to the
    root and use "/" separators, the form in which scene images are stored.
    """

    def __init__(self, root: Path, extensions: Optional[Iterable[str]] = None):
        self.root = Path(root)
        self.extensions = (
            frozenset(e.lower() for e in extensions) if extensions is not None else None
        )

    @classmethod
    def for_images(cls, root: Path) -> "LocalFileBrowser":
        return cls(root, extensions=image_extensions())

    def absolute(self, path: str) -> Path:
        p = Path(path)
        if p.is_absolute():
            return p
        return self.root / PurePosixPath(path.replace("\\", "/"))

    def relative(self, path: str) -> str:
        """`path` in the form `browse` returns it."""
        p = Path(path)
        if p.is_absolute():
            try:
                return p.resolve().relative_to(self.root.resolve()).as_posix()
            except ValueError:
                return p.as_posix()
        return PurePosixPath(path.replace("\\", "/")).as_posix()

    def _directory_of(self, target: str) -> Path:
        p = self.absolute(target) if target else self.root
        if not p.is_dir():
            p = p.parent
        root = self.root.resolve()
        resolved = p.resolve()
        if resolved != root and root not in resolved.parents:
            raise PermissionError(f"{target} is outside {self.root}")
        return resolved

    def browse(self, source: str, target: str) -> List[str]:
        """
        Files in the directory `target` points to (its parent when `target`
        is a file), sorted by name. Raises FileNotFoundError when the
        directory does not exist.
        """
        if source not in SOURCES:
            raise ValueError(f"unsupported source {source!r}")
        directory = self._directory_of(target)
        if not directory.is_dir():
            raise FileNotFoundError(f"{directory} not found")
        root = self.root.resolve()
        files = []
        for p in sorted(directory.iterdir()):
            if not p.is_file():
                continue
            if self.extensions is not None and p.suffix.lower() not in self.extensions:
                continue
            files.append(p.relative_to(root).as_posix())
        logger.debug("browse %s: %d files in %s", target, len(files), directory)
        return files
