"""Manifest collection from files and directory trees.

This module provides the ManifestSet class holding the raw text of every
manifest discovered under a path, and collect_manifests() which builds it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple, Union

from kanvas_snapshot.core.errors import ManifestReadError
from kanvas_snapshot.k8s.constants import DOCUMENT_SEPARATOR, MANIFEST_EXTENSIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestSet:
    """Ordered raw manifest contents.

    Attributes:
        contents: Raw text of each discovered file, in traversal order
        paths: Source path of each entry in ``contents``

    Example:
        >>> manifests = ManifestSet(contents=("kind: Service", "kind: Deployment"))
        >>> manifests.combined()
        'kind: Service\\n---\\nkind: Deployment'
    """
    contents: Tuple[str, ...]
    paths: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.contents)

    def combined(self) -> str:
        """Join all manifests into one multi-document string."""
        return DOCUMENT_SEPARATOR.join(self.contents)


def design_name_from_path(path: Union[str, Path]) -> str:
    """Derive a design name from a manifest path.

    Returns the file name without extension, or the directory name.

    Example:
        >>> design_name_from_path("./manifests/deployment.yaml")
        'deployment'
    """
    return Path(path).stem


def _is_manifest_file(path: Path) -> bool:
    return path.suffix.lower() in MANIFEST_EXTENSIONS


def _walk(directory: Path, recursive: bool) -> Iterator[Path]:
    """Yield manifest files under ``directory`` in lexical order.

    Nested directories are descended only when ``recursive`` is set;
    symlinked directories are never descended.
    """
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if recursive and not entry.is_symlink():
                yield from _walk(entry, recursive)
            continue
        if _is_manifest_file(entry):
            yield entry


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(str(e), path=str(path)) from e


def collect_manifests(path: Union[str, Path], recursive: bool = False) -> ManifestSet:
    """Collect raw manifest contents from a file or directory.

    A file is returned as-is regardless of its extension. For a directory,
    only ``.yaml``/``.yml`` files (case-insensitive) are included.

    Args:
        path: Manifest file or directory
        recursive: Also collect manifests from nested directories

    Returns:
        ManifestSet with one entry per file

    Raises:
        ManifestReadError: If the path does not exist or cannot be read, or
            if a directory contains no manifest files
    """
    root = Path(path)

    if not root.exists():
        raise ManifestReadError(f"no such file or directory: {root}", path=str(root))

    if not root.is_dir():
        content = _read(root)
        logger.info(f"Added manifest file: {root}")
        return ManifestSet(contents=(content,), paths=(str(root),))

    try:
        files = list(_walk(root, recursive))
    except OSError as e:
        raise ManifestReadError(str(e), path=str(root)) from e

    if not files:
        raise ManifestReadError("no YAML files found in the specified directory", path=str(root))

    contents = []
    for file_path in files:
        contents.append(_read(file_path))
        logger.info(f"Added manifest file: {file_path}")

    return ManifestSet(contents=tuple(contents), paths=tuple(str(p) for p in files))
