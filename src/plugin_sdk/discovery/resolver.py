"""Turn resource-root URLs into filesystem paths that can be scanned."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, unquote_plus, urlsplit

ARCHIVE_SUFFIXES = (".zip", ".whl", ".egg", ".jar", ".pyz")

# Container-specific schemes whose paths are handed over verbatim.
_NEVER_DECODE = frozenset({"vfs", "vfszip", "bundleresource"})


def extract_path(url: str) -> str:
    """Return the filesystem-style path a resource URL points at.

    ``jar:file:/a/b.jar!/x/Y.class`` yields ``/a/b.jar``; for web URLs only the
    path component survives. Percent-escapes and ``+`` are decoded unless the
    undecoded path already names an existing file, since ``+`` is a legal
    filename character.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    path = parts.path
    if scheme == "jar":
        path = urlsplit(path).path if "://" in path else path
        if path.startswith("jar:"):
            path = path[4:]
    if path.startswith("file:"):
        path = path[5:]
    bang = path.find("!")
    if bang > 0:
        path = path[:bang]

    if scheme in _NEVER_DECODE:
        return path
    clean = unquote(path)
    if os.path.exists(clean):
        return clean
    return unquote_plus(path)


@dataclass(frozen=True, slots=True)
class ResourceLocation:
    url: str
    path: Path
    is_archive: bool

    @property
    def exists(self) -> bool:
        return self.path.exists()


def locate(url: str) -> ResourceLocation:
    path = Path(extract_path(url))
    is_archive = path.suffix.lower() in ARCHIVE_SUFFIXES or (
        path.is_file() and not path.suffix == ".py"
    )
    return ResourceLocation(url=url, path=path, is_archive=is_archive)


def path_to_url(path: str | os.PathLike[str]) -> str:
    """``file:`` URL for a local root, as a class loader would hand it out."""
    return Path(path).resolve().as_uri()
