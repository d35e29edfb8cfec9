"""Map a local build directory onto the set of objects uploaded to the bucket."""

from __future__ import annotations

import errno
import hashlib
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .access import BUCKET_NODE
from .config import FingerprintMode
from .content_types import content_type_for

logger = logging.getLogger(__name__)


def _raise(err: OSError) -> None:
    raise err


class SourceTree:
    """A directory whose regular files are published."""

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)

    def check(self) -> None:
        """Fail with an OSError unless the root is a readable directory."""
        if not os.path.exists(self.root):
            raise FileNotFoundError(errno.ENOENT, "source directory does not exist", self.root)
        if not os.path.isdir(self.root):
            raise NotADirectoryError(errno.ENOTDIR, "source path is not a directory", self.root)
        if not os.access(self.root, os.R_OK | os.X_OK):
            raise PermissionError(errno.EACCES, "source directory is not readable", self.root)

    def walk(self) -> Iterator[str]:
        """Yield the absolute path of every regular file below the root.

        Symlinks are skipped, whether they point at files or directories.
        Each call starts a new walk.
        """
        for dirpath, _, filenames in os.walk(self.root, onerror=_raise):
            for fname in filenames:
                full_path = os.path.join(dirpath, fname)
                if os.path.islink(full_path) or not os.path.isfile(full_path):
                    continue
                yield full_path

    __iter__ = walk

    def key_for(self, full_path: str) -> str:
        rel_path = os.path.relpath(full_path, self.root)
        if os.altsep:
            rel_path = rel_path.replace(os.altsep, "/")
        return rel_path.replace(os.sep, "/")


@dataclass(frozen=True)
class PublishUnit:
    """One object to upload: where it lives locally and where it goes."""

    key: str
    local_path: str
    content_type: Optional[str]
    fingerprint: str
    depends_on: tuple[str, ...] = (BUCKET_NODE,)


def file_md5(path: str, chunk_size: int = 1 << 20) -> str:
    digest = hashlib.md5(usedforsecurity=False)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


class Publisher:
    """Turns a source tree into publish units.

    Args:
        fingerprint_mode: ``TIMESTAMP`` stamps every unit with the time of the
            run so everything is re-uploaded; ``CONTENT`` uses the MD5 of the
            file, which matches the ETag S3 reports for a plain upload.
        bucket_node: Name of the bucket resource every unit depends on
        clock: Source of wall-clock seconds, injectable for tests
    """

    def __init__(
        self,
        fingerprint_mode: FingerprintMode = FingerprintMode.TIMESTAMP,
        bucket_node: str = BUCKET_NODE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.fingerprint_mode = FingerprintMode(fingerprint_mode)
        self.bucket_node = bucket_node
        self.clock = clock

    def enumerate(self, source_root: str) -> list[PublishUnit]:
        """Return one PublishUnit per regular file under ``source_root``, sorted by key."""
        tree = SourceTree(source_root)
        tree.check()

        stamp = str(int(self.clock() * 1000))
        units = []
        for full_path in tree.walk():
            if self.fingerprint_mode is FingerprintMode.CONTENT:
                fingerprint = file_md5(full_path)
            else:
                fingerprint = stamp
            unit = PublishUnit(
                key=tree.key_for(full_path),
                local_path=full_path,
                content_type=content_type_for(full_path),
                fingerprint=fingerprint,
                depends_on=(self.bucket_node,),
            )
            if unit.content_type is None:
                logger.debug("no content type for %s, storage default applies", unit.key)
            units.append(unit)

        units.sort(key=lambda u: u.key)
        logger.info(
            "found %d file(s) under %s (fingerprint: %s)",
            len(units),
            tree.root,
            self.fingerprint_mode.value,
        )
        return units
