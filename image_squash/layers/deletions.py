# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2026 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Bookkeeping of deleted and already written paths during a squash."""

import bisect
import logging
from typing import Iterator, List, Set

logger = logging.getLogger(__name__)


def _ancestors(path: str) -> Iterator[str]:
    """Yield the proper directory ancestors of a path, outermost first."""
    index = path.find("/")
    while index != -1:
        yield path[:index]
        index = path.find("/", index + 1)


def _contains(paths: List[str], path: str) -> bool:
    index = bisect.bisect_left(paths, path)
    return index < len(paths) and paths[index] == path


class DeletionIndex:
    """A sorted collection of paths deleted by upper layers.

    A path recorded in the index masks itself and every path it is a
    directory ancestor of: ``usr/lib`` masks ``usr/lib`` and
    ``usr/lib/libc.so``, but not ``usr/library``. Paths recorded as opaque
    directories mask their descendants only.

    Paths are expected to be normalized (see
    :func:`image_squash.layers.whiteouts.normalize_path`).
    """

    def __init__(self) -> None:
        self._paths: List[str] = []
        self._opaque: List[str] = []

    def __len__(self) -> int:
        return len(self._paths) + len(self._opaque)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and _contains(self._paths, path)

    @property
    def opaque_dirs(self) -> List[str]:
        """The sorted list of directories recorded as opaque."""
        return list(self._opaque)

    def add(self, path: str) -> None:
        """Record a deleted path, keeping the index sorted.

        :param path: The path to mask, along with everything under it.
        """
        if _contains(self._paths, path):
            return

        logger.debug("mask path %s", path)
        bisect.insort(self._paths, path)

    def add_opaque(self, path: str) -> None:
        """Record an opaque directory, keeping the index sorted.

        :param path: The directory whose previous contents are masked.
        """
        if _contains(self._opaque, path):
            return

        logger.debug("mask contents of opaque dir %s", path)
        bisect.insort(self._opaque, path)

    def is_masked(self, path: str) -> bool:
        """Verify if a path was deleted by an upper layer.

        :param path: The path to verify.

        :returns: Whether the path or one of its parent directories is
            recorded in the index.
        """
        if _contains(self._paths, path):
            return True

        for ancestor in _ancestors(path):
            if _contains(self._paths, ancestor) or _contains(self._opaque, ancestor):
                return True

        # the root directory is an ancestor of every path
        return path != "." and _contains(self._opaque, ".")


class WrittenPaths:
    """The set of paths already committed to the output archive."""

    def __init__(self) -> None:
        self._paths: Set[str] = set()

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def add(self, path: str) -> bool:
        """Record a written path.

        :param path: The path written to the output.

        :returns: False if the path had already been written.
        """
        if path in self._paths:
            return False

        self._paths.add(path)
        return True
