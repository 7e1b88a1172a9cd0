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

"""Whiteout handling helpers for layer archive members.

Layer archives mark deleted files with OCI whiteout entries. Relevant
OCI documentation available at:
https://github.com/opencontainers/image-spec/blob/main/layer.md
"""

import posixpath

WHITEOUT_PREFIX = ".wh."
OPAQUE_MARKER = ".wh..wh..opq"


def normalize_path(name: str) -> str:
    """Convert an archive member name to a comparable path.

    Leading ``/`` and ``./`` components and trailing slashes are removed, so
    that ``./etc/``, ``/etc`` and ``etc`` all refer to the same path.

    :param name: The archive member name.

    :returns: The normalized path, or ``.`` for the archive root.
    """
    path = posixpath.normpath(name.lstrip("/"))
    # normpath keeps a leading "//" and never strips ".." at the root
    return path.lstrip("/") or "."


def is_whiteout(name: str) -> bool:
    """Verify if the given member name is a whiteout marker.

    Opaque directory markers also carry the whiteout prefix and are
    reported as whiteouts as well.

    :param name: The archive member name.

    :returns: Whether the member base name starts with the whiteout prefix.
    """
    return posixpath.basename(name.rstrip("/")).startswith(WHITEOUT_PREFIX)


def is_opaque_marker(name: str) -> bool:
    """Verify if the given member name is an opaque directory marker.

    :param name: The archive member name.

    :returns: Whether the member is an overlay opaque directory marker.
    """
    return posixpath.basename(name.rstrip("/")) == OPAQUE_MARKER


def whited_out_path(name: str) -> str:
    """Find the path hidden by a whiteout marker.

    The hidden path is the marker's parent directory joined with the
    marker's base name without the whiteout prefix. An opaque marker is
    not special-cased: ``dir/.wh..wh..opq`` maps to ``dir/.wh..opq``.

    :param name: The whiteout marker member name.

    :returns: The normalized path that was whited out.
    """
    path = normalize_path(name)
    base = posixpath.basename(path)
    if not base.startswith(WHITEOUT_PREFIX):
        raise ValueError("argument is not a whiteout marker")

    return normalize_path(
        posixpath.join(posixpath.dirname(path), base[len(WHITEOUT_PREFIX) :])
    )


def opaque_directory(name: str) -> str:
    """Find the directory made opaque by an opaque directory marker.

    :param name: The opaque marker member name.

    :returns: The normalized path of the opaque directory.
    """
    if not is_opaque_marker(name):
        raise ValueError("argument is not an opaque directory marker")

    return normalize_path(posixpath.dirname(normalize_path(name)))


def whiteout(path: str) -> str:
    """Convert the given path to a whiteout marker name.

    :param path: The path to white out.

    :returns: The corresponding whiteout marker name.
    """
    parent, base = posixpath.split(normalize_path(path))
    return posixpath.join(parent, WHITEOUT_PREFIX + base)


def opaque_marker(path: str) -> str:
    """Return the opaque directory marker name for a directory.

    :param path: The directory to mark as opaque.

    :returns: The corresponding opaque directory marker name.
    """
    return posixpath.join(normalize_path(path), OPAQUE_MARKER)
