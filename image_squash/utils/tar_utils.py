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

"""Helpers for reading tar archives as streams."""

import tarfile
from typing import IO

_HEADER_ERRORS = (
    tarfile.InvalidHeaderError,
    tarfile.TruncatedHeaderError,
    tarfile.EmptyHeaderError,
)


class StrictTarInfo(tarfile.TarInfo):
    """Archive member header that reports damaged headers past the first member.

    In stream mode, ``TarFile.next()`` ends the archive quietly when a header
    after the first one is invalid, truncated or missing. Only an all-zero
    block marks the end of an archive, so any other header error found past
    offset zero is raised as :class:`tarfile.ReadError`.
    """

    @classmethod
    def fromtarfile(cls, archive: tarfile.TarFile) -> "StrictTarInfo":
        """Read the next member header from ``archive``."""
        try:
            return super().fromtarfile(archive)
        except _HEADER_ERRORS as err:
            # Errors on the first header are already fatal.
            if archive.offset == 0:
                raise
            raise tarfile.ReadError(
                f"bad header at offset {archive.offset}: {err}"
            ) from err


def open_stream(fileobj: IO[bytes]) -> tarfile.TarFile:
    """Open a possibly compressed archive for sequential reading.

    :param fileobj: The file object to read from.

    :raises tarfile.TarError: If the archive cannot be opened.

    :return: The opened archive, reporting damaged member headers.
    """
    return tarfile.open(fileobj=fileobj, mode="r|*", tarinfo=StrictTarInfo)
