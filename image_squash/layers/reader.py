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

"""Sequential reader for layer archives."""

import dataclasses
import enum
import logging
import tarfile
from pathlib import Path
from typing import IO, Iterator, Optional

from image_squash.utils import tar_utils

from . import errors, whiteouts

logger = logging.getLogger(__name__)


class EntryKind(enum.Enum):
    """The kind of a layer archive member."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    OTHER = "other"
    WHITEOUT = "whiteout"
    OPAQUE = "opaque"


@dataclasses.dataclass(frozen=True)
class Layer:
    """A layer archive and its position in the image.

    :param index: The layer position, 0 being the oldest layer.
    :param path: The path to the layer archive.
    """

    index: int
    path: Path

    def __str__(self) -> str:
        return str(self.path)


def entry_kind(info: tarfile.TarInfo) -> EntryKind:
    """Classify an archive member.

    :param info: The archive member header.

    :returns: The member kind. Whiteout classification takes precedence
        over the member type.
    """
    if whiteouts.is_opaque_marker(info.name):
        return EntryKind.OPAQUE
    if whiteouts.is_whiteout(info.name):
        return EntryKind.WHITEOUT
    if info.isreg():
        return EntryKind.FILE
    if info.isdir():
        return EntryKind.DIRECTORY
    if info.issym():
        return EntryKind.SYMLINK
    if info.islnk():
        return EntryKind.HARDLINK
    return EntryKind.OTHER


class _EntryStream:
    """Read the contents of the current member, reporting short reads."""

    def __init__(self, layer: Layer, fileobj: IO[bytes], size: int) -> None:
        self._layer = layer
        self._fileobj = fileobj
        self._remaining = size

    def read(self, size: int = -1) -> bytes:
        wanted = self._remaining if size < 0 else min(size, self._remaining)
        try:
            data = self._fileobj.read(wanted)
        except (OSError, EOFError, tarfile.TarError) as err:
            raise errors.LayerReadError(str(self._layer), str(err)) from err

        if len(data) < wanted:
            raise errors.LayerReadError(str(self._layer), "unexpected end of data")

        self._remaining -= len(data)
        return data


@dataclasses.dataclass
class LayerEntry:
    """A member of a layer archive.

    The entry content is a stream over the layer archive and must be
    consumed before the next entry is read.

    :param path: The normalized member path.
    :param kind: The member kind.
    :param info: The raw member header.
    """

    path: str
    kind: EntryKind
    info: tarfile.TarInfo
    layer: Layer = dataclasses.field(repr=False)
    _archive: tarfile.TarFile = dataclasses.field(repr=False)
    _opened: bool = dataclasses.field(default=False, repr=False)

    @property
    def name(self) -> str:
        """The member name as stored in the archive."""
        return self.info.name

    def open(self) -> Optional[_EntryStream]:
        """Open the entry content for reading.

        :returns: A readable stream for regular files, None otherwise.

        :raise RuntimeError: If the content was already opened.
        """
        if self._opened:
            raise RuntimeError(f"content of {self.name!r} was already consumed")
        self._opened = True

        if not self.info.isreg():
            return None

        try:
            fileobj = self._archive.extractfile(self.info)
        except (OSError, tarfile.TarError) as err:
            raise errors.LayerReadError(str(self.layer), str(err)) from err

        if fileobj is None:
            return None

        return _EntryStream(self.layer, fileobj, self.info.size)


class LayerReader:
    """Read the entries of a layer archive in archive order.

    The archive is read as a stream, so entries can only be visited once.
    Compressed layers are decompressed transparently.

    :param layer: The layer to read.
    """

    def __init__(self, layer: Layer) -> None:
        self._layer = layer
        self._file: Optional[IO[bytes]] = None
        self._archive: Optional[tarfile.TarFile] = None

    def __enter__(self) -> "LayerReader":
        logger.debug("open layer %d: %s", self._layer.index, self._layer.path)
        try:
            self._file = open(self._layer.path, "rb")  # noqa: SIM115
            self._archive = tar_utils.open_stream(self._file)
        except (OSError, tarfile.TarError) as err:
            self.close()
            raise errors.LayerReadError(str(self._layer), str(err)) from err

        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[LayerEntry]:
        if self._archive is None:
            raise RuntimeError("layer reader is not open")

        while True:
            try:
                info = self._archive.next()
            except (OSError, EOFError, tarfile.TarError) as err:
                raise errors.LayerReadError(str(self._layer), str(err)) from err

            if info is None:
                return

            yield LayerEntry(
                path=whiteouts.normalize_path(info.name),
                kind=entry_kind(info),
                info=info,
                layer=self._layer,
                _archive=self._archive,
            )

    def close(self) -> None:
        """Release the layer archive."""
        if self._archive is not None:
            self._archive.close()
            self._archive = None
        if self._file is not None:
            self._file.close()
            self._file = None
