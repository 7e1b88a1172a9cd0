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

"""Combine stacked layer archives into a single filesystem archive.

Layers are visited from the newest to the oldest. The first layer to
provide a path wins, and whiteout markers hide the marked paths in all
older layers, so the resulting archive contains the filesystem a
container would see with all layers mounted.
"""

import dataclasses
import logging
import tarfile
from pathlib import Path
from typing import List, Sequence, Union

from . import errors, whiteouts
from .deletions import DeletionIndex, WrittenPaths
from .reader import EntryKind, Layer, LayerEntry, LayerReader

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SquashReport:
    """Counters collected while squashing layers.

    :param layers: Number of layers read.
    :param written: Entries written to the output archive.
    :param masked: Entries hidden by a whiteout in a newer layer.
    :param duplicates: Entries already provided by a newer layer.
    :param whiteouts: Whiteout markers consumed.
    """

    layers: int = 0
    written: int = 0
    masked: int = 0
    duplicates: int = 0
    whiteouts: int = 0


class LayerSquasher:
    """Squash layers into an output archive.

    Each call to :meth:`squash` uses its own deletion index and set of
    written paths, so an instance can be reused.

    :param opaque_dirs: Hide the previous contents of directories marked
        as opaque. If not set, opaque markers are handled as regular
        whiteouts of a file named ``.wh..opq``.
    """

    def __init__(self, *, opaque_dirs: bool = False) -> None:
        self._opaque_dirs = opaque_dirs

    def squash(self, layers: Sequence[Layer], output: tarfile.TarFile) -> SquashReport:
        """Write the union of the given layers to the output archive.

        :param layers: The layers to combine, newest first.
        :param output: The archive to write surviving entries to.

        :returns: The squash counters.

        :raise LayerReadError: If a layer can't be read.
        :raise ArchiveWriteError: If the output archive can't be written.
        """
        deletions = DeletionIndex()
        written = WrittenPaths()
        report = SquashReport()

        for layer in layers:
            self._squash_layer(layer, output, deletions, written, report)
            report.layers += 1

        logger.debug("squash report: %r", report)
        return report

    def _squash_layer(
        self,
        layer: Layer,
        output: tarfile.TarFile,
        deletions: DeletionIndex,
        written: WrittenPaths,
        report: SquashReport,
    ) -> None:
        deleted: List[str] = []
        opaque: List[str] = []

        with LayerReader(layer) as reader:
            for entry in reader:
                if deletions.is_masked(entry.path):
                    logger.debug("skip deleted path %s", entry.name)
                    report.masked += 1
                    continue

                if entry.kind == EntryKind.OPAQUE and self._opaque_dirs:
                    opaque.append(whiteouts.opaque_directory(entry.name))
                    report.whiteouts += 1
                    continue

                if entry.kind in (EntryKind.WHITEOUT, EntryKind.OPAQUE):
                    deleted.append(whiteouts.whited_out_path(entry.name))
                    report.whiteouts += 1
                    continue

                if entry.path in written:
                    report.duplicates += 1
                    continue

                _write_entry(entry, output)
                written.add(entry.path)
                report.written += 1

        # Deletions only apply to older layers, never to the layer that
        # introduced them.
        for path in deleted:
            deletions.add(path)
        for path in opaque:
            deletions.add_opaque(path)


def _write_entry(entry: LayerEntry, output: tarfile.TarFile) -> None:
    stream = entry.open()
    try:
        output.addfile(entry.info, stream)  # type: ignore[arg-type]
    except (OSError, tarfile.TarError) as err:
        raise errors.ArchiveWriteError(_archive_name(output), str(err)) from err


def _archive_name(archive: tarfile.TarFile) -> str:
    return str(archive.name) if archive.name else "<stream>"


def squash_layers(
    layers: Sequence[Layer],
    output: Union[tarfile.TarFile, Path],
    *,
    opaque_dirs: bool = False,
) -> SquashReport:
    """Squash layers into an archive.

    Entries are written newest layer first. A hard link from a newer layer
    can therefore precede its target from an older layer, or point at a
    target removed by a whiteout, and extracting such an archive may fail
    on the hard link.

    :param layers: The layers to combine, newest first.
    :param output: An open archive, or the path of the archive to create.
    :param opaque_dirs: Apply opaque directory markers.

    :returns: The squash counters.
    """
    squasher = LayerSquasher(opaque_dirs=opaque_dirs)

    if isinstance(output, tarfile.TarFile):
        return squasher.squash(layers, output)

    try:
        archive = tarfile.open(output, "w", format=tarfile.PAX_FORMAT)
    except (OSError, tarfile.TarError) as err:
        raise errors.ArchiveWriteError(str(output), str(err)) from err

    with archive:
        report = squasher.squash(layers, archive)

    return report
