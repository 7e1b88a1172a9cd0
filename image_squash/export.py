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

"""Export an image and combine its layers into a single archive."""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from image_squash.config import Settings
from image_squash.images import (
    ImageExporter,
    LayerInspector,
    get_exporter,
    get_inspector,
    load_manifest,
    resolve_layer_count,
    with_default_tag,
)
from image_squash.layers import Layer, SquashReport, squash_layers

logger = logging.getLogger(__name__)


def select_layers(
    save_dir: Path, layer_files: Sequence[str], count: int
) -> List[Layer]:
    """List the newest layers of a saved image.

    :param save_dir: The saved image directory.
    :param layer_files: The layer files listed in the manifest, oldest first.
    :param count: How many of the newest layers to select.

    :returns: The selected layers, newest first.
    """
    first = max(len(layer_files) - count, 0)
    return [
        Layer(index=index, path=save_dir / layer_files[index])
        for index in reversed(range(first, len(layer_files)))
    ]


def export_image(
    image: str,
    tar_path: Path,
    *,
    base_image: Optional[str] = None,
    save_dir: Optional[Path] = None,
    layer_count: Optional[int] = None,
    opaque_dirs: bool = False,
    exporter: Optional[ImageExporter] = None,
    inspector: Optional[LayerInspector] = None,
    settings: Optional[Settings] = None,
) -> SquashReport:
    """Save an image and combine its layers into a tar archive.

    The archive is assembled in a temporary directory next to ``tar_path``
    and only moved into place once all layers have been combined.

    :param image: The image to export.
    :param tar_path: The archive to create.
    :param base_image: Only combine the layers added on top of this image.
    :param save_dir: Use this directory containing a previously saved and
        extracted image instead of saving the image.
    :param layer_count: Only combine this many of the newest layers.
    :param opaque_dirs: Apply opaque directory markers.
    :param exporter: The image exporter. Defaults to the one configured
        in settings.
    :param inspector: The layer inspector. Defaults to the one configured
        in settings.
    :param settings: The tool settings.

    :returns: The squash counters.
    """
    if settings is None:
        settings = Settings()

    tar_path = Path(tar_path)
    image = with_default_tag(image, settings.default_tag)
    if base_image:
        base_image = with_default_tag(base_image, settings.default_tag)

    with tempfile.TemporaryDirectory(dir=tar_path.parent, prefix="tmp") as temp_dir:
        work_dir = Path(temp_dir)

        if save_dir is None:
            save_dir = work_dir / "save"
            if exporter is None:
                exporter = get_exporter(settings)
            logger.info("saving %s", image)
            exporter.save(image, save_dir)

        save_dir = Path(save_dir)
        manifest = load_manifest(save_dir)

        if base_image and layer_count is None and inspector is None:
            inspector = get_inspector(settings)

        count = resolve_layer_count(
            manifest.layers,
            image=image,
            base_image=base_image,
            layer_count=layer_count,
            inspector=inspector,
        )
        layers = select_layers(save_dir, manifest.layers, count)

        logger.info("combining layers")
        partial_path = work_dir / "squashed.tar"
        report = squash_layers(layers, partial_path, opaque_dirs=opaque_dirs)
        os.replace(partial_path, tar_path)

    logger.debug(
        "wrote %d entries from %d layers to %s", report.written, report.layers, tar_path
    )
    return report
