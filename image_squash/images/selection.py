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

"""Select the layers taking part in a squash."""

import logging
from typing import Optional, Sequence

from image_squash import errors as squash_errors

from . import errors
from .docker import LayerInspector

logger = logging.getLogger(__name__)


def common_prefix_length(base: Sequence[str], derived: Sequence[str]) -> int:
    """Count the leading layer identifiers shared by two images.

    :param base: The base image layer identifiers, oldest first.
    :param derived: The derived image layer identifiers, oldest first.

    :returns: The number of identical identifiers at identical positions,
        counted from the oldest layer until the lists diverge.
    """
    count = 0
    for base_layer, derived_layer in zip(base, derived):
        if base_layer != derived_layer:
            break
        count += 1

    return count


def unique_layer_count(
    inspector: LayerInspector,
    *,
    image: str,
    base_image: str,
    saved_layers: Optional[int] = None,
) -> int:
    """Determine how many layers an image adds on top of its base image.

    :param inspector: The layer inspector used to query both images.
    :param image: The derived image.
    :param base_image: The base image.
    :param saved_layers: The number of layer files in the saved image. If
        set, it must match the number of inspected layers of the derived
        image, as saved layers and inspected identifiers are matched by
        position.

    :returns: The number of layers unique to the derived image.

    :raise InspectFormatError: If inspection doesn't describe both images.
    :raise ImageHasNoLayers: If an image reports no layers.
    :raise ImageNotDerived: If the images share no leading layer.
    :raise ImageIdenticalToBase: If the image adds no layers.
    :raise LayerListMismatch: If the saved and inspected layers differ.
    """
    inspections = inspector.inspect(base_image, image)
    if len(inspections) != 2:
        raise errors.InspectFormatError(
            f"inspection returned {len(inspections)} images, expected 2"
        )

    base, derived = inspections
    for name, inspection in ((base_image, base), (image, derived)):
        if not inspection.layers:
            raise errors.ImageHasNoLayers(name)

    common = common_prefix_length(base.layers, derived.layers)
    unique = len(derived.layers) - common
    logger.debug(
        "%s shares %d layers with %s, %d unique", image, common, base_image, unique
    )

    if common == 0:
        raise errors.ImageNotDerived(image, base_image)

    if unique == 0:
        raise errors.ImageIdenticalToBase(image, base_image)

    if saved_layers is not None and saved_layers != len(derived.layers):
        raise errors.LayerListMismatch(
            image, saved=saved_layers, inspected=len(derived.layers)
        )

    return unique


def resolve_layer_count(
    manifest_layers: Sequence[str],
    *,
    image: str,
    base_image: Optional[str] = None,
    layer_count: Optional[int] = None,
    inspector: Optional[LayerInspector] = None,
) -> int:
    """Determine how many of the newest layers to squash.

    An explicit layer count takes precedence, followed by the number of
    layers the image adds to a base image. If neither is given, all layers
    in the saved image are used.

    :param manifest_layers: The saved image layer files, oldest first.
    :param image: The image being squashed.
    :param base_image: Only squash the layers added on top of this image.
    :param layer_count: Only squash this many of the newest layers.
    :param inspector: The layer inspector, required with a base image.

    :returns: The number of layers to squash.
    """
    if layer_count is not None:
        if layer_count < 1:
            raise squash_errors.InvalidLayerCount(layer_count)
        if layer_count > len(manifest_layers):
            logger.warning(
                "requested %d layers but %s has only %d",
                layer_count,
                image,
                len(manifest_layers),
            )
        return layer_count

    if base_image:
        if inspector is None:
            raise ValueError("a layer inspector is required to compare images")

        return unique_layer_count(
            inspector,
            image=image,
            base_image=base_image,
            saved_layers=len(manifest_layers),
        )

    return len(manifest_layers)
