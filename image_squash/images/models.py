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

"""Saved image manifest and image inspection models."""

import logging
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from . import errors

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"


class ManifestEntry(BaseModel):
    """An image described in a saved image manifest.

    Layer file names are relative to the saved image directory and ordered
    from the oldest to the newest layer.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    config: str | None = Field(default=None, alias="Config")
    repo_tags: list[str] | None = Field(default=None, alias="RepoTags")
    layers: list[str] = Field(alias="Layers")


class RootFS(BaseModel):
    """The root filesystem section of an image inspection."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    layers: list[str] = Field(default_factory=list, alias="Layers")


class ImageInspection(BaseModel):
    """The subset of image inspection data used to compare images."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(default=None, alias="Id")
    repo_tags: list[str] | None = Field(default=None, alias="RepoTags")
    root_fs: RootFS = Field(default_factory=RootFS, alias="RootFS")

    @property
    def layers(self) -> list[str]:
        """The layer identifiers, from the oldest to the newest."""
        return self.root_fs.layers

    @classmethod
    def unmarshal(cls, data: dict[str, Any]) -> "ImageInspection":
        """Create and populate a new ``ImageInspection`` from dictionary data.

        :param data: The dictionary data to unmarshal.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        """
        if not isinstance(data, dict):
            raise TypeError("image inspection data is not a dictionary")

        return cls.model_validate(data)


_inspection_list = pydantic.TypeAdapter(list[ImageInspection])
_manifest = pydantic.TypeAdapter(list[ManifestEntry])


def parse_inspection(data: bytes | str) -> list[ImageInspection]:
    """Parse the JSON output of an image inspection.

    :param data: The JSON document, a list of image descriptions.

    :returns: The image inspections, in the order they were reported.

    :raise InspectFormatError: If the data is not a list of images.
    """
    try:
        return _inspection_list.validate_json(data)
    except pydantic.ValidationError as err:
        raise errors.InspectFormatError(str(err)) from err


def load_manifest(save_dir: Path) -> ManifestEntry:
    """Read the manifest of a saved image.

    :param save_dir: The directory containing the extracted saved image.

    :returns: The manifest entry describing the saved image.

    :raise ManifestFormatError: If the manifest doesn't describe exactly
        one image.
    """
    manifest_path = save_dir / MANIFEST_FILE
    logger.debug("load manifest: %s", manifest_path)

    data = manifest_path.read_bytes()
    try:
        entries = _manifest.validate_json(data)
    except pydantic.ValidationError as err:
        raise errors.ManifestFormatError(str(manifest_path), str(err)) from err

    if len(entries) != 1:
        raise errors.ManifestFormatError(
            str(manifest_path), f"expected 1 image, found {len(entries)}"
        )

    return entries[0]
