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

"""Package a squashed archive in the slug format.

A slug is a gzip-compressed tarball containing the squashed filesystem
archive as ``diff.tar`` and the slug metadata as ``METADATA/conf``.
"""

import errno
import logging
import os
import tarfile
import tempfile
from pathlib import Path
from typing import Any, List, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from image_squash import errors
from image_squash.layers.errors import ArchiveWriteError

logger = logging.getLogger(__name__)

METADATA_DIR = "METADATA"
METADATA_FILE = "conf"
DIFF_FILE = "diff.tar"


class SlugMetadata(BaseModel):
    """The slug metadata configuration.

    Only the structure is verified; unknown fields are preserved.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    source: str = ""
    version: int = 0
    parent: str = ""
    interfaces: Any = None
    mounts: Optional[List[Any]] = None
    application: Any = None
    overlays: Optional[List[Any]] = None
    metadata: Any = None
    isolated_access: bool = Field(default=False, alias="isolatedAccess")
    regular_access: bool = Field(default=False, alias="regularAccess")
    cgroup: Any = None


def read_metadata(path: Path) -> bytes:
    """Read and verify a slug metadata file.

    :param path: The metadata file, a JSON document.

    :returns: The unmodified file contents.

    :raise MetadataError: If the file is not valid slug metadata.
    """
    data = Path(path).read_bytes()
    try:
        SlugMetadata.model_validate_json(data)
    except pydantic.ValidationError as err:
        raise errors.MetadataError(str(path), str(err)) from err

    return data


def make_slug(tar_path: Path, metadata_path: Path, slug_path: Path) -> None:
    """Create a slug from a squashed archive and a metadata file.

    The squashed archive is linked into the staging directory rather than
    copied, and the link is followed when the slug is written.

    :param tar_path: The squashed filesystem archive.
    :param metadata_path: The slug metadata file.
    :param slug_path: The slug file to create.
    """
    tar_path = Path(tar_path).absolute()
    slug_path = Path(slug_path)

    if not tar_path.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(tar_path))

    metadata = read_metadata(metadata_path)

    with tempfile.TemporaryDirectory(dir=slug_path.parent, prefix="tmp") as temp_dir:
        staging_dir = Path(temp_dir, "slug")
        metadata_dir = staging_dir / METADATA_DIR
        metadata_dir.mkdir(mode=0o755, parents=True)
        (metadata_dir / METADATA_FILE).write_bytes(metadata)
        (staging_dir / DIFF_FILE).symlink_to(tar_path)

        logger.info("creating slug %s", slug_path)
        partial_path = Path(temp_dir, "slug.tgz")
        try:
            with tarfile.open(partial_path, "w:gz", dereference=True) as tar:
                tar.add(staging_dir, arcname=".")
        except tarfile.TarError as err:
            raise ArchiveWriteError(str(slug_path), str(err)) from err

        os.replace(partial_path, slug_path)
