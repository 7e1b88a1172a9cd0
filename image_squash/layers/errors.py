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

"""Layer squash error definitions."""

from image_squash import errors


class LayerError(errors.SquashError):
    """Base class for layer handling errors."""


class LayerReadError(LayerError):
    """Failed to open or decode a layer archive.

    :param layer: The layer archive path.
    :param message: The error message.
    """

    def __init__(self, layer: str, message: str):
        self.layer = layer
        self.message = message
        brief = f"Failed to read layer {layer!r}: {message}"
        resolution = "Make sure the image was saved correctly and try again."

        super().__init__(brief=brief, resolution=resolution)


class ArchiveWriteError(LayerError):
    """Failed to write an entry to the squashed archive.

    :param path: The output archive path.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"Failed to write squashed archive {path!r}: {message}"

        super().__init__(brief=brief)
