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

"""Image metadata error definitions."""

from image_squash import errors


class ImageError(errors.SquashError):
    """Base class for image metadata errors."""


class ManifestFormatError(ImageError):
    """The saved image manifest has an unexpected format.

    :param path: The manifest file path.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"{path} has unexpected format: {message}"
        resolution = "Make sure the directory contains a single saved image."

        super().__init__(brief=brief, resolution=resolution)


class InspectFormatError(ImageError):
    """Image inspection returned unexpected data.

    :param message: The error message.
    """

    def __init__(self, message: str):
        self.message = message
        brief = f"Unexpected image inspection result: {message}"

        super().__init__(brief=brief)


class ImageHasNoLayers(ImageError):
    """An inspected image has no layers.

    :param image: The image name.
    """

    def __init__(self, image: str):
        self.image = image
        brief = f"Image {image} has no layers."

        super().__init__(brief=brief)


class ImageNotDerived(ImageError):
    """The image was not built on top of the base image.

    :param image: The image name.
    :param base_image: The base image name.
    """

    def __init__(self, image: str, base_image: str):
        self.image = image
        self.base_image = base_image
        brief = f"Image {image} is not derived from image {base_image}."
        resolution = "Make sure the base image is correct."

        super().__init__(brief=brief, resolution=resolution)


class ImageIdenticalToBase(ImageError):
    """The image has no layers besides the ones in the base image.

    :param image: The image name.
    :param base_image: The base image name.
    """

    def __init__(self, image: str, base_image: str):
        self.image = image
        self.base_image = base_image
        brief = f"Image {image} is the same as {base_image}."
        resolution = "There are no layers to combine."

        super().__init__(brief=brief, resolution=resolution)


class LayerListMismatch(ImageError):
    """The saved layers don't correspond to the inspected layers.

    :param image: The image name.
    :param saved: Number of layers in the saved image.
    :param inspected: Number of layers reported by image inspection.
    """

    def __init__(self, image: str, *, saved: int, inspected: int):
        self.image = image
        self.saved = saved
        self.inspected = inspected
        brief = (
            f"Image {image} was saved with {saved} layers but "
            f"inspection reports {inspected} layers."
        )
        resolution = "Make sure the saved image matches the inspected image."

        super().__init__(brief=brief, resolution=resolution)


class DockerEngineError(ImageError):
    """Failed to query the Docker engine.

    :param url: The requested URL.
    :param message: The error message.
    """

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        brief = f"Failed to query the Docker engine at {url}: {message}"
        resolution = "Make sure the Docker daemon is running and accessible."

        super().__init__(brief=brief, resolution=resolution)


class ImageExportError(ImageError):
    """Failed to extract an exported image.

    :param image: The image name.
    :param message: The error message.
    """

    def __init__(self, image: str, message: str):
        self.image = image
        self.message = message
        brief = f"Failed to extract saved image {image}: {message}"

        super().__init__(brief=brief)
