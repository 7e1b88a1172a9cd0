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

"""Export and inspect images using Docker."""

import abc
import logging
import tarfile
from pathlib import Path
from typing import IO
from urllib import parse

import requests
import requests_unixsocket  # type: ignore
from overrides import overrides

from image_squash import errors as squash_errors
from image_squash.config import Settings
from image_squash.utils import process, tar_utils

from . import errors
from .models import ImageInspection, parse_inspection

logger = logging.getLogger(__name__)


class ImageExporter(abc.ABC):
    """Produce the extracted saved image for an image reference."""

    @abc.abstractmethod
    def save(self, image: str, dest: Path) -> None:
        """Save an image and extract it to the destination directory.

        :param image: The image reference.
        :param dest: The directory to extract the saved image to.
        """


class LayerInspector(abc.ABC):
    """Obtain the ordered layer identifiers of images."""

    @abc.abstractmethod
    def inspect(self, *images: str) -> list[ImageInspection]:
        """Inspect the given images.

        :param images: The image references to inspect.

        :returns: One inspection per image, in the order requested.
        """


class DockerCliExporter(ImageExporter):
    """Export images with ``docker save``.

    :param docker: The docker executable.
    """

    def __init__(self, docker: str = "docker") -> None:
        self._docker = docker

    @overrides
    def save(self, image: str, dest: Path) -> None:
        command = [self._docker, "save", image]
        dest.mkdir(parents=True, exist_ok=True)

        try:
            with process.stream_output(command) as stdout:
                _extract_stream(image, stdout, dest)
        except process.ProcessError as err:
            raise squash_errors.CommandError(
                command=command, exit_code=err.result.returncode
            ) from err


def _extract_stream(image: str, stream: IO[bytes], dest: Path) -> None:
    try:
        with tar_utils.open_stream(stream) as tar:
            tar.extractall(path=dest, filter="data")
    except tarfile.TarError as err:
        raise errors.ImageExportError(image, str(err)) from err


class DockerCliInspector(LayerInspector):
    """Inspect images with ``docker inspect``.

    :param docker: The docker executable.
    """

    def __init__(self, docker: str = "docker") -> None:
        self._docker = docker

    @overrides
    def inspect(self, *images: str) -> list[ImageInspection]:
        command = [self._docker, "inspect", "--type", "image", *images]

        try:
            result = process.run(command)
        except process.ProcessError as err:
            raise squash_errors.CommandError(
                command=command,
                exit_code=err.result.returncode,
                stderr=err.result.stderr.decode(errors="replace"),
            ) from err

        return parse_inspection(result.stdout)


def get_engine_url_template(socket_path: str) -> str:
    """Return the template for the Docker engine socket URI."""
    return f"http+unix://{parse.quote(socket_path, safe='')}/{{}}"


class DockerEngineInspector(LayerInspector):
    """Inspect images querying the Docker engine API.

    :param socket_path: The Docker engine unix socket.
    """

    def __init__(self, socket_path: str = "/var/run/docker.sock") -> None:
        self._url_template = get_engine_url_template(socket_path)

    @overrides
    def inspect(self, *images: str) -> list[ImageInspection]:
        return [self._inspect_image(image) for image in images]

    def _inspect_image(self, image: str) -> ImageInspection:
        slug = f"images/{parse.quote(image, safe='/:@')}/json"
        url = self._url_template.format(slug)
        logger.debug("query engine: %s", url)

        try:
            response = requests_unixsocket.get(url)
        except requests.exceptions.ConnectionError as err:
            raise errors.DockerEngineError(url, str(err)) from err

        if response.status_code == 404:
            raise errors.DockerEngineError(url, f"no such image: {image}")

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise errors.DockerEngineError(url, str(err)) from err

        try:
            return ImageInspection.unmarshal(response.json())
        except (ValueError, TypeError) as err:
            raise errors.InspectFormatError(str(err)) from err


def get_exporter(settings: Settings) -> ImageExporter:
    """Create the image exporter for the given settings."""
    return DockerCliExporter(settings.docker)


def get_inspector(settings: Settings) -> LayerInspector:
    """Create the layer inspector for the given settings."""
    if settings.inspector == "api":
        return DockerEngineInspector(settings.docker_socket)

    return DockerCliInspector(settings.docker)
