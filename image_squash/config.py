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

"""Tool settings loaded from the configuration file and environment."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict
from xdg import BaseDirectory  # type: ignore

from image_squash import errors

logger = logging.getLogger(__name__)

APPLICATION_NAME = "image-squash"
CONFIG_FILE = "config.yaml"

_ENVIRONMENT = {
    "IMAGE_SQUASH_DOCKER": "docker",
    "IMAGE_SQUASH_INSPECTOR": "inspector",
    "IMAGE_SQUASH_DOCKER_SOCKET": "docker-socket",
}


class Settings(BaseModel):
    """Configurable image-squash settings.

    :cvar docker: The docker executable.
    :cvar inspector: How image layers are inspected, ``cli`` to run
        ``docker inspect`` or ``api`` to query the engine socket.
    :cvar docker_socket: The Docker engine unix socket.
    :cvar default_tag: The tag added to image names without one.
    :cvar quiet: Disable informational messages.
    """

    model_config = ConfigDict(
        alias_generator=lambda s: s.replace("_", "-"),
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    docker: str = "docker"
    inspector: Literal["cli", "api"] = "cli"
    docker_socket: str = "/var/run/docker.sock"
    default_tag: str = "latest"
    quiet: bool = False

    @classmethod
    def unmarshal(cls, data: Dict[str, Any], *, source: str) -> "Settings":
        """Create and populate a new ``Settings`` object from dictionary data.

        :param data: The dictionary data to unmarshal.
        :param source: Where the data was read from, for error messages.

        :return: The newly created object.

        :raise ConfigurationError: If the data is not valid.
        """
        if not isinstance(data, dict):
            raise errors.ConfigurationError(source, "settings must be a mapping")

        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as err:
            raise errors.ConfigurationError.from_validation_error(
                source=source, error_list=err.errors()
            ) from err


def default_config_path() -> Optional[Path]:
    """Return the path of the user configuration file, if it exists."""
    config_dir = BaseDirectory.load_first_config(APPLICATION_NAME)
    if not config_dir:
        return None

    path = Path(config_dir, CONFIG_FILE)
    return path if path.is_file() else None


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a configuration file and the environment.

    Environment variables take precedence over the configuration file.

    :param path: The configuration file to read. If not set, the user
        configuration file is used if present.

    :returns: The loaded settings.

    :raise ConfigurationError: If the configuration is not valid.
    """
    data: Dict[str, Any] = {}
    source = "defaults"

    if path is None:
        path = default_config_path()

    if path is not None:
        logger.debug("load configuration file: %s", path)
        source = str(path)
        with open(path) as config_file:
            try:
                data = yaml.safe_load(config_file) or {}
            except yaml.YAMLError as err:
                raise errors.ConfigurationError(source, str(err)) from err

        if not isinstance(data, dict):
            raise errors.ConfigurationError(source, "settings must be a mapping")

    overrides = {
        key: os.environ[variable]
        for variable, key in _ENVIRONMENT.items()
        if os.environ.get(variable)
    }
    if overrides:
        logger.debug("settings from environment: %s", ", ".join(overrides))
        data.update(overrides)
        source = f"{source} and environment"

    return Settings.unmarshal(data, source=source)
