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

"""Image squash errors."""

import dataclasses
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


@dataclasses.dataclass(repr=True)
class SquashError(Exception):
    """Unexpected error.

    :param brief: Brief description of error.
    :param details: Detailed information.
    :param resolution: Recommendation, if any.
    """

    brief: str
    details: Optional[str] = None
    resolution: Optional[str] = None

    def __str__(self) -> str:
        components = [self.brief]

        if self.details:
            components.append(self.details)

        if self.resolution:
            components.append(self.resolution)

        return "\n".join(components)


class ConfigurationError(SquashError):
    """The configuration file or environment is not valid.

    :param source: Where the configuration was read from.
    :param message: The error message.
    """

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        brief = f"Invalid configuration in {source}."
        details = message
        resolution = "Review the configuration and make sure it's correct."

        super().__init__(brief=brief, details=details, resolution=resolution)

    @classmethod
    def from_validation_error(
        cls, *, source: str, error_list: List["ErrorDetails"]
    ) -> "ConfigurationError":
        """Create a ConfigurationError from a pydantic error list.

        :param source: Where the configuration was read from.
        :param error_list: A list of pydantic error definitions.
        """
        formatted_errors: List[str] = []

        for error in error_list:
            loc = error.get("loc")
            msg = error.get("msg")

            if not (loc and msg):
                continue

            field = ".".join(str(part) for part in loc)
            if error.get("type") == "extra_forbidden":
                formatted_errors.append(f"- extra field {field!r} not permitted")
            else:
                formatted_errors.append(f"- {msg} in field {field!r}")

        return cls(source=source, message="\n".join(formatted_errors))


class InvalidLayerCount(SquashError):
    """The number of layers to squash is not valid.

    :param count: The requested layer count.
    """

    def __init__(self, count: int):
        self.count = count
        brief = f"Invalid layer count {count}."
        resolution = "The number of layers to combine must be a positive integer."

        super().__init__(brief=brief, resolution=resolution)


class MetadataError(SquashError):
    """The slug metadata file could not be used.

    :param path: The metadata file path.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"Invalid slug metadata file {path!r}."
        details = message
        resolution = "Make sure the metadata file contains a JSON object."

        super().__init__(brief=brief, details=details, resolution=resolution)


class CommandError(SquashError):
    """An external command exited with an error.

    :param command: The command that was executed.
    :param exit_code: The command exit code.
    :param stderr: The error output, if captured.
    """

    def __init__(self, *, command: Sequence[str], exit_code: int, stderr: str = ""):
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        brief = f"Command {' '.join(self.command)!r} exited with code {exit_code}."
        details = stderr.strip() or None

        super().__init__(brief=brief, details=details)


class CommandNotFoundError(SquashError):
    """An external command could not be started.

    :param command_name: The name of the missing command.
    """

    def __init__(self, command_name: str):
        self.command_name = command_name
        brief = f"A tool image-squash depends on could not be found: {command_name!r}"
        resolution = "Ensure the tool is installed and available, and try again."

        super().__init__(brief=brief, resolution=resolution)
