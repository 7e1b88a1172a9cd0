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

"""Combine the layers of a container image into a single archive."""

from . import layers
from .config import Settings, load_settings
from .errors import SquashError
from .export import export_image, select_layers
from .layers import Layer, SquashReport, squash_layers
from .slug import make_slug

try:
    from ._version import __version__
except ImportError:  # pragma: no cover
    from importlib.metadata import version, PackageNotFoundError

    try:
        __version__ = version("image_squash")
    except PackageNotFoundError:
        __version__ = "dev"


__all__ = [
    "__version__",
    "Layer",
    "Settings",
    "SquashError",
    "SquashReport",
    "export_image",
    "layers",
    "load_settings",
    "make_slug",
    "select_layers",
    "squash_layers",
]
