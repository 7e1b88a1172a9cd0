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

"""Saved image metadata, image collaborators and layer selection."""

from .docker import (
    DockerCliExporter,
    DockerCliInspector,
    DockerEngineInspector,
    ImageExporter,
    LayerInspector,
    get_exporter,
    get_inspector,
)
from .models import ImageInspection, ManifestEntry, load_manifest, parse_inspection
from .references import has_tag, with_default_tag
from .selection import common_prefix_length, resolve_layer_count, unique_layer_count
