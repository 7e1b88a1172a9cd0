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

"""Layer archive reading and squashing."""

from .deletions import DeletionIndex, WrittenPaths
from .reader import EntryKind, Layer, LayerEntry, LayerReader
from .squash import LayerSquasher, SquashReport, squash_layers
from .whiteouts import (
    is_opaque_marker,
    is_whiteout,
    normalize_path,
    opaque_directory,
    opaque_marker,
    whited_out_path,
    whiteout,
)
