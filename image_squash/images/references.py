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

"""Image reference helpers."""

DEFAULT_TAG = "latest"


def has_tag(name: str) -> bool:
    """Verify if an image reference names a tag or a digest.

    A registry port (``localhost:5000/app``) is not a tag.

    :param name: The image reference.
    """
    if "@" in name:
        return True

    return ":" in name.rsplit("/", maxsplit=1)[-1]


def with_default_tag(name: str, tag: str = DEFAULT_TAG) -> str:
    """Add a tag to an image reference that has none.

    :param name: The image reference.
    :param tag: The tag to add.

    :returns: The image reference, with ``:tag`` appended if needed.
    """
    if has_tag(name):
        return name

    return f"{name}:{tag}"
