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

import json

import pytest

from .layer_utils import file_entry, write_layer


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Use collection hook to mark all integration tests as slow"""
    for item in items:
        if "tests/integration" in str(item.path):
            item.add_marker(pytest.mark.slow)


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: tests that run the whole command")


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the user configuration and environment."""
    for variable in (
        "IMAGE_SQUASH_DOCKER",
        "IMAGE_SQUASH_INSPECTOR",
        "IMAGE_SQUASH_DOCKER_SOCKET",
    ):
        monkeypatch.delenv(variable, raising=False)

    config_home = tmp_path / "xdg-config"
    config_home.mkdir()
    monkeypatch.setattr("xdg.BaseDirectory.xdg_config_dirs", [str(config_home)])
    return config_home


@pytest.fixture
def new_dir(monkeypatch, tmpdir):
    """Change to a new temporary directory."""
    monkeypatch.chdir(tmpdir)
    return tmpdir


@pytest.fixture
def new_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def saved_image(tmp_path):
    """Create an extracted saved image with three layers.

    Layer 0 provides ``etc/os-release`` and ``bin/sh``, layer 1 removes
    ``bin/sh`` and layer 2 adds ``app/run``.
    """
    save_dir = tmp_path / "saved"
    layer_files = ["l0/layer.tar", "l1/layer.tar", "l2/layer.tar"]

    write_layer(
        save_dir / layer_files[0],
        [file_entry("etc/os-release", b"base"), file_entry("bin/sh", b"shell")],
    )
    write_layer(save_dir / layer_files[1], [file_entry("bin/.wh.sh")])
    write_layer(save_dir / layer_files[2], [file_entry("app/run", b"run")])

    manifest = [
        {
            "Config": "config.json",
            "RepoTags": ["example/app:latest"],
            "Layers": layer_files,
        }
    ]
    (save_dir / "manifest.json").write_text(json.dumps(manifest))

    return save_dir
