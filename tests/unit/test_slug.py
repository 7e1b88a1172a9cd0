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
import tarfile

import pytest
from image_squash import errors, slug

_METADATA = {
    "name": "app",
    "source": "example/app:latest",
    "version": 3,
    "isolatedAccess": True,
    "mounts": [{"path": "/data"}],
    "custom": {"kept": True},
}


@pytest.fixture
def squashed(new_path):
    path = new_path / "squashed.tar"
    path.write_bytes(b"squashed archive contents")
    return path


@pytest.fixture
def metadata(new_path):
    path = new_path / "metadata.json"
    path.write_text(json.dumps(_METADATA, indent=2))
    return path


class TestReadMetadata:
    """Slug metadata verification."""

    def test_read_metadata(self, metadata):
        assert slug.read_metadata(metadata) == metadata.read_bytes()

    def test_metadata_model(self):
        model = slug.SlugMetadata.model_validate(_METADATA)

        assert model.name == "app"
        assert model.version == 3
        assert model.isolated_access is True
        assert model.regular_access is False

    @pytest.mark.parametrize(
        "data", ["not json", "[]", '{"version": "three"}', '{"isolatedAccess": []}']
    )
    def test_read_metadata_invalid(self, new_path, data):
        path = new_path / "metadata.json"
        path.write_text(data)

        with pytest.raises(errors.MetadataError) as raised:
            slug.read_metadata(path)

        assert raised.value.path == str(path)

    def test_read_metadata_missing(self, new_path):
        with pytest.raises(FileNotFoundError):
            slug.read_metadata(new_path / "missing.json")


class TestMakeSlug:
    """Slug packaging."""

    def test_make_slug(self, new_path, squashed, metadata):
        slug.make_slug(squashed, metadata, new_path / "app.tgz")

        with tarfile.open(new_path / "app.tgz", "r:gz") as tar:
            assert tar.getnames() == [
                ".",
                "./METADATA",
                "./METADATA/conf",
                "./diff.tar",
            ]
            diff = tar.getmember("./diff.tar")
            assert diff.isreg()
            assert tar.extractfile(diff).read() == b"squashed archive contents"
            conf = tar.extractfile("./METADATA/conf").read()
            assert conf == metadata.read_bytes()

    def test_make_slug_relative_paths(self, new_path, squashed, metadata):
        slug.make_slug(
            squashed.relative_to(new_path),
            metadata.relative_to(new_path),
            new_path.joinpath("app.tgz").relative_to(new_path),
        )

        with tarfile.open(new_path / "app.tgz") as tar:
            diff = tar.extractfile("./diff.tar").read()

        assert diff == b"squashed archive contents"

    def test_make_slug_cleans_up(self, new_path, squashed, metadata):
        output_dir = new_path / "output"
        output_dir.mkdir()

        slug.make_slug(squashed, metadata, output_dir / "app.tgz")

        assert [p.name for p in output_dir.iterdir()] == ["app.tgz"]

    def test_make_slug_missing_archive(self, new_path, metadata):
        with pytest.raises(FileNotFoundError) as raised:
            slug.make_slug(new_path / "missing.tar", metadata, new_path / "app.tgz")

        assert raised.value.filename == str(new_path / "missing.tar")
        assert not (new_path / "app.tgz").exists()

    def test_make_slug_invalid_metadata(self, new_path, squashed):
        bad_metadata = new_path / "metadata.json"
        bad_metadata.write_text("[]")

        with pytest.raises(errors.MetadataError):
            slug.make_slug(squashed, bad_metadata, new_path / "app.tgz")

        assert not (new_path / "app.tgz").exists()
