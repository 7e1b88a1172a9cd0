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

import io
import json
import tarfile

import pytest
import requests
from image_squash import errors as squash_errors
from image_squash.config import Settings
from image_squash.images import docker, errors

from tests.layer_utils import HEADER_DAMAGE, damage_header

_SOCKET_URL = "http+unix://%2Fvar%2Frun%2Fdocker.sock"

_INSPECT_OUTPUT = [
    {"Id": "sha256:1111", "RootFS": {"Layers": ["sha256:aaaa"]}},
    {"Id": "sha256:2222", "RootFS": {"Layers": ["sha256:aaaa", "sha256:bbbb"]}},
]


def _saved_image_stream() -> bytes:
    """Create the output of a docker save with a single layer."""
    layer = io.BytesIO()
    with tarfile.open(fileobj=layer, mode="w") as tar:
        info = tarfile.TarInfo("hello")
        info.size = 5
        tar.addfile(info, io.BytesIO(b"hello"))

    files = {
        "manifest.json": json.dumps([{"Layers": ["abcd/layer.tar"]}]).encode(),
        "abcd/layer.tar": layer.getvalue(),
    }

    stream = io.BytesIO()
    with tarfile.open(fileobj=stream, mode="w") as tar:
        info = tarfile.TarInfo("abcd")
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        tar.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))

    return stream.getvalue()


class TestDockerCliExporter:
    """Save images with the docker command."""

    def test_save(self, new_path, fake_process):
        fake_process.register(
            ["docker", "save", "example/app:latest"], stdout=_saved_image_stream()
        )

        docker.DockerCliExporter().save("example/app:latest", new_path / "save")

        manifest = json.loads((new_path / "save/manifest.json").read_text())
        assert manifest == [{"Layers": ["abcd/layer.tar"]}]
        assert (new_path / "save/abcd/layer.tar").is_file()

    def test_save_custom_docker(self, new_path, fake_process):
        fake_process.register(
            ["/opt/bin/docker", "save", "app:1"], stdout=_saved_image_stream()
        )

        docker.DockerCliExporter("/opt/bin/docker").save("app:1", new_path / "save")

        assert (new_path / "save/manifest.json").is_file()

    def test_save_command_error(self, new_path, fake_process):
        fake_process.register(
            ["docker", "save", "app:1"], stdout=_saved_image_stream(), returncode=1
        )

        with pytest.raises(squash_errors.CommandError) as raised:
            docker.DockerCliExporter().save("app:1", new_path / "save")

        assert raised.value.command == ["docker", "save", "app:1"]
        assert raised.value.exit_code == 1
        assert raised.value.brief == "Command 'docker save app:1' exited with code 1."

    def test_save_invalid_stream(self, new_path, fake_process):
        fake_process.register(
            ["docker", "save", "app:1"], stdout=b"not a tar stream" * 64
        )

        with pytest.raises(errors.ImageExportError) as raised:
            docker.DockerCliExporter().save("app:1", new_path / "save")

        assert raised.value.image == "app:1"

    @pytest.mark.parametrize("damage", HEADER_DAMAGE)
    def test_save_damaged_member_header(self, new_path, fake_process, damage):
        # the header of manifest.json follows the directory header
        stream = damage_header(_saved_image_stream(), 512, damage)
        fake_process.register(["docker", "save", "app:1"], stdout=stream)

        with pytest.raises(errors.ImageExportError) as raised:
            docker.DockerCliExporter().save("app:1", new_path / "save")

        assert raised.value.image == "app:1"
        assert not (new_path / "save/manifest.json").exists()

    def test_save_unsafe_member(self, new_path, fake_process):
        stream = io.BytesIO()
        with tarfile.open(fileobj=stream, mode="w") as tar:
            info = tarfile.TarInfo("../escape")
            info.size = 1
            tar.addfile(info, io.BytesIO(b"x"))
        fake_process.register(["docker", "save", "app:1"], stdout=stream.getvalue())

        with pytest.raises(errors.ImageExportError):
            docker.DockerCliExporter().save("app:1", new_path / "save")

        assert not (new_path / "escape").exists()


class TestDockerCliInspector:
    """Inspect images with the docker command."""

    def test_inspect(self, fake_process):
        fake_process.register(
            ["docker", "inspect", "--type", "image", "base:1", "app:1"],
            stdout=json.dumps(_INSPECT_OUTPUT).encode(),
        )

        inspections = docker.DockerCliInspector().inspect("base:1", "app:1")

        assert [i.layers for i in inspections] == [
            ["sha256:aaaa"],
            ["sha256:aaaa", "sha256:bbbb"],
        ]

    def test_inspect_command_error(self, fake_process):
        fake_process.register(
            ["docker", "inspect", "--type", "image", "app:1"],
            stderr=b"Error: No such image: app:1\n",
            returncode=1,
        )

        with pytest.raises(squash_errors.CommandError) as raised:
            docker.DockerCliInspector().inspect("app:1")

        assert raised.value.exit_code == 1
        assert raised.value.details == "Error: No such image: app:1"

    def test_inspect_invalid_output(self, fake_process):
        fake_process.register(
            ["docker", "inspect", "--type", "image", "app:1"], stdout=b"{}"
        )

        with pytest.raises(errors.InspectFormatError):
            docker.DockerCliInspector().inspect("app:1")


class TestDockerEngineInspector:
    """Inspect images querying the engine socket."""

    def test_get_engine_url_template(self):
        template = docker.get_engine_url_template("/var/run/docker.sock")
        assert template == _SOCKET_URL + "/{}"

    def test_inspect(self, mocker):
        mock_get = mocker.patch("image_squash.images.docker.requests_unixsocket.get")
        mock_get.return_value.status_code = 200
        mock_get.return_value.json.side_effect = _INSPECT_OUTPUT

        inspections = docker.DockerEngineInspector().inspect(
            "base:1", "registry:5000/app:1"
        )

        assert [i.id for i in inspections] == ["sha256:1111", "sha256:2222"]
        assert mock_get.mock_calls[0] == mocker.call(
            f"{_SOCKET_URL}/images/base:1/json"
        )
        assert mocker.call(
            f"{_SOCKET_URL}/images/registry:5000/app:1/json"
        ) in mock_get.mock_calls

    def test_inspect_custom_socket(self, mocker):
        mock_get = mocker.patch("image_squash.images.docker.requests_unixsocket.get")
        mock_get.return_value.status_code = 200
        mock_get.return_value.json.return_value = _INSPECT_OUTPUT[0]

        docker.DockerEngineInspector("/run/user/1000/docker.sock").inspect("app:1")

        mock_get.assert_called_once_with(
            "http+unix://%2Frun%2Fuser%2F1000%2Fdocker.sock/images/app:1/json"
        )

    def test_inspect_no_such_image(self, mocker):
        mock_get = mocker.patch("image_squash.images.docker.requests_unixsocket.get")
        mock_get.return_value.status_code = 404

        with pytest.raises(errors.DockerEngineError) as raised:
            docker.DockerEngineInspector().inspect("app:1")

        assert raised.value.message == "no such image: app:1"
        assert raised.value.url == f"{_SOCKET_URL}/images/app:1/json"

    def test_inspect_server_error(self, mocker):
        mock_get = mocker.patch("image_squash.images.docker.requests_unixsocket.get")
        mock_get.return_value.status_code = 500
        mock_get.return_value.raise_for_status.side_effect = (
            requests.exceptions.HTTPError("500 Server Error")
        )

        with pytest.raises(errors.DockerEngineError) as raised:
            docker.DockerEngineInspector().inspect("app:1")

        assert raised.value.message == "500 Server Error"

    def test_inspect_connection_error(self, mocker):
        mocker.patch(
            "image_squash.images.docker.requests_unixsocket.get",
            side_effect=requests.exceptions.ConnectionError("connection refused"),
        )

        with pytest.raises(errors.DockerEngineError) as raised:
            docker.DockerEngineInspector().inspect("app:1")

        assert raised.value.message == "connection refused"

    @pytest.mark.parametrize("data", [[], {"RootFS": {"Layers": 1}}])
    def test_inspect_invalid_response(self, mocker, data):
        mock_get = mocker.patch("image_squash.images.docker.requests_unixsocket.get")
        mock_get.return_value.status_code = 200
        mock_get.return_value.json.return_value = data

        with pytest.raises(errors.InspectFormatError):
            docker.DockerEngineInspector().inspect("app:1")


class TestFactories:
    """Collaborators created from settings."""

    def test_get_exporter(self):
        exporter = docker.get_exporter(Settings(docker="/opt/bin/docker"))
        assert isinstance(exporter, docker.DockerCliExporter)

    def test_get_inspector_default(self):
        inspector = docker.get_inspector(Settings())
        assert isinstance(inspector, docker.DockerCliInspector)

    def test_get_inspector_api(self):
        inspector = docker.get_inspector(Settings(inspector="api"))
        assert isinstance(inspector, docker.DockerEngineInspector)
