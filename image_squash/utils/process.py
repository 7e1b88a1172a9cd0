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

"""Utilities for executing subprocesses and handling their output streams."""

import logging
import subprocess
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO

from image_squash import errors

logger = logging.getLogger(__name__)

Command = Sequence[str]


@dataclass
class ProcessResult:
    """Describes the outcome of a process."""

    returncode: int
    stdout: bytes
    stderr: bytes
    command: Command

    def check_returncode(self) -> None:
        """Raise an exception if the process returned non-zero."""
        if self.returncode != 0:
            raise ProcessError(self)


@dataclass
class ProcessError(Exception):
    """Simple error for failed processes.

    Generally raised if the return code of a process is non-zero.
    """

    result: ProcessResult


def run(command: Command, *, check: bool = True) -> ProcessResult:
    """Execute a subprocess and collect its output.

    :param command: Command to execute.
    :param check: If True, a ProcessError exception will be raised if ``command``
        returns a non-zero return code.

    :raises ProcessError: If process exits with a non-zero return code.
    :raises CommandNotFoundError: If the specified executable is not found.

    :return: A description of the process' outcome.
    """
    logger.debug("run command: %s", " ".join(command))
    try:
        proc = subprocess.run(
            list(command), stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False
        )
    except FileNotFoundError as err:
        raise errors.CommandNotFoundError(command[0]) from err

    result = ProcessResult(proc.returncode, proc.stdout, proc.stderr, command)
    if check:
        result.check_returncode()

    return result


@contextmanager
def stream_output(command: Command) -> Generator[IO[bytes], None, None]:
    """Execute a subprocess and provide its standard output as a stream.

    The process standard error is inherited. The return code is verified
    once the caller is done with the stream; if the caller fails the
    process is terminated instead.

    :param command: Command to execute.

    :raises ProcessError: If process exits with a non-zero return code.
    :raises CommandNotFoundError: If the specified executable is not found.
    """
    logger.debug("stream command output: %s", " ".join(command))
    try:
        proc = subprocess.Popen(list(command), stdout=subprocess.PIPE)
    except FileNotFoundError as err:
        raise errors.CommandNotFoundError(command[0]) from err

    with proc:
        if proc.stdout is None:
            raise RuntimeError("process stdout is not available")

        try:
            yield proc.stdout
        except BaseException:
            proc.kill()
            raise

        # drain anything the consumer left behind so the process can exit
        while proc.stdout.read(65536):
            pass
        returncode = proc.wait()

    ProcessResult(returncode, b"", b"", command).check_returncode()
