# This file is part of django-devca.
#
# django-devca is free software: you can redistribute it and/or modify it under the terms of the GNU General
# Public License as published by the Free Software Foundation, either version 3 of the License, or (at your
# option) any later version.
#
# django-devca is distributed in the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the
# implied warranty of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU General Public License
# for more details.
#
# You should have received a copy of the GNU General Public License along with django-devca. If not, see
# <http://www.gnu.org/licenses/>.

"""Run commands that require elevated privileges."""

import logging
import os
import shutil
import subprocess
import threading
from collections.abc import Sequence
from typing import Optional

from django_devca.constants import SUDO_PROMPT

log = logging.getLogger(__name__)


def is_root() -> bool:
    """Return ``True`` if the current process runs with superuser privileges."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:  # pragma: no cover  # Windows has no effective user ID
        return False
    return geteuid() == 0


def run_command(
    command: Sequence[str],
    input: Optional[bytes] = None,  # noqa: A002
) -> subprocess.CompletedProcess[bytes]:
    """Run a command, capturing stdout and stderr together.

    The command is not checked for a non-zero exit status, this is left to the caller.
    """
    log.debug("Running: %s", " ".join(command))
    return subprocess.run(  # noqa: S603
        list(command), input=input, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
    )


class PrivilegeGate:
    """Wrap commands with ``sudo`` if the current process is not running as root.

    If neither is the case, commands are run unmodified and a warning is logged once for the lifetime of the
    instance. Privileges are re-evaluated on every call.
    """

    def __init__(self) -> None:
        self._warned = False
        self._lock = threading.Lock()

    def _warn_once(self) -> None:
        with self._lock:
            if self._warned:
                return
            self._warned = True
        log.warning(
            'Warning: "sudo" is not available, and django-devca is not running as root. '
            "The (un)install operation might fail."
        )

    def wrap(self, command: Sequence[str]) -> list[str]:
        """Get the command to run, including ``sudo`` if required."""
        if is_root():
            return list(command)
        if shutil.which("sudo") is None:
            self._warn_once()
            return list(command)
        return ["sudo", f"--prompt={SUDO_PROMPT}", "--", *command]

    def run(
        self,
        command: Sequence[str],
        input: Optional[bytes] = None,  # noqa: A002
    ) -> subprocess.CompletedProcess[bytes]:
        """Run the given command with elevated privileges."""
        return run_command(self.wrap(command), input=input)
