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

"""Exceptions raised by django-devca."""

from collections.abc import Sequence
from typing import Union

from django.core.exceptions import ImproperlyConfigured


class ConfigurationError(ImproperlyConfigured):
    """Raised for conflicting options or an unusable configuration, always before any file is written."""


class SubjectError(ValueError):
    """Raised if a name cannot be classified as IP address, email address, URI or hostname."""


class CSRError(ValueError):
    """Raised if a certificate signing request cannot be loaded or has an invalid signature."""


class TrustStoreCommandError(Exception):
    """Raised if a helper tool for a trust store exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: Union[str, bytes] = "") -> None:
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output.strip()
        super().__init__(self.command, self.returncode, self.output)

    def __str__(self) -> str:
        msg = f'failed to execute "{" ".join(self.command)}": exit status {self.returncode}'
        if self.output:
            msg += f"\n\n{self.output}\n"
        return msg
