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

"""Base class for trust store backends."""

import abc
import subprocess
import typing
from collections.abc import Sequence
from typing import Optional

from django_devca.exceptions import TrustStoreCommandError
from django_devca.privileges import PrivilegeGate, run_command
from django_devca.typehints import TrustStoreName

if typing.TYPE_CHECKING:
    from django_devca.authority import CertificateAuthority


class TrustStore(metaclass=abc.ABCMeta):
    """Base class for all trust store backends.

    Backends are safe to use when the trust store they manage is not present on this system:
    :py:func:`~django_devca.truststores.base.TrustStore.install` and
    :py:func:`~django_devca.truststores.base.TrustStore.uninstall` return ``False`` in this case, and
    :py:func:`~django_devca.truststores.base.TrustStore.check` returns ``False``.

    If a helper tool exits with a non-zero status, :py:class:`~django_devca.exceptions.TrustStoreCommandError`
    is raised.
    """

    #: Name of the trust store, as used in the ``TRUST_STORES`` environment variable.
    name: typing.ClassVar[TrustStoreName]

    #: Human-readable name used in log messages, e.g. "the system trust store".
    title: typing.ClassVar[str]

    #: Name of the helper tool used for managing the trust store (if any).
    tool: typing.ClassVar[Optional[str]] = None

    #: Appended to the log message after a successful installation.
    install_note: typing.ClassVar[str] = ""

    def __init__(self, gate: PrivilegeGate) -> None:
        self.gate = gate

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.name}>"

    def run(
        self,
        command: Sequence[str],
        input: Optional[bytes] = None,  # noqa: A002
        privileged: bool = False,
    ) -> "subprocess.CompletedProcess[bytes]":
        """Run a command, optionally with elevated privileges, and return the completed process."""
        if privileged:
            return self.gate.run(command, input=input)
        return run_command(command, input=input)

    def run_checked(
        self,
        command: Sequence[str],
        input: Optional[bytes] = None,  # noqa: A002
        privileged: bool = False,
    ) -> "subprocess.CompletedProcess[bytes]":
        """Same as :py:func:`~django_devca.truststores.base.TrustStore.run`, but raise an exception on error.

        Raises
        ------
        TrustStoreCommandError
            If the command exits with a non-zero status.
        """
        proc = self.run(command, input=input, privileged=privileged)
        if proc.returncode != 0:
            raise TrustStoreCommandError(proc.args, proc.returncode, proc.stdout or b"")
        return proc

    def has_tool(self) -> bool:
        """Return ``True`` if the helper tool is available (or if the store does not need one)."""
        return True

    def get_install_hint(self) -> Optional[str]:
        """Get a command that installs the helper tool on this system, if known."""
        return None

    def log_unavailable(self, ca: "CertificateAuthority") -> None:  # pylint: disable=unused-argument
        """Log a message if the user should know that this trust store is unavailable.

        The default is to log nothing, as most stores are simply not present on most systems.
        """
        return None

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the trust store is present on this system."""

    @abc.abstractmethod
    def check(self, ca: "CertificateAuthority") -> bool:
        """Return ``True`` if `ca` is trusted by this trust store."""

    @abc.abstractmethod
    def install(self, ca: "CertificateAuthority") -> bool:
        """Install `ca` into the trust store.

        Return ``True`` if the CA was installed and ``False`` if the trust store is not applicable.
        """

    @abc.abstractmethod
    def uninstall(self, ca: "CertificateAuthority") -> bool:
        """Remove `ca` from the trust store.

        Return ``True`` if the CA was removed and ``False`` if the trust store is not applicable.
        """
