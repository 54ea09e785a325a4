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

"""In-memory trust store used for testing the orchestrator without running any external tools."""

import typing
from typing import Optional

from django_devca.exceptions import TrustStoreCommandError
from django_devca.privileges import PrivilegeGate
from django_devca.truststores.base import TrustStore
from django_devca.typehints import TrustStoreName

if typing.TYPE_CHECKING:
    from django_devca.authority import CertificateAuthority


class DummyTrustStore(TrustStore):
    """Trust store that keeps the serials of trusted CAs in memory.

    All calls are recorded in `calls` as ``(name, method)`` tuples. Pass the same list to multiple stores to
    record the order in which stores are called.
    """

    def __init__(
        self,
        gate: PrivilegeGate,
        name: TrustStoreName,
        available: bool = True,
        has_tool: bool = True,
        fail: bool = False,
        calls: Optional[list[tuple[str, str]]] = None,
    ) -> None:
        super().__init__(gate)
        self.name = name  # type: ignore[misc]
        self.title = f"the {name} test store"  # type: ignore[misc]
        self.tool = f"{name}-tool"  # type: ignore[misc]
        self.available = available
        self.tool_available = has_tool
        self.fail = fail
        self.trusted: set[int] = set()
        self.unavailable_logged = False
        if calls is None:
            calls = []
        self.calls = calls

    def is_available(self) -> bool:
        return self.available

    def has_tool(self) -> bool:
        return self.tool_available

    def log_unavailable(self, ca: "CertificateAuthority") -> None:
        self.unavailable_logged = True

    def check(self, ca: "CertificateAuthority") -> bool:
        self.calls.append((self.name, "check"))
        return self.available and ca.certificate.serial_number in self.trusted

    def install(self, ca: "CertificateAuthority") -> bool:
        self.calls.append((self.name, "install"))
        if not self.available:
            return False
        if self.fail:
            raise TrustStoreCommandError([self.tool, "install"], 1, b"install failed")
        self.trusted.add(ca.certificate.serial_number)
        return True

    def uninstall(self, ca: "CertificateAuthority") -> bool:
        self.calls.append((self.name, "uninstall"))
        if not self.available:
            return False
        if self.fail:
            raise TrustStoreCommandError([self.tool, "uninstall"], 1, b"uninstall failed")
        self.trusted.discard(ca.certificate.serial_number)
        return True
