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

"""Trust store backends, in the order in which they are installed."""

from django_devca.privileges import PrivilegeGate
from django_devca.truststores.base import TrustStore
from django_devca.truststores.java import JavaTrustStore
from django_devca.truststores.nss import NSSTrustStore
from django_devca.truststores.system import SystemTrustStore

__all__ = ["JavaTrustStore", "NSSTrustStore", "SystemTrustStore", "TrustStore", "get_trust_stores"]


def get_trust_stores(gate: PrivilegeGate) -> list[TrustStore]:
    """Get all trust store backends in installation order."""
    return [SystemTrustStore(gate), NSSTrustStore(gate), JavaTrustStore(gate)]
