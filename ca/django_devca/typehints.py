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

"""Various type aliases used throughout django-devca."""

from typing import Literal, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa

# IMPORTANT: Do **not** import any module from django_devca at runtime here, or you risk circular imports.

#: Names of the supported trust stores, in the order they are processed.
TrustStoreName = Literal["system", "nss", "java"]

#: Key types supported for leaf certificates.
KeyType = Literal["RSA", "EC"]

#: Private key types that can be generated for leaf certificates.
LeafPrivateKeyTypes = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]

#: The general name types a command line argument may be classified as.
ClassifiedSubject = Union[x509.IPAddress, x509.RFC822Name, x509.UniformResourceIdentifier, x509.DNSName]
