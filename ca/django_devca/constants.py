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

"""Constants used throughout django-devca."""

import enum
import re
from types import MappingProxyType

from cryptography.hazmat.primitives.asymmetric import ec

from django_devca.typehints import TrustStoreName

# IMPORTANT: Do **not** import any module from django_devca at runtime here (except typehints), or you risk
# circular imports.

#: Filename of the root certificate in the CAROOT.
ROOT_CERT_FILENAME = "rootCA.pem"

#: Filename of the private key of the root certificate in the CAROOT.
ROOT_KEY_FILENAME = "rootCA-key.pem"

#: Name of the directory created below the per-user application data directory.
CAROOT_DIRNAME = "devca"

#: Organization used in the subject of the root certificate.
CA_ORGANIZATION = "django-devca development CA"

#: Organization used in the subject of leaf certificates.
CERT_ORGANIZATION = "django-devca development certificate"

#: Password for PKCS #12 bundles and the Java keystore. This is the well known default that legacy
#: applications expect.
PKCS12_PASSWORD = b"changeit"
JAVA_STORE_PASSWORD = "changeit"

#: Trust stores in the order in which they are installed.
TRUST_STORE_NAMES: tuple[TrustStoreName, ...] = ("system", "nss", "java")

#: Human readable names of the browsers using NSS.
NSS_BROWSERS = "Firefox and/or Chrome/Chromium"

#: Prompt passed to sudo when escalating privileges.
SUDO_PROMPT = "Sudo password:"

#: Regular expression for hostnames after IDNA encoding. A single leading wildcard label is allowed.
HOSTNAME_RE = re.compile(r"^(\*\.)?[0-9a-z_-]([0-9a-z._-]*[0-9a-z_-])?$", flags=re.I)

#: Regular expression for the "dot-atom" form of RFC 5322, used for both parts of an email address.
DOT_ATOM_RE = re.compile(r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*$", flags=re.I)

ELLIPTIC_CURVE_TYPES: MappingProxyType[str, type[ec.EllipticCurve]] = MappingProxyType(
    {
        "secp256r1": ec.SECP256R1,
        "secp384r1": ec.SECP384R1,
        "secp521r1": ec.SECP521R1,
    }
)

#: Anchor directories and refresh commands of the system trust store on various Linux distributions. The
#: first entry with an existing directory is used.
LINUX_SYSTEM_TRUST: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    # RHEL, CentOS, Fedora
    ("/etc/pki/ca-trust/source/anchors/", "{name}.pem", ("update-ca-trust", "extract")),
    # Debian, Ubuntu
    ("/usr/local/share/ca-certificates/", "{name}.crt", ("update-ca-certificates",)),
    # Arch Linux
    ("/etc/ca-certificates/trust-source/anchors/", "{name}.crt", ("trust", "extract-compat")),
    # openSUSE
    ("/usr/share/pki/trust/anchors/", "{name}.pem", ("update-ca-certificates",)),
)

#: Path to the keychain used on macOS.
MACOS_SYSTEM_KEYCHAIN = "/Library/Keychains/System.keychain"


class Mode(enum.Enum):
    """Operations that can be performed by a single invocation."""

    INSTALL = "install"
    UNINSTALL = "uninstall"
    CAROOT = "caroot"
    ISSUE_FROM_SUBJECTS = "issue_from_subjects"
    ISSUE_FROM_CSR = "issue_from_csr"


class State(enum.Enum):
    """States of the orchestrator."""

    IDLE = "idle"
    INSTALLING = "installing"
    UNINSTALLING = "uninstalling"
    GENERATING = "generating"
