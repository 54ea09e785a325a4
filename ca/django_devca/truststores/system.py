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

"""Trust store backend for the operating system's root store.

The implementation differs for every platform, the matching helper is selected at runtime.
"""

import abc
import logging
import os
import re
import ssl
import sys
import typing
from pathlib import Path
from typing import NamedTuple, Optional

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding

from django_devca import constants
from django_devca.truststores.base import TrustStore

if typing.TYPE_CHECKING:
    from django_devca.authority import CertificateAuthority

log = logging.getLogger(__name__)

PEM_CERTIFICATE_RE = re.compile(rb"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", flags=re.S)


class LinuxAnchor(NamedTuple):
    """Location of trust anchors on a Linux distribution."""

    directory: Path
    filename: str
    refresh_command: tuple[str, ...]


def find_certificate(path: Path, certificate: x509.Certificate) -> bool:
    """Return ``True`` if the PEM file at `path` contains `certificate`.

    Unreadable files and unparsable PEM blocks are skipped.
    """
    try:
        data = path.read_bytes()
    except OSError:
        return False

    for match in PEM_CERTIFICATE_RE.finditer(data):
        try:
            loaded = x509.load_pem_x509_certificate(match.group(0))
        except ValueError:
            continue
        if loaded == certificate:
            return True
    return False


class SystemTrustHelper(metaclass=abc.ABCMeta):
    """Platform-specific implementation of the system trust store."""

    def __init__(self, store: "SystemTrustStore") -> None:
        self.store = store

    def is_supported(self) -> bool:
        """Return ``True`` if the system trust store can be managed on this system."""
        return True

    def log_unsupported(self, ca: "CertificateAuthority") -> None:
        """Log a message that the system trust store cannot be managed."""
        log.warning("Installing to the system store is not yet supported on this platform.")
        log.warning('You can also manually install the root certificate at "%s".', ca.cert_path)

    @abc.abstractmethod
    def check(self, ca: "CertificateAuthority") -> bool:
        """Return ``True`` if `ca` is trusted by the system."""

    @abc.abstractmethod
    def install(self, ca: "CertificateAuthority") -> None:
        """Install `ca` into the system trust store."""

    @abc.abstractmethod
    def uninstall(self, ca: "CertificateAuthority") -> None:
        """Remove `ca` from the system trust store."""


class LinuxSystemTrust(SystemTrustHelper):
    """System trust store on Linux, managed through the distribution's anchor directory."""

    def get_anchor(self) -> Optional[LinuxAnchor]:
        """Get the first known anchor directory present on this system."""
        for directory, filename, refresh_command in constants.LINUX_SYSTEM_TRUST:
            if os.path.isdir(directory):
                return LinuxAnchor(Path(directory), filename, refresh_command)
        return None

    def get_trust_path(self, anchor: LinuxAnchor, ca: "CertificateAuthority") -> Path:
        """Get the path where the CA certificate is installed to."""
        return anchor.directory / anchor.filename.format(name=ca.unique_name.replace(" ", "_"))

    def is_supported(self) -> bool:
        return self.get_anchor() is not None

    def log_unsupported(self, ca: "CertificateAuthority") -> None:
        log.warning(
            "Installing to the system store is not yet supported on this Linux but %s will still work.",
            constants.NSS_BROWSERS,
        )
        log.warning('You can also manually install the root certificate at "%s".', ca.cert_path)

    def check(self, ca: "CertificateAuthority") -> bool:
        paths = ssl.get_default_verify_paths()
        if paths.cafile and find_certificate(Path(paths.cafile), ca.certificate):
            return True
        if paths.capath and os.path.isdir(paths.capath):
            for path in sorted(Path(paths.capath).iterdir()):
                if path.is_file() and find_certificate(path, ca.certificate):
                    return True
        return False

    def install(self, ca: "CertificateAuthority") -> None:
        anchor = self.get_anchor()
        if anchor is None:  # pragma: no cover  # checked by the store before
            return
        self.store.run_checked(["tee", str(self.get_trust_path(anchor, ca))], input=ca.pem, privileged=True)
        self.store.run_checked(anchor.refresh_command, privileged=True)

    def uninstall(self, ca: "CertificateAuthority") -> None:
        anchor = self.get_anchor()
        if anchor is None:  # pragma: no cover  # checked by the store before
            return
        self.store.run_checked(["rm", "-f", str(self.get_trust_path(anchor, ca))], privileged=True)
        self.store.run_checked(anchor.refresh_command, privileged=True)


class MacOSSystemTrust(SystemTrustHelper):
    """System trust store on macOS, managed with :command:`security`."""

    def check(self, ca: "CertificateAuthority") -> bool:
        proc = self.store.run(["security", "verify-cert", "-c", str(ca.cert_path)])
        return proc.returncode == 0

    def install(self, ca: "CertificateAuthority") -> None:
        self.store.run_checked(
            ["security", "add-trusted-cert", "-d", "-k", constants.MACOS_SYSTEM_KEYCHAIN, str(ca.cert_path)],
            privileged=True,
        )

    def uninstall(self, ca: "CertificateAuthority") -> None:
        self.store.run_checked(["security", "remove-trusted-cert", "-d", str(ca.cert_path)], privileged=True)


class WindowsSystemTrust(SystemTrustHelper):
    """System trust store on Windows, managed with :command:`certutil`."""

    def check(self, ca: "CertificateAuthority") -> bool:
        der = ca.certificate.public_bytes(Encoding.DER)
        for cert, encoding, _trust in ssl.enum_certificates("ROOT"):  # type: ignore[attr-defined]
            if encoding == "x509_asn" and cert == der:
                return True
        return False

    def install(self, ca: "CertificateAuthority") -> None:
        self.store.run_checked(["certutil", "-addstore", "-f", "ROOT", str(ca.cert_path)])

    def uninstall(self, ca: "CertificateAuthority") -> None:
        self.store.run_checked(["certutil", "-delstore", "ROOT", format(ca.certificate.serial_number, "x")])


class SystemTrustStore(TrustStore):
    """The root store of the operating system."""

    name = "system"
    title = "the system trust store"

    def get_helper(self) -> Optional[SystemTrustHelper]:
        """Get the helper for the platform this process is running on."""
        if sys.platform == "darwin":
            return MacOSSystemTrust(self)
        if sys.platform == "win32":
            return WindowsSystemTrust(self)
        if sys.platform.startswith("linux"):
            return LinuxSystemTrust(self)
        return None

    def is_available(self) -> bool:
        helper = self.get_helper()
        return helper is not None and helper.is_supported()

    def log_unavailable(self, ca: "CertificateAuthority") -> None:
        helper = self.get_helper()
        if helper is None:
            log.warning("Installing to the system store is not supported on %s.", sys.platform)
        else:
            helper.log_unsupported(ca)

    def check(self, ca: "CertificateAuthority") -> bool:
        helper = self.get_helper()
        if helper is None or not helper.is_supported():
            return False
        return helper.check(ca)

    def install(self, ca: "CertificateAuthority") -> bool:
        helper = self.get_helper()
        if helper is None or not helper.is_supported():
            return False
        helper.install(ca)
        return True

    def uninstall(self, ca: "CertificateAuthority") -> bool:
        helper = self.get_helper()
        if helper is None or not helper.is_supported():
            return False
        helper.uninstall(ca)
        return True
