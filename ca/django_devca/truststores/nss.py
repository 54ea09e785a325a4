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

"""Trust store backend for NSS security databases, as used by Firefox and Chrome/Chromium."""

import logging
import os
import shutil
import sys
import typing
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from django_devca import constants
from django_devca.exceptions import TrustStoreCommandError
from django_devca.truststores.base import TrustStore
from django_devca.utils import fingerprint

if typing.TYPE_CHECKING:
    from django_devca.authority import CertificateAuthority

log = logging.getLogger(__name__)


class NSSTrustStore(TrustStore):
    """Trust store for NSS security databases.

    The CA is added to every NSS database that is found, that is the shared databases used by Chrome/Chromium
    and every Firefox profile.
    """

    name = "nss"
    title = f"the {constants.NSS_BROWSERS} trust store"
    tool = "certutil"
    install_note = " (requires browser restart)"

    #: Shared NSS databases, relative to the home directory of the user.
    user_databases: tuple[str, ...] = (".pki/nssdb", "snap/chromium/current/.pki/nssdb")

    #: System-wide NSS databases.
    system_databases: tuple[str, ...] = ("/etc/pki/nssdb",)

    #: Glob patterns for Firefox profile directories, relative to the home directory of the user.
    firefox_profiles: tuple[str, ...] = (
        ".mozilla/firefox/*",
        "snap/firefox/common/.mozilla/firefox/*",
        "Library/Application Support/Firefox/Profiles/*",
    )

    #: Paths that indicate that Firefox is installed.
    firefox_paths: tuple[str, ...] = (
        "/usr/bin/firefox",
        "/usr/bin/firefox-nightly",
        "/usr/bin/firefox-developer-edition",
        "/snap/firefox",
        "/Applications/Firefox.app",
        "/Applications/FirefoxDeveloperEdition.app",
        "/Applications/Firefox Developer Edition.app",
        "/Applications/Firefox Nightly.app",
    )

    def get_database_candidates(self) -> list[Path]:
        """Get all directories that may contain an NSS database."""
        home = Path.home()
        candidates = [home / path for path in self.user_databases]
        candidates += [Path(path) for path in self.system_databases]
        for pattern in self.firefox_profiles:
            candidates += sorted(home.glob(pattern))
        return candidates

    def get_databases(self) -> list[str]:
        """Get the NSS databases that are present, in the form expected by :command:`certutil -d`."""
        databases = []
        for path in self.get_database_candidates():
            if not path.is_dir():
                continue
            if (path / "cert9.db").exists():
                databases.append(f"sql:{path}")
            elif (path / "cert8.db").exists():
                databases.append(f"dbm:{path}")
        return databases

    def get_certutil(self) -> Optional[str]:
        """Get the path to :command:`certutil`, if installed."""
        if sys.platform == "darwin" and shutil.which("brew"):
            proc = self.run(["brew", "--prefix", "nss"])
            if proc.returncode == 0:
                path = Path(proc.stdout.decode("utf-8").strip()) / "bin" / "certutil"
                if path.exists():
                    return str(path)
        return shutil.which("certutil")

    def is_available(self) -> bool:
        if sys.platform == "win32":
            return False
        home = Path.home()
        if any((home / path).exists() for path in self.user_databases):
            return True
        return any(os.path.exists(path) for path in self.system_databases + self.firefox_paths)

    def has_tool(self) -> bool:
        return self.get_certutil() is not None

    def get_install_hint(self) -> Optional[str]:
        if sys.platform == "darwin":
            return "brew install nss"
        if shutil.which("apt"):
            return "apt install libnss3-tools"
        if shutil.which("yum"):
            return "yum install nss-tools"
        if shutil.which("zypper"):
            return "zypper install mozilla-nss-tools"
        return None

    def run_certutil(self, command: Sequence[str]) -> None:
        """Run a modifying :command:`certutil` command, retrying with elevated privileges if required."""
        proc = self.run(command)
        if proc.returncode != 0 and b"SEC_ERROR_READ_ONLY" in proc.stdout:
            log.debug("NSS database is read-only, retrying with elevated privileges.")
            self.run_checked(command, privileged=True)
        elif proc.returncode != 0:
            raise TrustStoreCommandError(proc.args, proc.returncode, proc.stdout)

    def database_has_ca(self, certutil: str, database: str, ca: "CertificateAuthority") -> bool:
        """Return ``True`` if `ca` is present in the given NSS database."""
        proc = self.run([certutil, "-L", "-a", "-d", database, "-n", ca.unique_name])
        if proc.returncode != 0:
            return False
        try:
            certificates = x509.load_pem_x509_certificates(proc.stdout)
        except ValueError:
            return False
        expected = ca.fingerprint(hashes.SHA256())
        return any(fingerprint(certificate, hashes.SHA256()) == expected for certificate in certificates)

    def check(self, ca: "CertificateAuthority") -> bool:
        certutil = self.get_certutil()
        if certutil is None:
            return False
        databases = self.get_databases()
        if not databases:
            return False
        return all(self.database_has_ca(certutil, database, ca) for database in databases)

    def install(self, ca: "CertificateAuthority") -> bool:
        certutil = self.get_certutil()
        if certutil is None or not self.is_available():
            return False

        databases = self.get_databases()
        if not databases:
            log.error("No %s security databases found.", constants.NSS_BROWSERS)
            log.error(
                "Note that if you never started %s, you need to do that at least once.",
                constants.NSS_BROWSERS,
            )
            return False

        for database in databases:
            log.debug("Adding CA to NSS database %s.", database)
            self.run_certutil(
                [certutil, "-A", "-d", database, "-t", "C,,", "-n", ca.unique_name, "-i", str(ca.cert_path)]
            )

        if not self.check(ca):
            log.error("Installing in %s failed.", self.title)
            return False
        return True

    def uninstall(self, ca: "CertificateAuthority") -> bool:
        certutil = self.get_certutil()
        if certutil is None or not self.is_available():
            return False

        databases = self.get_databases()
        if not databases:
            return False

        for database in databases:
            if self.database_has_ca(certutil, database, ca):
                log.debug("Removing CA from NSS database %s.", database)
                self.run_certutil([certutil, "-D", "-d", database, "-n", ca.unique_name])
        return True
