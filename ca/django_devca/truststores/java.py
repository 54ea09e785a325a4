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

"""Trust store backend for the ``cacerts`` keystore of the Java installation in ``JAVA_HOME``."""

import logging
import os
import sys
import typing
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives import hashes

from django_devca import constants
from django_devca.exceptions import TrustStoreCommandError
from django_devca.truststores.base import TrustStore

if typing.TYPE_CHECKING:
    from django_devca.authority import CertificateAuthority

log = logging.getLogger(__name__)


class JavaTrustStore(TrustStore):
    """Trust store for Java, managed with :command:`keytool`."""

    name = "java"
    title = "Java's trust store"
    tool = "keytool"

    def get_java_home(self) -> Optional[Path]:
        """Get the Java installation from the ``JAVA_HOME`` environment variable."""
        if java_home := os.environ.get("JAVA_HOME"):
            return Path(java_home)
        return None

    def get_keytool(self) -> Optional[Path]:
        """Get the path to :command:`keytool`, if installed."""
        java_home = self.get_java_home()
        if java_home is None:
            return None
        keytool = java_home / "bin" / ("keytool.exe" if sys.platform == "win32" else "keytool")
        if keytool.exists():
            return keytool
        return None

    def get_cacerts(self) -> Optional[Path]:
        """Get the path to the ``cacerts`` keystore."""
        java_home = self.get_java_home()
        if java_home is None:
            return None

        # Java 8 and earlier ship a separate JRE
        jre_cacerts = java_home / "jre" / "lib" / "security" / "cacerts"
        if jre_cacerts.exists():
            return jre_cacerts
        return java_home / "lib" / "security" / "cacerts"

    def is_available(self) -> bool:
        return self.get_java_home() is not None

    def has_tool(self) -> bool:
        return self.get_keytool() is not None

    def run_keytool(self, command: Sequence[str]) -> tuple[int, bytes]:
        """Run :command:`keytool`, retrying with elevated privileges if the keystore is not writable."""
        proc = self.run(command)
        if (
            proc.returncode != 0
            and b"java.io.FileNotFoundException" in proc.stdout
            and sys.platform != "win32"
        ):
            log.debug("Java keystore is not writable, retrying with elevated privileges.")
            proc = self.run(command, privileged=True)
        return proc.returncode, proc.stdout

    def check(self, ca: "CertificateAuthority") -> bool:
        keytool = self.get_keytool()
        cacerts = self.get_cacerts()
        if keytool is None or cacerts is None:
            return False

        command = [
            str(keytool),
            "-list",
            "-keystore",
            str(cacerts),
            "-storepass",
            constants.JAVA_STORE_PASSWORD,
        ]
        proc = self.run_checked(command)

        # Fingerprints are printed with colons, and either as SHA-1 or SHA-256 depending on the Java version.
        output = proc.stdout.decode("utf-8", errors="replace").upper()
        return any(ca.fingerprint(algorithm) in output for algorithm in (hashes.SHA1(), hashes.SHA256()))

    def install(self, ca: "CertificateAuthority") -> bool:
        keytool = self.get_keytool()
        cacerts = self.get_cacerts()
        if keytool is None or cacerts is None:
            return False

        command = [
            str(keytool),
            "-importcert",
            "-noprompt",
            "-keystore",
            str(cacerts),
            "-storepass",
            constants.JAVA_STORE_PASSWORD,
            "-file",
            str(ca.cert_path),
            "-alias",
            ca.unique_name,
        ]
        returncode, output = self.run_keytool(command)
        if returncode != 0:
            raise TrustStoreCommandError(command, returncode, output)
        return True

    def uninstall(self, ca: "CertificateAuthority") -> bool:
        keytool = self.get_keytool()
        cacerts = self.get_cacerts()
        if keytool is None or cacerts is None:
            return False

        command = [
            str(keytool),
            "-delete",
            "-alias",
            ca.unique_name,
            "-keystore",
            str(cacerts),
            "-storepass",
            constants.JAVA_STORE_PASSWORD,
        ]
        returncode, output = self.run_keytool(command)
        if returncode != 0 and b"does not exist" in output:
            log.debug("%s: CA is not present in the keystore.", cacerts)
        elif returncode != 0:
            raise TrustStoreCommandError(command, returncode, output)
        return True
