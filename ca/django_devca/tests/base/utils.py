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

"""Utility functions used in testing."""

import subprocess
from collections.abc import Sequence
from io import StringIO
from typing import Any, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from django.core.management import call_command


def cmd(
    *args: Any, stdout: Optional[StringIO] = None, stderr: Optional[StringIO] = None, **kwargs: Any
) -> tuple[str, str]:
    """Call to a manage.py command using call_command."""
    if stdout is None:
        stdout = StringIO()
    if stderr is None:
        stderr = StringIO()
    call_command(*args, stdout=stdout, stderr=stderr, **kwargs)
    return stdout.getvalue(), stderr.getvalue()


def dns(name: str) -> x509.DNSName:  # just a shortcut
    """Shortcut to get a :py:class:`cg:cryptography.x509.DNSName`."""
    return x509.DNSName(name)


def get_san(certificate: x509.Certificate) -> list[x509.GeneralName]:
    """Get the Subject Alternative Names of the given certificate."""
    return list(certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName).value)


def create_csr(
    *names: x509.GeneralName, common_name: Optional[str] = None
) -> tuple[ec.EllipticCurvePrivateKey, x509.CertificateSigningRequest]:
    """Create a CSR with the given Subject Alternative Names."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    attributes = []
    if common_name is not None:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))

    builder = x509.CertificateSigningRequestBuilder().subject_name(x509.Name(attributes))
    if names:
        builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)
    return private_key, builder.sign(private_key, hashes.SHA256())


def completed_process(
    args: Sequence[str], returncode: int = 0, stdout: bytes = b""
) -> "subprocess.CompletedProcess[bytes]":
    """Get a completed process as returned by :py:func:`subprocess.run`."""
    return subprocess.CompletedProcess(list(args), returncode, stdout=stdout, stderr=None)
