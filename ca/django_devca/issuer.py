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

"""Issue leaf certificates signed by the local CA."""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone as tz
from pathlib import Path
from typing import NamedTuple, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.types import CertificatePublicKeyTypes
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from django_devca import constants
from django_devca.authority import CertificateAuthority
from django_devca.conf import model_settings
from django_devca.exceptions import CSRError
from django_devca.pydantic import CSRRequest, SubjectRequest
from django_devca.subjects import classify_subjects
from django_devca.typehints import LeafPrivateKeyTypes
from django_devca.utils import (
    add_years,
    generate_private_key,
    get_cert_builder,
    get_user_and_hostname,
    write_file,
)

log = logging.getLogger(__name__)

SECOND_LEVEL_WILDCARD_RE = re.compile(r"^\*\.[0-9a-z_-]+$", flags=re.I)


class OutputPaths(NamedTuple):
    """Paths where an issued certificate is written to."""

    cert: Optional[Path]
    key: Optional[Path]
    p12: Optional[Path]


class IssuedCertificate(NamedTuple):
    """A certificate issued by :py:class:`~django_devca.issuer.CertificateIssuer`."""

    certificate: x509.Certificate
    private_key: Optional[LeafPrivateKeyTypes]
    paths: OutputPaths


def get_default_filename(names: Sequence[str], client: bool = False) -> str:
    """Get the default filename (without extension) for a certificate for the given names.

    >>> get_default_filename(["example.org"])
    'example.org'
    >>> get_default_filename(["example.com", "myapp.dev", "127.0.0.1"])
    'example.com+2'
    >>> get_default_filename(["*.example.it"], client=True)
    '_wildcard.example.it-client'
    >>> get_default_filename(["::1"])
    '__1'
    """
    name = names[0].replace(":", "_").replace("*", "_wildcard")
    if len(names) > 1:
        name += f"+{len(names) - 1}"
    if client:
        name += "-client"
    return name


def get_san_values(names: Iterable[x509.GeneralName]) -> list[str]:
    """Get the values of the given general names as strings (for display and filenames)."""
    return [str(name.value) for name in names]


class CertificateIssuer:
    """Issue certificates signed by the given certificate authority."""

    def __init__(self, ca: CertificateAuthority) -> None:
        self.ca = ca

    def get_not_after(self, now: datetime) -> datetime:
        """Get the expiry date of a certificate issued at `now`."""
        if model_settings.DEVCA_CERT_VALIDITY is None:
            return add_years(now, 2, 3)
        return now + model_settings.DEVCA_CERT_VALIDITY

    def get_subject(self) -> x509.Name:
        """Get the subject used for all issued certificates."""
        return x509.Name(
            [
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, constants.CERT_ORGANIZATION),
                x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, get_user_and_hostname()),
            ]
        )

    def get_key_usage(self, public_key: CertificatePublicKeyTypes) -> x509.KeyUsage:
        """Get the KeyUsage extension for the given public key."""
        return x509.KeyUsage(
            digital_signature=True,
            content_commitment=False,
            key_encipherment=isinstance(public_key, rsa.RSAPublicKey),
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=False,
            crl_sign=False,
            encipher_only=False,
            decipher_only=False,
        )

    def get_extended_key_usage(
        self, subjects: Iterable[x509.GeneralName], client: bool = False
    ) -> x509.ExtendedKeyUsage:
        """Get the ExtendedKeyUsage extension for the given subjects."""
        usages = [ExtendedKeyUsageOID.SERVER_AUTH]
        has_email = any(isinstance(subject, x509.RFC822Name) for subject in subjects)
        if client or has_email:
            usages.append(ExtendedKeyUsageOID.CLIENT_AUTH)
        if has_email:
            usages.append(ExtendedKeyUsageOID.EMAIL_PROTECTION)
        return x509.ExtendedKeyUsage(usages)

    def sign(
        self,
        public_key: CertificatePublicKeyTypes,
        subjects: Sequence[x509.GeneralName],
        client: bool = False,
    ) -> x509.Certificate:
        """Sign a certificate for `public_key` valid for the given subjects."""
        now = datetime.now(tz.utc)
        builder = get_cert_builder(self.get_not_after(now))
        builder = builder.subject_name(self.get_subject())
        builder = builder.issuer_name(self.ca.certificate.subject)
        builder = builder.public_key(public_key)  # type: ignore[arg-type]
        builder = builder.add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        builder = builder.add_extension(self.get_key_usage(public_key), critical=True)
        builder = builder.add_extension(self.get_extended_key_usage(subjects, client), critical=False)
        builder = builder.add_extension(x509.SubjectAlternativeName(subjects), critical=False)
        ca_public_key = self.ca.certificate.public_key()
        aki = x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_public_key)  # type: ignore[arg-type]
        builder = builder.add_extension(aki, critical=False)
        return builder.sign(private_key=self.ca.private_key, algorithm=hashes.SHA256())

    def _log_names(self, names: Sequence[str]) -> None:
        log.info("Created a new certificate valid for the following names:")
        for name in names:
            log.info(' - "%s"', name)

        for name in names:
            if SECOND_LEVEL_WILDCARD_RE.match(name):
                log.warning('Warning: many browsers don\'t support second-level wildcards like "%s"', name)

        for name in names:
            if name.startswith("*."):
                log.info(
                    "Reminder: X.509 wildcards only go one level deep, so this won't match a.b.%s", name[2:]
                )
                break

    def _log_expiry(self, certificate: x509.Certificate) -> None:
        expires = certificate.not_valid_after_utc
        log.info("It will expire on %s", f"{expires.day} {expires:%B %Y}")

    def get_output_paths(self, request: SubjectRequest, names: Sequence[str]) -> OutputPaths:
        """Get the paths where the certificate for `request` should be written to."""
        default_name = get_default_filename(names, client=request.client)
        if request.pkcs12:
            return OutputPaths(cert=None, key=None, p12=request.p12_file or Path(f"{default_name}.p12"))

        cert_path = request.cert_file or Path(f"{default_name}.pem")
        key_path = request.key_file or Path(f"{default_name}-key.pem")
        return OutputPaths(cert=cert_path, key=key_path, p12=None)

    def write_pkcs12(
        self, path: Path, private_key: LeafPrivateKeyTypes, certificate: x509.Certificate
    ) -> None:
        """Write a PKCS #12 bundle with the legacy encryption still expected by many applications."""
        encryption = (
            PrivateFormat.PKCS12.encryption_builder()
            .kdf_rounds(50000)
            .key_cert_algorithm(pkcs12.PBES.PBESv1SHA1And3KeyTripleDESCBC)
            .hmac_hash(hashes.SHA1())
            .build(constants.PKCS12_PASSWORD)
        )
        data = pkcs12.serialize_key_and_certificates(
            name=None,
            key=private_key,
            cert=certificate,
            cas=[self.ca.certificate],
            encryption_algorithm=encryption,
        )
        write_file(path, data)

    def issue_from_subjects(self, request: SubjectRequest) -> IssuedCertificate:
        """Issue a certificate and a new private key for the names in the request.

        Names are classified before any file is written, hostnames are converted to their IDNA encoded form.
        """
        names = list(request.names)
        subjects = classify_subjects(names)
        paths = self.get_output_paths(request, names)

        private_key = generate_private_key(
            request.key_type, model_settings.DEVCA_CERT_KEY_SIZE, model_settings.DEVCA_ELLIPTIC_CURVE
        )
        certificate = self.sign(private_key.public_key(), subjects, client=request.client)

        cert_pem = certificate.public_bytes(Encoding.PEM)
        key_pem = private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())

        if paths.p12 is not None:
            self.write_pkcs12(paths.p12, private_key, certificate)
        elif paths.cert == paths.key:
            write_file(paths.cert, key_pem + cert_pem, mode=0o600)  # type: ignore[arg-type]
        else:
            write_file(paths.cert, cert_pem)  # type: ignore[arg-type]
            write_file(paths.key, key_pem, mode=0o600)  # type: ignore[arg-type]

        self._log_names(names)
        if paths.p12 is not None:
            log.info('The PKCS#12 bundle is at "%s"', paths.p12)
            log.info(
                'The legacy PKCS#12 encryption password is the often hardcoded default "%s"',
                constants.PKCS12_PASSWORD.decode("ascii"),
            )
        elif paths.cert == paths.key:
            log.info('The certificate and key are at "%s"', paths.cert)
        else:
            log.info('The certificate is at "%s" and the key at "%s"', paths.cert, paths.key)
        self._log_expiry(certificate)

        return IssuedCertificate(certificate=certificate, private_key=private_key, paths=paths)

    def load_csr(self, data: bytes) -> x509.CertificateSigningRequest:
        """Load a PEM or DER encoded CSR and verify its signature."""
        try:
            if data.lstrip().startswith(b"-----BEGIN"):
                csr = x509.load_pem_x509_csr(data)
            else:
                csr = x509.load_der_x509_csr(data)
        except ValueError as ex:
            raise CSRError(f"failed to parse the CSR: {ex}") from ex

        if not csr.is_signature_valid:
            raise CSRError("invalid CSR signature")
        return csr

    def issue_from_csr(self, request: CSRRequest) -> IssuedCertificate:
        """Issue a certificate for an externally generated CSR.

        Only the public key and the Subject Alternative Name extension are taken from the CSR. No private key
        is written, as it stays with whoever created the CSR.
        """
        csr = self.load_csr(request.csr)

        try:
            san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
            subjects: list[x509.GeneralName] = list(san)
        except x509.ExtensionNotFound:
            subjects = []

        # Order used for the default filename: DNS names, email addresses, IP addresses and URIs.
        names = get_san_values(
            [subject for subject in subjects if isinstance(subject, x509.DNSName)]
            + [subject for subject in subjects if isinstance(subject, x509.RFC822Name)]
            + [subject for subject in subjects if isinstance(subject, x509.IPAddress)]
            + [subject for subject in subjects if isinstance(subject, x509.UniformResourceIdentifier)]
        )

        if request.cert_file is not None:
            cert_path = request.cert_file
        elif names:
            cert_path = Path(f"{get_default_filename(names)}.pem")
        else:
            raise CSRError("CSR does not request any subject alternative names, use --cert-file")
        if not subjects:
            raise CSRError("CSR does not request any subject alternative names")

        certificate = self.sign(csr.public_key(), subjects)
        write_file(cert_path, certificate.public_bytes(Encoding.PEM))

        self._log_names(names)
        log.info('The certificate is at "%s"', cert_path)
        self._log_expiry(certificate)

        return IssuedCertificate(
            certificate=certificate, private_key=None, paths=OutputPaths(cert=cert_path, key=None, p12=None)
        )
