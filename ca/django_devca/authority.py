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

"""The local certificate authority that signs all certificates."""

import logging
from datetime import datetime, timezone as tz
from pathlib import Path
from typing import Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes
from cryptography.x509.oid import NameOID

from django_devca import constants
from django_devca.conf import model_settings
from django_devca.exceptions import ConfigurationError
from django_devca.utils import add_years, fingerprint, get_cert_builder, get_user_and_hostname, write_file

log = logging.getLogger(__name__)


class CertificateAuthority:
    """A root certificate authority stored as a certificate/private key pair in a directory.

    Use :py:meth:`load_or_create` to get an instance, the constructor does not touch the filesystem.
    """

    def __init__(
        self, path: Path, certificate: x509.Certificate, private_key: CertificateIssuerPrivateKeyTypes
    ) -> None:
        self.path = path
        self.certificate = certificate
        self.private_key = private_key

    def __repr__(self) -> str:
        return f"<CertificateAuthority: {self.path}>"

    @staticmethod
    def get_cert_path(root: Path) -> Path:
        """Get the path of the CA certificate in the given CAROOT."""
        return root / constants.ROOT_CERT_FILENAME

    @staticmethod
    def get_key_path(root: Path) -> Path:
        """Get the path of the CA private key in the given CAROOT."""
        return root / constants.ROOT_KEY_FILENAME

    @property
    def cert_path(self) -> Path:
        """Path to the CA certificate."""
        return self.get_cert_path(self.path)

    @property
    def key_path(self) -> Path:
        """Path to the private key of the CA."""
        return self.get_key_path(self.path)

    @property
    def unique_name(self) -> str:
        """A name unique to this CA, used as nickname or alias in trust stores."""
        return f"{constants.CA_ORGANIZATION} {self.certificate.serial_number}"

    @property
    def pem(self) -> bytes:
        """The CA certificate as PEM."""
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def fingerprint(self, algorithm: hashes.HashAlgorithm) -> str:
        """Get the fingerprint of the CA certificate, e.g. ``"AB:CD:..."``."""
        return fingerprint(self.certificate, algorithm)

    @classmethod
    def load(cls, root: Path) -> "CertificateAuthority":
        """Load an existing CA from the given directory."""
        cert_path = cls.get_cert_path(root)
        key_path = cls.get_key_path(root)

        try:
            certificate = x509.load_pem_x509_certificate(cert_path.read_bytes())
        except ValueError as ex:
            raise ConfigurationError(f"{cert_path}: failed to parse the CA certificate: {ex}") from ex

        try:
            private_key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
        except (ValueError, TypeError) as ex:
            raise ConfigurationError(f"{key_path}: failed to parse the CA key: {ex}") from ex

        if not isinstance(private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
            raise ConfigurationError(f"{key_path}: Unsupported private key type.")

        return cls(root, certificate, private_key)

    @classmethod
    def create(cls, root: Path) -> "CertificateAuthority":
        """Create a new CA in the given directory.

        The private key of the CA is always an RSA key, regardless of the key type used for certificates.
        """
        user_and_hostname = get_user_and_hostname()
        key_size = model_settings.DEVCA_CA_KEY_SIZE
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        public_key = private_key.public_key()

        now = datetime.now(tz.utc)
        if model_settings.DEVCA_CA_VALIDITY is None:
            not_after = add_years(now, 10)
        else:
            not_after = now + model_settings.DEVCA_CA_VALIDITY

        subject = x509.Name(
            [
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, constants.CA_ORGANIZATION),
                x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, user_and_hostname),
                x509.NameAttribute(NameOID.COMMON_NAME, f"django-devca {user_and_hostname}"[:64]),
            ]
        )

        builder = get_cert_builder(not_after)
        builder = builder.subject_name(subject).issuer_name(subject).public_key(public_key)
        builder = builder.add_extension(x509.BasicConstraints(ca=True, path_length=0), critical=True)
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        builder = builder.add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        certificate = builder.sign(private_key=private_key, algorithm=hashes.SHA256())

        key_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

        root.mkdir(mode=0o755, parents=True, exist_ok=True)
        write_file(cls.get_key_path(root), key_pem, mode=0o400)
        write_file(cls.get_cert_path(root), certificate.public_bytes(serialization.Encoding.PEM))

        log.info("Created a new local CA in %s", root)
        return cls(root, certificate, private_key)

    @classmethod
    def load_or_create(cls, root: Union[str, Path]) -> "CertificateAuthority":
        """Load the CA from `root`, or create a new one if neither certificate nor private key exists.

        Raises
        ------
        ConfigurationError
            If only one of the two files exists.
        """
        root = Path(root)
        cert_exists = cls.get_cert_path(root).exists()
        key_exists = cls.get_key_path(root).exists()

        if cert_exists and key_exists:
            return cls.load(root)
        if cert_exists:
            raise ConfigurationError(
                f"{root}: the CA key ({constants.ROOT_KEY_FILENAME}) is missing, but the CA certificate "
                f"({constants.ROOT_CERT_FILENAME}) exists. Remove the certificate to create a new CA."
            )
        if key_exists:
            raise ConfigurationError(
                f"{root}: the CA certificate ({constants.ROOT_CERT_FILENAME}) is missing, but the CA key "
                f"({constants.ROOT_KEY_FILENAME}) exists. Remove the key to create a new CA."
            )
        return cls.create(root)
