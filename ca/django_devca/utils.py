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

"""Reusable utility functions used throughout django-devca."""

import binascii
import calendar
import getpass
import os
import socket
from datetime import datetime, timezone as tz
from pathlib import Path
from typing import Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from django_devca import constants
from django_devca.typehints import KeyType, LeafPrivateKeyTypes


def add_colons(value: str, pad: str = "0") -> str:
    """Add colons after every second digit.

    >>> add_colons('teststring')
    'te:st:st:ri:ng'
    """
    if len(value) % 2 == 1 and pad:
        value = f"{pad}{value}"

    return ":".join([value[i : i + 2] for i in range(0, len(value), 2)])


def bytes_to_hex(value: bytes) -> str:
    """Convert a bytes array to hex.

    >>> bytes_to_hex(b'test')
    '74:65:73:74'
    """
    return add_colons(binascii.hexlify(value).upper().decode("utf-8"))


def add_years(value: datetime, years: int, months: int = 0) -> datetime:
    """Add the given number of years and months to a datetime, clamping the day to the end of the month.

    >>> add_years(datetime(2020, 2, 29), 1)
    datetime.datetime(2021, 2, 28, 0, 0)
    >>> add_years(datetime(2020, 11, 30), 2, 3)
    datetime.datetime(2023, 2, 28, 0, 0)
    """
    month_index = value.month - 1 + months
    year = value.year + years + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def get_user_and_hostname() -> str:
    """Get a string identifying the current user on the current host, e.g. ``"user@example.com"``."""
    try:
        username = getpass.getuser()
    except (KeyError, OSError):  # no user database entry and no environment variable
        username = ""
    hostname = socket.gethostname()
    return f"{username}@{hostname}"


def get_cert_builder(not_after: datetime) -> x509.CertificateBuilder:
    """Get a basic X.509 certificate builder object valid from now until `not_after`.

    The serial number is randomly generated using :py:func:`~cg:cryptography.x509.random_serial_number`.

    Parameters
    ----------
    not_after : datetime
        When this certificate is supposed to expire, as a timezone-aware datetime object.
    """
    now = datetime.now(tz.utc).replace(microsecond=0)

    if not_after.tzinfo is None:
        raise ValueError("not_after must not be a naive datetime")
    if not_after <= now:
        raise ValueError("not_after must be in the future")

    builder = x509.CertificateBuilder()
    builder = builder.not_valid_before(now)
    builder = builder.not_valid_after(not_after.replace(microsecond=0))
    builder = builder.serial_number(x509.random_serial_number())

    return builder


def generate_private_key(key_type: KeyType, key_size: int, elliptic_curve: str) -> LeafPrivateKeyTypes:
    """Generate a private key for a leaf certificate.

    `key_size` is only used for RSA keys, `elliptic_curve` only for EC keys.
    """
    if key_type == "RSA":
        return rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    if key_type == "EC":
        return ec.generate_private_key(constants.ELLIPTIC_CURVE_TYPES[elliptic_curve]())
    raise ValueError(f"{key_type}: Unknown key type.")


def fingerprint(certificate: x509.Certificate, algorithm: hashes.HashAlgorithm) -> str:
    """Get the fingerprint of a certificate as upper-case hex string with colons."""
    return bytes_to_hex(certificate.fingerprint(algorithm))


def write_file(path: Union[str, "os.PathLike[str]"], data: bytes, mode: int = 0o644) -> None:
    """Write `data` to `path`, creating the file with the given permissions.

    Permissions of an already existing file are also updated.
    """
    path = Path(path)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as stream:
        stream.write(data)
    os.chmod(path, mode)
