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


"""Test :py:mod:`django_devca.utils`."""

from datetime import datetime, timedelta, timezone as tz
from pathlib import Path
from unittest import mock

from cryptography.hazmat.primitives.asymmetric import ec, rsa

import pytest
from freezegun import freeze_time

from django_devca.tests.base.assertions import assert_mode
from django_devca.tests.base.doctest import doctest_module
from django_devca.utils import (
    add_years,
    generate_private_key,
    get_cert_builder,
    get_user_and_hostname,
    write_file,
)


def test_doctests() -> None:
    """Load doctests."""
    failures, _tests = doctest_module("django_devca.utils")
    assert failures == 0, f"{failures} doctests failed, see above for output."


@pytest.mark.parametrize(
    "value,years,months,expected",
    (
        (datetime(2024, 1, 15), 2, 3, datetime(2026, 4, 15)),
        (datetime(2024, 11, 30), 0, 3, datetime(2025, 2, 28)),
        (datetime(2024, 2, 29), 10, 0, datetime(2034, 2, 28)),
        (datetime(2024, 12, 31), 1, 12, datetime(2026, 12, 31)),
    ),
)
def test_add_years(value: datetime, years: int, months: int, expected: datetime) -> None:
    """Test adding years and months."""
    assert add_years(value, years, months) == expected


@freeze_time("2024-01-15 12:00:00.123456")
def test_get_cert_builder() -> None:
    """Test getting a certificate builder."""
    not_after = datetime(2025, 1, 15, 12, 0, 0, 654321, tzinfo=tz.utc)
    builder = get_cert_builder(not_after)
    # pylint: disable=protected-access  # only way to test the builder
    assert builder._not_valid_before == datetime(2024, 1, 15, 12)
    assert builder._not_valid_after == datetime(2025, 1, 15, 12)
    assert builder._serial_number is not None
    assert builder._serial_number != get_cert_builder(not_after)._serial_number


@freeze_time("2024-01-15 12:00:00")
def test_get_cert_builder_with_invalid_expiry() -> None:
    """Test passing an invalid expiry date."""
    with pytest.raises(ValueError, match=r"^not_after must not be a naive datetime$"):
        get_cert_builder(datetime(2025, 1, 1))
    with pytest.raises(ValueError, match=r"^not_after must be in the future$"):
        get_cert_builder(datetime.now(tz.utc) - timedelta(days=1))


@pytest.mark.parametrize("curve", ("secp256r1", "secp384r1"))
def test_generate_private_key(curve: str) -> None:
    """Test generating private keys."""
    rsa_key = generate_private_key("RSA", 2048, curve)
    assert isinstance(rsa_key, rsa.RSAPrivateKey)
    assert rsa_key.key_size == 2048

    ec_key = generate_private_key("EC", 2048, curve)
    assert isinstance(ec_key, ec.EllipticCurvePrivateKey)
    assert ec_key.curve.name == curve


def test_generate_private_key_with_unknown_type() -> None:
    """Test generating a key of an unknown type."""
    with pytest.raises(ValueError, match=r"^DSA: Unknown key type\.$"):
        generate_private_key("DSA", 2048, "secp256r1")  # type: ignore[arg-type]


def test_get_user_and_hostname() -> None:
    """Test getting the user and hostname."""
    with mock.patch("getpass.getuser", return_value="user"), mock.patch(
        "socket.gethostname", return_value="example.com"
    ):
        assert get_user_and_hostname() == "user@example.com"


def test_get_user_and_hostname_without_user() -> None:
    """Test getting the user and hostname if the user cannot be determined."""
    with mock.patch("getpass.getuser", side_effect=KeyError("uid not found")), mock.patch(
        "socket.gethostname", return_value="example.com"
    ):
        assert get_user_and_hostname() == "@example.com"


def test_write_file(tmp_path: Path) -> None:
    """Test writing files with permissions."""
    path = tmp_path / "test.pem"
    write_file(path, b"data")
    assert path.read_bytes() == b"data"
    assert_mode(path, 0o644)

    # Existing files are truncated and their permissions are updated
    write_file(path, b"x", mode=0o600)
    assert path.read_bytes() == b"x"
    assert_mode(path, 0o600)
