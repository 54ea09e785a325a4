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


"""Test :py:mod:`django_devca.pydantic.options` and :py:mod:`django_devca.pydantic.requests`."""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

import pytest

from django_devca.constants import Mode
from django_devca.exceptions import ConfigurationError
from django_devca.pydantic import CSRRequest, Options, SubjectRequest
from django_devca.tests.base.doctest import doctest_module

CSR_COMBINE = r"^can only combine --csr with --install and --cert-file$"
CAROOT_COMBINE = r"^you can't set --\[un\]install and --CAROOT at the same time$"


@pytest.mark.parametrize("module", ("django_devca.pydantic.options", "django_devca.pydantic.requests"))
def test_doctests(module: str) -> None:
    """Load doctests."""
    failures, _tests = doctest_module(module)
    assert failures == 0, f"{failures} doctests failed, see above for output."


@pytest.mark.parametrize(
    "kwargs,expected",
    (
        ({}, ()),
        ({"caroot": True}, (Mode.CAROOT,)),
        ({"caroot": True, "names": ("example.com",)}, (Mode.CAROOT,)),
        ({"install": True}, (Mode.INSTALL,)),
        ({"uninstall": True}, (Mode.UNINSTALL,)),
        ({"uninstall": True, "names": ("example.com",)}, (Mode.UNINSTALL,)),
        ({"names": ("example.com",)}, (Mode.ISSUE_FROM_SUBJECTS,)),
        ({"install": True, "names": ("example.com",)}, (Mode.INSTALL, Mode.ISSUE_FROM_SUBJECTS)),
        ({"csr": b"csr"}, (Mode.ISSUE_FROM_CSR,)),
        ({"install": True, "csr": b"csr"}, (Mode.INSTALL, Mode.ISSUE_FROM_CSR)),
        ({"pkcs12": True, "ecdsa": True}, ()),
    ),
)
def test_get_operations(kwargs: dict[str, Any], expected: tuple[Mode, ...]) -> None:
    """Test the operations derived from options."""
    assert Options(**kwargs).get_operations() == expected


@pytest.mark.parametrize(
    "kwargs,message",
    (
        ({"install": True, "uninstall": True}, r"^you can't set --install and --uninstall at the same time$"),
        ({"caroot": True, "install": True}, CAROOT_COMBINE),
        ({"caroot": True, "uninstall": True}, CAROOT_COMBINE),
        ({"csr": b"csr", "pkcs12": True}, CSR_COMBINE),
        ({"csr": b"csr", "ecdsa": True}, CSR_COMBINE),
        ({"csr": b"csr", "client": True}, CSR_COMBINE),
        ({"csr": b"csr", "key_file": "key.pem"}, CSR_COMBINE),
        ({"csr": b"csr", "p12_file": "cert.p12"}, CSR_COMBINE),
        ({"csr": b"csr", "names": ("example.com",)}, r"^can't specify extra arguments when using --csr$"),
    ),
)
def test_conflicting_options(kwargs: dict[str, Any], message: str) -> None:
    """Test options that cannot be combined."""
    with pytest.raises(ConfigurationError, match=message):
        Options(**kwargs)


def test_get_request_for_subjects() -> None:
    """Test getting a request for names."""
    options = Options(
        ecdsa=True,
        client=True,
        cert_file=Path("cert.pem"),
        key_file=Path("key.pem"),
        names=("example.com", "127.0.0.1"),
    )
    assert options.get_request() == SubjectRequest(
        names=("example.com", "127.0.0.1"),
        key_type="EC",
        client=True,
        cert_file=Path("cert.pem"),
        key_file=Path("key.pem"),
    )


def test_get_request_for_csr() -> None:
    """Test getting a request for a CSR."""
    options = Options(install=True, csr=b"csr", cert_file=Path("cert.pem"))
    assert options.get_request() == CSRRequest(csr=b"csr", cert_file=Path("cert.pem"))


@pytest.mark.parametrize(
    "kwargs", ({}, {"install": True}, {"caroot": True}, {"uninstall": True, "names": ("example.com",)})
)
def test_get_request_without_request(kwargs: dict[str, Any]) -> None:
    """Test options that do not issue a certificate."""
    assert Options(**kwargs).get_request() is None


def test_options_are_immutable() -> None:
    """Test that options cannot be modified."""
    options = Options()
    with pytest.raises(ValidationError, match=r"Instance is frozen"):
        options.install = True  # type: ignore[misc]


def test_subject_request_without_names() -> None:
    """Test that a subject request requires at least one name."""
    with pytest.raises(ValidationError, match=r"at least 1 item"):
        SubjectRequest(names=())


def test_subject_request_with_invalid_key_type() -> None:
    """Test passing an unsupported key type."""
    with pytest.raises(ValidationError, match=r"key_type"):
        SubjectRequest(names=("example.com",), key_type="DSA")  # type: ignore[arg-type]
