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

"""pytest configuration."""

# pylint: disable=redefined-outer-name  # requested pytest fixtures show up this way.

import importlib.metadata
import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from unittest import mock

import pytest
from _pytest.config import Config as PytestConfig

from ca import settings_utils  # noqa: F401  # to get rid of pytest warnings for untested modules
from django_devca.authority import CertificateAuthority
from django_devca.orchestrator import Orchestrator
from django_devca.privileges import PrivilegeGate
from django_devca.tests.base.truststores import DummyTrustStore
from django_devca.typehints import TrustStoreName


def pytest_configure(config: "PytestConfig") -> None:
    """Output libraries."""
    # Add a header to log important software versions
    print("Testing with:")
    print("* Python: ", sys.version.replace("\n", ""))
    installed_versions = {p.metadata["Name"]: p.version for p in importlib.metadata.distributions()}
    for pkg in sorted(["Django", "cryptography", "idna", "pydantic"]):
        print(f"* {pkg}: {installed_versions.get(pkg)}")


@pytest.fixture(scope="session")
def ca_files(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Create a CA only once per test session, as generating RSA keys is slow."""
    root = tmp_path_factory.mktemp("ca-files")
    CertificateAuthority.create(root)
    return root


@pytest.fixture
def caroot(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Fixture for an empty CAROOT (that does not yet exist), set via the environment."""
    path = tmp_path / "caroot"
    monkeypatch.setenv("CAROOT", str(path))
    monkeypatch.delenv("TRUST_STORES", raising=False)
    return path


@pytest.fixture
def ca(caroot: Path, ca_files: Path) -> CertificateAuthority:
    """Fixture for a CA in the CAROOT, copied from the session-wide CA."""
    shutil.copytree(ca_files, caroot)
    return CertificateAuthority.load(caroot)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Fixture for an empty working directory, where certificates are written to by default."""
    path = tmp_path / "workdir"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def gate() -> PrivilegeGate:
    """Fixture for a privilege gate."""
    return PrivilegeGate()


@pytest.fixture
def calls() -> list[tuple[str, str]]:
    """Fixture for a list recording calls to dummy trust stores."""
    return []


@pytest.fixture
def dummy_stores(gate: PrivilegeGate, calls: list[tuple[str, str]]) -> list[DummyTrustStore]:
    """Fixture for dummy trust stores in installation order."""
    names: tuple[TrustStoreName, ...] = ("system", "nss", "java")
    return [DummyTrustStore(gate, name, calls=calls) for name in names]


@pytest.fixture
def orchestrator(dummy_stores: list[DummyTrustStore], gate: PrivilegeGate) -> Orchestrator:
    """Fixture for an orchestrator using dummy trust stores."""
    return Orchestrator(stores=dummy_stores, gate=gate)


@pytest.fixture
def patch_trust_stores(dummy_stores: list[DummyTrustStore]) -> Iterator[list[DummyTrustStore]]:
    """Use dummy trust stores for any orchestrator created during the test (e.g. by a management command)."""
    with mock.patch("django_devca.orchestrator.get_trust_stores", return_value=dummy_stores):
        yield dummy_stores
