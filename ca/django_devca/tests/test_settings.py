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


"""Test loading settings (see ``ca/settings_utils.py``)."""

import os
from pathlib import Path
from unittest import mock

from django.core.exceptions import ImproperlyConfigured

import pytest

from ca.settings_utils import (
    get_settings_files,
    load_settings_from_environment,
    load_settings_from_files,
    parse_bool,
)
from django_devca.tests.base.doctest import doctest_module


@pytest.fixture
def settings_dirs(tmp_path: Path) -> Path:
    """Fixture for a directory tree with settings files."""
    (tmp_path / "ca").mkdir()
    (tmp_path / "ca" / "settings.yaml").write_text("BASE_FILE: true\n", encoding="utf-8")

    settings_dir = tmp_path / "settings_dir"
    settings_dir.mkdir()
    (settings_dir / "02-settings.yaml").write_text("DEVCA_TRUST_STORES: nss,java\n", encoding="utf-8")
    (settings_dir / "01-settings.yaml").write_text("DEVCA_CA_KEY_SIZE: 4096\n", encoding="utf-8")
    (settings_dir / "ignored.txt").write_text("IGNORED: true\n", encoding="utf-8")
    (settings_dir / "ignored.yaml").mkdir()

    (tmp_path / "single-file.yaml").write_text("DEVCA_CAROOT: /opt/devca\n", encoding="utf-8")
    (tmp_path / "empty-file.yaml").write_text("", encoding="utf-8")
    return tmp_path


def test_doctests() -> None:
    """Load doctests."""
    failures, _tests = doctest_module("ca.settings_utils")
    assert failures == 0, f"{failures} doctests failed, see above for output."


def test_no_settings_files(tmp_path: Path) -> None:
    """Test no settings.yaml exists and no DJANGO_DEVCA_SETTINGS env variable set."""
    assert not list(get_settings_files(tmp_path, ""))


def test_with_settings_files(settings_dirs: Path) -> None:
    """Test a full list of settings files."""
    single_file = settings_dirs / "single-file.yaml"
    settings_dir = settings_dirs / "settings_dir"
    assert list(get_settings_files(settings_dirs, f"{single_file}:{settings_dir}")) == [
        single_file,
        settings_dir / "01-settings.yaml",
        settings_dir / "02-settings.yaml",
        settings_dirs / "ca" / "settings.yaml",
    ]


def test_load_settings_from_files(settings_dirs: Path) -> None:
    """Test loading settings from YAML files."""
    single_file = settings_dirs / "single-file.yaml"
    settings_dir = settings_dirs / "settings_dir"
    empty_file = settings_dirs / "empty-file.yaml"

    environ = {"DJANGO_DEVCA_SETTINGS": f"{single_file}:{settings_dir}:{empty_file}"}
    with mock.patch.dict(os.environ, environ):
        assert dict(load_settings_from_files(settings_dirs)) == {
            "DEVCA_CAROOT": "/opt/devca",
            "DEVCA_CA_KEY_SIZE": 4096,
            "DEVCA_TRUST_STORES": "nss,java",
            "BASE_FILE": True,
            "SETTINGS_FILES": (
                single_file,
                settings_dir / "01-settings.yaml",
                settings_dir / "02-settings.yaml",
                settings_dirs / "ca" / "settings.yaml",
            ),
        }


def test_load_settings_from_files_file_does_not_exist(tmp_path: Path) -> None:
    """Test loading settings if the file does not exist."""
    path = "/does-not-exist.yaml"
    with mock.patch.dict(os.environ, {"DJANGO_DEVCA_SETTINGS": path}):
        with pytest.raises(ImproperlyConfigured, match=rf"^{path}: No such file or directory\.$"):
            dict(load_settings_from_files(tmp_path))


def test_load_settings_from_files_with_invalid_yaml(tmp_path: Path) -> None:
    """Test loading settings if the file is not valid YAML."""
    path = str(tmp_path / "invalid-file.yaml")
    with open(path, "w", encoding="utf-8") as stream:
        stream.write("test: 'unbalanced quote")
    with mock.patch.dict(os.environ, {"DJANGO_DEVCA_SETTINGS": path}):
        with pytest.raises(ImproperlyConfigured, match=rf"^{path}: Invalid YAML\.$"):
            dict(load_settings_from_files(tmp_path))


def test_load_settings_from_files_with_invalid_type(tmp_path: Path) -> None:
    """Test loading settings if the file has an invalid type."""
    path = str(tmp_path / "invalid-type.yaml")
    with open(path, "w", encoding="utf-8") as stream:
        stream.write("- a\n- list\n")
    with mock.patch.dict(os.environ, {"DJANGO_DEVCA_SETTINGS": path}):
        with pytest.raises(ImproperlyConfigured, match=rf"^{path}: File is not a key/value mapping\.$"):
            dict(load_settings_from_files(tmp_path))


def test_load_settings_from_environment() -> None:
    """Test loading settings from the environment."""
    with mock.patch.dict(
        os.environ,
        {
            "DJANGO_DEVCA_SETTINGS": "ignored",
            "DJANGO_DEVCA_DEBUG": "yEs",
            "DJANGO_DEVCA_DEVCA_CAROOT": "/opt/devca",
            "DJANGO_DEVCA_DEVCA_TRUST_STORES": "system,nss",
        },
    ):
        assert dict(load_settings_from_environment()) == {
            "DEBUG": True,
            "DEVCA_CAROOT": "/opt/devca",
            "DEVCA_TRUST_STORES": "system,nss",
        }


@pytest.mark.parametrize(
    "value,expected",
    (("true", True), (" TRUE ", True), ("1", True), ("yes", True), ("0", False), ("no", False), ("", False)),
)
def test_parse_bool(value: str, expected: bool) -> None:
    """Test parsing boolean values."""
    assert parse_bool(value) is expected
