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

"""Utility functions for loading settings."""

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from django.core.exceptions import ImproperlyConfigured

#: Prefix for environment variables that are loaded as settings.
ENVIRON_PREFIX = "DJANGO_DEVCA_"


def get_settings_files(base_dir: Path, paths: str) -> Iterator[Path]:
    """Get relevant settings files."""
    for settings_path in [base_dir / p for p in paths.split(":") if p]:
        if not settings_path.exists():
            raise ImproperlyConfigured(f"{settings_path}: No such file or directory.")

        if settings_path.is_dir():
            # exclude files that don't end with '.yaml' and any directories
            yield from sorted(
                [
                    settings_path / _f.name
                    for _f in settings_path.iterdir()
                    if _f.suffix == ".yaml" and not _f.is_dir()
                ]
            )
        else:
            yield settings_path

    settings_yaml = base_dir / "ca" / "settings.yaml"
    if settings_yaml.exists():
        yield settings_yaml


def load_settings_from_files(base_dir: Path) -> Iterator[tuple[str, Any]]:
    """Load settings from YAML files."""
    settings_paths = os.environ.get(f"{ENVIRON_PREFIX}SETTINGS", "")

    settings_files = []
    for full_path in get_settings_files(base_dir, settings_paths):
        with open(full_path, encoding="utf-8") as stream:
            try:
                data = yaml.safe_load(stream)
            except yaml.YAMLError as ex:
                raise ImproperlyConfigured(f"{full_path}: Invalid YAML.") from ex

        if data is None:
            pass  # silently ignore empty files
        elif not isinstance(data, dict):
            raise ImproperlyConfigured(f"{full_path}: File is not a key/value mapping.")
        else:
            settings_files.append(full_path)
            yield from data.items()

    # ALSO yield the SETTINGS_FILES setting with the loaded files.
    yield "SETTINGS_FILES", tuple(settings_files)


def load_settings_from_environment() -> Iterator[tuple[str, Any]]:
    """Load settings from environment variables prefixed with ``DJANGO_DEVCA_``."""
    prefix_length = len(ENVIRON_PREFIX)
    environ = {k[prefix_length:]: v for k, v in os.environ.items() if k.startswith(ENVIRON_PREFIX)}
    for key, value in environ.items():
        if key == "SETTINGS":  # points to yaml files loaded in get_settings_files
            continue

        if key == "DEBUG":
            yield key, parse_bool(value)
        else:
            yield key, value


def parse_bool(value: str) -> bool:
    """Parse a variable that is supposed to represent a boolean value.

    >>> parse_bool("yes"), parse_bool("0")
    (True, False)
    """
    return value.strip().lower() in ("true", "yes", "1")
