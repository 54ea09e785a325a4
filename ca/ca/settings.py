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

"""Default settings for the django-devca Django project."""

from pathlib import Path

from django.core.management.utils import get_random_secret_key

from ca.settings_utils import load_settings_from_environment, load_settings_from_files

BASE_DIR = Path(__file__).resolve().parent.parent  # ca/

DEBUG = False

# django-devca has no models, so no database is configured.
DATABASES: dict[str, dict[str, str]] = {}

TIME_ZONE = "UTC"
LANGUAGE_CODE = "en-us"
USE_I18N = False
USE_TZ = True

# The project only serves management commands, so a random key is generated unless one is configured.
SECRET_KEY = get_random_secret_key()

INSTALLED_APPS = [
    "django_devca",
]

# Location of the local CA. The CAROOT environment variable takes precedence, the default is a directory in
# the per-user application data directory.
DEVCA_CAROOT = None

# Comma-separated list of trust stores to use (system, nss, java). The TRUST_STORES environment variable takes
# precedence, the default is to use all trust stores.
DEVCA_TRUST_STORES = None

LOGGING = None
LOG_FORMAT = "%(message)s"
LOG_LEVEL = "INFO"
LIBRARY_LOG_LEVEL = "WARNING"

# Load settings from files
for _setting, _value in load_settings_from_files(BASE_DIR):
    globals()[_setting] = _value

# Load settings from environment variables
for _setting, _value in load_settings_from_environment():
    globals()[_setting] = _value

if LOGGING is None:
    LOGGING = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "main": {
                "format": LOG_FORMAT,
            },
        },
        "handlers": {
            # The mkcert command adds its own handler for django_devca
            "null": {
                "class": "logging.NullHandler",
            },
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "main",
            },
        },
        "loggers": {
            "django_devca": {
                "handlers": ["null"],
                "level": LOG_LEVEL,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": LIBRARY_LOG_LEVEL,
        },
    }
