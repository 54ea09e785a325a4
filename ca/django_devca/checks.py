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

"""System checks for django-devca.

.. seealso:: https://docs.djangoproject.com/en/dev/topics/checks/
"""

from typing import Any, Optional

from django.apps import AppConfig
from django.core import checks

from django_devca import constants
from django_devca.conf import get_caroot, get_trust_stores_allow_list
from django_devca.exceptions import ConfigurationError


def _skip(app_configs: Optional[list[AppConfig]]) -> bool:
    # only run checks if manage.py check is run with no app labels (== all) or the django_devca app label
    return app_configs is not None and not [config for config in app_configs if config.name == "django_devca"]


# TYPE NOTE: django-stubs does not type-hint the decorator
@checks.register  # type: ignore[type-var]
def check_caroot(app_configs: Optional[list[AppConfig]], **kwargs: Any) -> list[checks.CheckMessage]:
    """Check that a location for the local CA can be determined."""
    if _skip(app_configs):
        return []

    try:
        get_caroot()
    except ConfigurationError as ex:
        return [
            checks.Error(
                str(ex),
                hint="Set the CAROOT environment variable or the DEVCA_CAROOT setting.",
                id="django-devca.E001",
            )
        ]
    return []


@checks.register  # type: ignore[type-var]
def check_trust_stores(app_configs: Optional[list[AppConfig]], **kwargs: Any) -> list[checks.CheckMessage]:
    """Check that only known trust stores are enabled via the TRUST_STORES environment variable."""
    if _skip(app_configs):
        return []

    allow_list = get_trust_stores_allow_list() or ()
    unknown = [name for name in allow_list if name not in constants.TRUST_STORE_NAMES]
    if unknown:
        return [
            checks.Warning(
                f"Unknown trust stores are ignored: {', '.join(unknown)}",
                hint=f"Known trust stores are: {', '.join(constants.TRUST_STORE_NAMES)}",
                id="django-devca.W001",
            )
        ]
    return []
