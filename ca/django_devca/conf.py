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

"""Application configuration for django-devca."""

import os
import sys
from collections.abc import Iterable
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, Literal, Optional

from annotated_types import Ge, Le
from pydantic import BaseModel, ConfigDict, field_validator

from django.conf import settings as _settings
from django.core.exceptions import ImproperlyConfigured

from django_devca import constants
from django_devca.exceptions import ConfigurationError
from django_devca.typehints import TrustStoreName

EllipticCurveName = Literal["secp256r1", "secp384r1", "secp521r1"]
RSAKeySize = Annotated[int, Ge(2048), Le(8192)]


class SettingsModel(BaseModel):
    """Pydantic model defining available settings."""

    model_config = ConfigDict(from_attributes=True, frozen=True, arbitrary_types_allowed=True)

    DEVCA_CAROOT: Optional[Path] = None
    DEVCA_TRUST_STORES: Optional[tuple[TrustStoreName, ...]] = None

    DEVCA_CA_KEY_SIZE: RSAKeySize = 3072

    #: Validity of the root certificate. ``None`` means ten years.
    DEVCA_CA_VALIDITY: Optional[Annotated[timedelta, Ge(timedelta(days=1))]] = None

    DEVCA_CERT_KEY_SIZE: RSAKeySize = 2048

    # macOS rejects TLS server certificates that are valid for more than 825 days.
    #: Validity of leaf certificates. ``None`` means two years and three months.
    DEVCA_CERT_VALIDITY: Optional[Annotated[timedelta, Ge(timedelta(days=1)), Le(timedelta(days=825))]] = None

    DEVCA_ELLIPTIC_CURVE: EllipticCurveName = "secp256r1"

    @field_validator("DEVCA_TRUST_STORES", mode="before")
    @classmethod
    def parse_trust_stores(cls, value: Any) -> Any:
        """Allow passing trust stores as comma-separated string, just like the environment variable."""
        if isinstance(value, str):
            return tuple(store.strip() for store in value.split(",") if store.strip()) or None
        return value


class SettingsProxy:
    """Proxy class to access settings from the model.

    This class exists to enable reloading of settings in test cases.
    """

    __settings: SettingsModel

    def __init__(self) -> None:
        self.reload()

    def __dir__(self, object: Any = None) -> Iterable[str]:  # pylint: disable=redefined-builtin
        return list(super().__dir__()) + list(self.__settings.model_fields)

    def reload(self) -> None:
        """Reload settings model from django settings."""
        try:
            self.__settings = SettingsModel.model_validate(_settings)
        except ValueError as ex:
            raise ImproperlyConfigured(str(ex)) from ex

    def __getattr__(self, item: str) -> Any:
        return getattr(self.__settings, item)


model_settings = SettingsProxy()


def get_default_caroot() -> Optional[Path]:
    """Get the platform-conventional CAROOT, or ``None`` if it cannot be determined.

    >>> get_default_caroot()  # doctest: +SKIP
    PosixPath('/home/user/.local/share/devca')
    """
    if sys.platform == "win32":
        directory = os.environ.get("LocalAppData")
        if not directory:
            return None
        return Path(directory) / constants.CAROOT_DIRNAME
    if xdg_data_home := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg_data_home) / constants.CAROOT_DIRNAME

    home = os.environ.get("HOME")
    if not home:
        return None
    if sys.platform == "darwin":
        return Path(home) / "Library" / "Application Support" / constants.CAROOT_DIRNAME
    return Path(home) / ".local" / "share" / constants.CAROOT_DIRNAME


def get_caroot() -> Path:
    """Resolve the directory holding the CA certificate and private key.

    The ``CAROOT`` environment variable takes precedence over the ``DEVCA_CAROOT`` setting, which takes
    precedence over the platform-conventional default location.

    Raises
    ------
    ConfigurationError
        If no location can be determined.
    """
    if env := os.environ.get("CAROOT"):
        return Path(env).absolute()
    if model_settings.DEVCA_CAROOT is not None:
        return Path(model_settings.DEVCA_CAROOT).absolute()

    default = get_default_caroot()
    if default is None:
        raise ConfigurationError(
            "failed to find the default CA location, set one as the CAROOT environment variable"
        )
    return default.absolute()


def get_trust_stores_allow_list() -> Optional[tuple[str, ...]]:
    """Get the names of trust stores explicitly enabled by the user, or ``None`` if all are enabled.

    Names are returned unvalidated, unknown names are reported by the system checks and otherwise ignored.
    """
    if env := os.environ.get("TRUST_STORES"):
        return tuple(store.strip() for store in env.split(",") if store.strip()) or None
    return model_settings.DEVCA_TRUST_STORES


def store_enabled(name: TrustStoreName, allow_list: Optional[Iterable[str]]) -> bool:
    """Test if the given trust store is enabled for the given allow list.

    >>> store_enabled("nss", None)
    True
    >>> store_enabled("nss", ("system", "java"))
    False
    """
    if not allow_list:
        return True
    return name in allow_list
