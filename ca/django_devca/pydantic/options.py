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

"""Model for the options of a single invocation."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from django_devca.constants import Mode
from django_devca.exceptions import ConfigurationError
from django_devca.pydantic.requests import CertificateRequest, CSRRequest, SubjectRequest


class Options(BaseModel):
    """Options for a single invocation, validated for conflicting modes.

    Conflicting options raise :py:class:`~django_devca.exceptions.ConfigurationError` (and *not* a
    ``ValidationError``) when the model is instantiated:

    >>> Options(install=True, uninstall=True)
    Traceback (most recent call last):
        ...
    django_devca.exceptions.ConfigurationError: you can't set --install and --uninstall at the same time
    """

    model_config = ConfigDict(frozen=True)

    install: bool = False
    uninstall: bool = False
    caroot: bool = False

    pkcs12: bool = False
    ecdsa: bool = False
    client: bool = False
    csr: Optional[bytes] = None

    cert_file: Optional[Path] = None
    key_file: Optional[Path] = None
    p12_file: Optional[Path] = None

    names: tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_modes(self) -> "Options":
        """Reject mutually exclusive options."""
        # NOTE: ConfigurationError is not a ValueError, so pydantic does not wrap it in a ValidationError.
        if self.caroot and (self.install or self.uninstall):
            raise ConfigurationError("you can't set --[un]install and --CAROOT at the same time")
        if self.install and self.uninstall:
            raise ConfigurationError("you can't set --install and --uninstall at the same time")
        if self.csr is not None:
            if self.pkcs12 or self.ecdsa or self.client or self.key_file or self.p12_file:
                raise ConfigurationError("can only combine --csr with --install and --cert-file")
            if self.names:
                raise ConfigurationError("can't specify extra arguments when using --csr")
        return self

    def get_operations(self) -> tuple[Mode, ...]:
        """Get the ordered list of operations to perform.

        >>> Options(install=True, names=["example.com"]).get_operations()
        (<Mode.INSTALL: 'install'>, <Mode.ISSUE_FROM_SUBJECTS: 'issue_from_subjects'>)
        >>> Options(uninstall=True).get_operations()
        (<Mode.UNINSTALL: 'uninstall'>,)
        >>> Options().get_operations()
        ()
        """
        if self.caroot:
            return (Mode.CAROOT,)
        if self.uninstall:
            return (Mode.UNINSTALL,)

        operations: list[Mode] = []
        if self.install:
            operations.append(Mode.INSTALL)
        if self.csr is not None:
            operations.append(Mode.ISSUE_FROM_CSR)
        elif self.names:
            operations.append(Mode.ISSUE_FROM_SUBJECTS)
        return tuple(operations)

    def get_request(self) -> Optional[CertificateRequest]:
        """Get the certificate request described by these options, if any."""
        if self.caroot or self.uninstall:
            return None
        if self.csr is not None:
            return CSRRequest(csr=self.csr, cert_file=self.cert_file)
        if self.names:
            return SubjectRequest(
                names=self.names,
                key_type="EC" if self.ecdsa else "RSA",
                client=self.client,
                pkcs12=self.pkcs12,
                cert_file=self.cert_file,
                key_file=self.key_file,
                p12_file=self.p12_file,
            )
        return None
