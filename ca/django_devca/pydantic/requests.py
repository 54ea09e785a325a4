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

"""Models describing a request for a new certificate."""

from pathlib import Path
from typing import Annotated, Optional, Union

from annotated_types import MinLen
from pydantic import BaseModel, ConfigDict

from django_devca.typehints import KeyType


class SubjectRequest(BaseModel):
    """Request a certificate (and private key) for a list of names given by the user.

    >>> SubjectRequest(names=["example.com", "127.0.0.1"]).names
    ('example.com', '127.0.0.1')
    >>> SubjectRequest(names=["example.com"], key_type="EC").key_type
    'EC'
    """

    # NOTE: we set frozen here to prevent accidental coding mistakes. Models should be immutable.
    model_config = ConfigDict(frozen=True)

    names: Annotated[tuple[str, ...], MinLen(1)]
    key_type: KeyType = "RSA"
    client: bool = False
    pkcs12: bool = False
    cert_file: Optional[Path] = None
    key_file: Optional[Path] = None
    p12_file: Optional[Path] = None


class CSRRequest(BaseModel):
    """Request a certificate for an externally generated certificate signing request."""

    model_config = ConfigDict(frozen=True)

    csr: bytes
    cert_file: Optional[Path] = None


CertificateRequest = Union[SubjectRequest, CSRRequest]
