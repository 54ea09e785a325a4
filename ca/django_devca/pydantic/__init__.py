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

"""Pydantic modules included in django-devca."""

from django_devca.pydantic.options import Options
from django_devca.pydantic.requests import CertificateRequest, CSRRequest, SubjectRequest

__all__ = ["CertificateRequest", "CSRRequest", "Options", "SubjectRequest"]
