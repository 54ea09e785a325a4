#!/usr/bin/env python3
#
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

"""setuptools based setup.py file for django-devca.

Project metadata is defined in pyproject.toml, this file only defines where packages are found.
"""

from setuptools import find_packages
from setuptools import setup

setup(
    packages=find_packages("ca", exclude=("ca", "django_devca.tests", "django_devca.tests.*")),
    package_dir={"": "ca"},
)
