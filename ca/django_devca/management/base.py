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

"""Command subclasses for django-devca."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

from pydantic import ValidationError

from django.core.management.base import BaseCommand as _BaseCommand, CommandError

#: Log level used for the verbosity passed via ``--verbosity``.
VERBOSITY_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


class BaseCommand(_BaseCommand):
    """Base class for django-devca management commands."""

    #: Name of the logger that is sent to stderr while the command runs.
    logger_name = "django_devca"

    def validation_error_to_command_error(self, ex: ValidationError) -> NoReturn:
        """Convert a Pydantic validation error into a Django Command Error."""
        # Convert Pydantic errors into a list of "nice" strings
        messages = []
        for error in ex.errors():
            if error["loc"]:
                locations = (str(loc) for loc in error["loc"])
                messages.append(f"{', '.join(locations)}: {error['msg']}")
            else:
                messages.append(error["msg"])

        if len(messages) == 1:  # pylint: disable=no-else-raise  # just makes the code clearer
            raise CommandError(messages[0]) from ex
        else:
            message = "\n".join(f"* {msg}" for msg in messages)
            raise CommandError(f"{len(messages)} errors:\n{message}") from ex

    @contextmanager
    def log_to_stderr(self, verbosity: int) -> Iterator[logging.Handler]:
        """Context manager to write log messages of django-devca to stderr of this command.

        The log level depends on `verbosity`: 0 only shows warnings and errors, 1 (the default) also shows
        informational messages and 2 or higher shows debug messages.
        """
        logger = logging.getLogger(self.logger_name)
        handler = logging.StreamHandler(self.stderr)  # type: ignore[arg-type]
        handler.setFormatter(logging.Formatter("%(message)s"))

        old_level, old_propagate = logger.level, logger.propagate
        logger.setLevel(VERBOSITY_LOG_LEVELS.get(verbosity, logging.DEBUG))
        logger.addHandler(handler)
        logger.propagate = False  # messages go to stderr of this command only
        try:
            yield handler
        finally:
            logger.removeHandler(handler)
            logger.setLevel(old_level)
            logger.propagate = old_propagate
