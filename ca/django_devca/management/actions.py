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

"""Collection of argparse actions for django-devca management commands."""

import abc
import argparse
import typing
from typing import Any, Optional

ActionType = typing.TypeVar("ActionType")  # pylint: disable=invalid-name
ParseType = typing.TypeVar("ParseType")  # pylint: disable=invalid-name


class SingleValueAction(argparse.Action, typing.Generic[ParseType, ActionType], metaclass=abc.ABCMeta):
    """Abstract/generic base class for arguments that take a single value.

    The main purpose of this class is to improve type hinting.
    """

    type: type[ActionType]

    @abc.abstractmethod
    def parse_value(self, value: ParseType) -> ActionType:
        """Parse the value passed to the command line. Implementing classes must implement this method.

        Parameters
        ----------
        value : str
            The value passed by the command line.
        """
        raise NotImplementedError

    def __call__(  # type: ignore[override] # argparse.Action defines much looser type
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: ParseType,
        option_string: Optional[str] = None,
    ) -> None:
        setattr(namespace, self.dest, self.parse_value(values))


class ReadFileAction(SingleValueAction[str, bytes]):
    """Action that reads the contents of a file, e.g. a certificate signing request.

    The file is only read, it is not parsed. Parsing (and validation) of the contents is left to the code
    that uses it.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("metavar", "FILE")
        super().__init__(**kwargs)

    def parse_value(self, value: str) -> bytes:
        """Parse the value for this action."""
        try:
            with open(value, "rb") as stream:
                return stream.read()
        except OSError as ex:
            raise argparse.ArgumentError(self, f"{value}: Could not read file: {ex.strerror}") from ex
