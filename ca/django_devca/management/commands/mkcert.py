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

"""Management command to create locally-trusted development certificates.

.. seealso:: https://docs.djangoproject.com/en/dev/howto/custom-management-commands/
"""

import typing
from pathlib import Path

from pydantic import ValidationError

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import CommandError, CommandParser

from django_devca.conf import get_caroot
from django_devca.exceptions import CSRError, SubjectError
from django_devca.management.actions import ReadFileAction
from django_devca.management.base import BaseCommand
from django_devca.orchestrator import Orchestrator
from django_devca.pydantic import Options


class Command(BaseCommand):  # pylint: disable=missing-class-docstring
    help = """Create locally-trusted development certificates for the given names (hostnames, IP addresses,
email addresses or URIs). Use --install to add the local CA to the system, browser and Java trust stores."""

    def add_arguments(self, parser: CommandParser) -> None:
        modes = parser.add_argument_group("Modes")
        modes.add_argument(
            "--install", default=False, action="store_true", help="Install the local CA in the trust stores."
        )
        modes.add_argument(
            "--uninstall",
            default=False,
            action="store_true",
            help="Uninstall the local CA from the trust stores (but do not delete it).",
        )
        modes.add_argument(
            "--CAROOT",
            dest="caroot",
            default=False,
            action="store_true",
            help="Print the CA certificate and key storage location.",
        )

        output = parser.add_argument_group("Output")
        output.add_argument("--cert-file", type=Path, metavar="FILE", help="Customize the certificate path.")
        output.add_argument("--key-file", type=Path, metavar="FILE", help="Customize the private key path.")
        output.add_argument("--p12-file", type=Path, metavar="FILE", help="Customize the PKCS#12 path.")

        certificate = parser.add_argument_group("Certificate")
        certificate.add_argument(
            "--client",
            default=False,
            action="store_true",
            help="Generate a certificate for client authentication.",
        )
        certificate.add_argument(
            "--ecdsa", default=False, action="store_true", help="Generate a certificate with an ECDSA key."
        )
        certificate.add_argument(
            "--pkcs12",
            default=False,
            action="store_true",
            help='Generate a ".p12" PKCS #12 file, also know as a ".pfx" file, containing certificate and '
            "key for legacy applications.",
        )
        certificate.add_argument(
            "--csr",
            action=ReadFileAction,
            help="Generate a certificate based on the supplied CSR. Conflicts with all other flags and "
            "arguments except --install and --cert-file.",
        )
        parser.add_argument(
            "names", nargs="*", help="Hostnames, IP addresses, email addresses or URIs for the certificate."
        )

    def handle(self, names: list[str], **options: typing.Any) -> None:  # type: ignore[override]
        try:
            devca_options = Options(
                install=options["install"],
                uninstall=options["uninstall"],
                caroot=options["caroot"],
                pkcs12=options["pkcs12"],
                ecdsa=options["ecdsa"],
                client=options["client"],
                csr=options["csr"],
                cert_file=options["cert_file"],
                key_file=options["key_file"],
                p12_file=options["p12_file"],
                names=tuple(names),
            )
        except ValidationError as ex:
            self.validation_error_to_command_error(ex)
        except ImproperlyConfigured as ex:
            raise CommandError(ex) from ex

        if devca_options.caroot:
            try:
                self.stdout.write(str(get_caroot()))
            except ImproperlyConfigured as ex:
                raise CommandError(ex) from ex
            return

        if not devca_options.get_operations():
            parser = self.create_parser("manage.py", "mkcert")
            self.stdout.write(parser.format_help())
            return

        with self.log_to_stderr(options["verbosity"]):
            try:
                Orchestrator().run(devca_options)
            except (ImproperlyConfigured, SubjectError, CSRError) as ex:
                raise CommandError(ex) from ex
            except OSError as ex:
                raise CommandError(f"{ex.filename}: {ex.strerror}") from ex
