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

"""Run the operations of a single invocation: install, uninstall and certificate generation."""

import logging
from collections.abc import Sequence
from typing import Optional

from django_devca.authority import CertificateAuthority
from django_devca.conf import get_caroot, get_trust_stores_allow_list, store_enabled
from django_devca.constants import Mode, State
from django_devca.exceptions import TrustStoreCommandError
from django_devca.issuer import CertificateIssuer, IssuedCertificate
from django_devca.privileges import PrivilegeGate
from django_devca.pydantic import CertificateRequest, CSRRequest, Options
from django_devca.truststores import TrustStore, get_trust_stores

log = logging.getLogger(__name__)

#: Order in which trust stores are uninstalled. The system store comes last, as it may prompt for a password.
UNINSTALL_ORDER = ("nss", "java", "system")


class Orchestrator:
    """Execute the operations requested by :py:class:`~django_devca.pydantic.Options`.

    Parameters
    ----------
    stores : list of :py:class:`~django_devca.truststores.base.TrustStore`, optional
        The trust stores to manage. If not given, all available backends are used.
    gate : :py:class:`~django_devca.privileges.PrivilegeGate`, optional
        The gate used for running commands with elevated privileges.
    """

    def __init__(
        self, stores: Optional[Sequence[TrustStore]] = None, gate: Optional[PrivilegeGate] = None
    ) -> None:
        if gate is None:
            gate = PrivilegeGate()
        self.gate = gate
        if stores is None:
            stores = get_trust_stores(gate)
        self.stores = list(stores)
        self.state = State.IDLE

        # Set after installing into the system trust store, as the updated store may not yet be visible to
        # this process.
        self.ignore_check_failure = False

    def get_enabled_stores(self) -> list[TrustStore]:
        """Get trust stores enabled via the ``TRUST_STORES`` environment variable or setting."""
        allow_list = get_trust_stores_allow_list()
        return [store for store in self.stores if store_enabled(store.name, allow_list)]

    def is_trusted(self, store: TrustStore, ca: CertificateAuthority) -> bool:
        """Return ``True`` if `store` trusts `ca`."""
        if store.name == "system" and self.ignore_check_failure:
            return True
        return store.check(ca)

    def _log_missing_tool(self, store: TrustStore, action: str) -> None:
        log.warning(
            'Warning: "%s" is not available, so the CA can\'t be automatically %s %s!',
            store.tool,
            action,
            store.title,
        )
        if hint := store.get_install_hint():
            log.warning('Install "%s" with "%s" and re-run "manage.py mkcert --install".', store.tool, hint)

    def _install_store(self, store: TrustStore, ca: CertificateAuthority) -> None:
        if not store.is_available():
            store.log_unavailable(ca)
            return
        if self.is_trusted(store, ca):
            log.info("The local CA is already installed in %s.", store.title)
            return
        if not store.has_tool():
            self._log_missing_tool(store, "installed in")
            return

        if store.install(ca):
            log.info("The local CA is now installed in %s%s!", store.title, store.install_note)
            if store.name == "system":
                self.ignore_check_failure = True

    def install(self, ca: CertificateAuthority) -> None:
        """Install `ca` into all enabled trust stores.

        A failing helper tool is logged and does not prevent installation into the remaining trust stores.
        """
        self.state = State.INSTALLING
        try:
            for store in self.get_enabled_stores():
                try:
                    self._install_store(store, ca)
                except TrustStoreCommandError as ex:
                    log.error("Failed to install the local CA in %s: %s", store.title, ex)
        finally:
            self.state = State.IDLE

    def _uninstall_store(self, store: TrustStore, ca: CertificateAuthority) -> None:
        if not store.is_available():
            return
        if not store.has_tool():
            self._log_missing_tool(store, "uninstalled from")
            return
        if store.uninstall(ca):
            log.info("The local CA is now uninstalled from %s.", store.title)

    def uninstall(self, ca: CertificateAuthority) -> None:
        """Remove `ca` from all enabled trust stores.

        The files of the CA itself are not removed.
        """
        self.state = State.UNINSTALLING
        stores = sorted(self.get_enabled_stores(), key=lambda store: UNINSTALL_ORDER.index(store.name))
        try:
            for store in stores:
                try:
                    self._uninstall_store(store, ca)
                except TrustStoreCommandError as ex:
                    log.error("Failed to uninstall the local CA from %s: %s", store.title, ex)
        finally:
            self.state = State.IDLE

    def log_untrusted(self, ca: CertificateAuthority) -> None:
        """Log a note for every enabled trust store that does not trust `ca`."""
        untrusted = False
        for store in self.get_enabled_stores():
            if not store.is_available():
                continue
            try:
                trusted = self.is_trusted(store, ca)
            except TrustStoreCommandError as ex:
                log.error("Failed to check %s: %s", store.title, ex)
                continue

            if not trusted:
                untrusted = True
                log.warning("Note: the local CA is not installed in %s.", store.title)

        if untrusted:
            log.warning('Run "manage.py mkcert --install" for certificates to be trusted automatically.')

    def generate(self, ca: CertificateAuthority, request: CertificateRequest) -> IssuedCertificate:
        """Issue a certificate for `request`."""
        self.state = State.GENERATING
        try:
            issuer = CertificateIssuer(ca)
            if isinstance(request, CSRRequest):
                return issuer.issue_from_csr(request)
            return issuer.issue_from_subjects(request)
        finally:
            self.state = State.IDLE

    def run(self, options: Options) -> Optional[IssuedCertificate]:
        """Run all operations requested by `options`.

        The CA is loaded (or created) from the CAROOT unless only the location of the CAROOT is queried, in
        which case nothing is done here. Returns the issued certificate, if any.
        """
        operations = options.get_operations()
        if not operations or Mode.CAROOT in operations:
            return None

        ca = CertificateAuthority.load_or_create(get_caroot())
        log.info('Using the local CA at "%s".', ca.path)

        issued: Optional[IssuedCertificate] = None
        for operation in operations:
            if operation == Mode.INSTALL:
                self.install(ca)
            elif operation == Mode.UNINSTALL:
                self.uninstall(ca)
            else:
                request = options.get_request()
                if request is None:  # pragma: no cover  # operations only include issuing with a request
                    continue
                if Mode.INSTALL not in operations:
                    self.log_untrusted(ca)
                issued = self.generate(ca, request)
        return issued
