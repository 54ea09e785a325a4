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

"""Classify names given on the command line as certificate subjects."""

from email.utils import parseaddr
from ipaddress import ip_address
from typing import Optional
from urllib.parse import urlsplit

import idna

from cryptography import x509

from django_devca.constants import DOT_ATOM_RE, HOSTNAME_RE
from django_devca.exceptions import SubjectError
from django_devca.typehints import ClassifiedSubject


def _parse_email(value: str) -> Optional[str]:
    # Display names ("User <user@example.com>") parse fine, but do not match the input.
    _name, address = parseaddr(value)
    if address != value or "@" not in address:
        return None
    node, domain = address.rsplit("@", 1)
    if not DOT_ATOM_RE.match(node):
        return None
    if not domain.isascii():
        try:
            domain = idna.encode(domain, uts46=True).decode("ascii")
        except idna.IDNAError:
            return None
    if not DOT_ATOM_RE.match(domain):
        return None
    return f"{node}@{domain}"


def _is_uri(value: str) -> bool:
    if not value.isascii():  # IRIs are not supported
        return False
    try:
        parsed = urlsplit(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def encode_hostname(name: str) -> str:
    """Convert a hostname to its ASCII representation.

    Labels that are already ASCII are left untouched (so e.g. underscores are still allowed), other labels are
    converted to their IDNA encoded form. A leading wildcard label is preserved:

    >>> encode_hostname("example.com")
    'example.com'
    >>> encode_hostname("exämple.com")
    'xn--exmple-cua.com'
    >>> encode_hostname("*.exämple.com")
    '*.xn--exmple-cua.com'

    Raises
    ------
    idna.IDNAError
        If any label cannot be encoded.
    """
    if name.isascii():
        return name

    prefix = ""
    if name.startswith("*."):
        prefix, name = "*.", name[2:]

    labels = []
    for label in name.split("."):
        if label.isascii():
            labels.append(label)
        else:
            labels.append(idna.alabel(idna.uts46_remap(label, std3_rules=False)).decode("ascii"))
    return prefix + ".".join(labels)


def classify_subject(name: str) -> tuple[ClassifiedSubject, str]:
    """Classify a single name given by the user.

    Names are tested in a fixed order: IP address, email address, URI (with both scheme and host) and finally
    hostname. The function returns the classified general name and the (possibly normalized) name:

    >>> classify_subject("127.0.0.1")
    (<IPAddress(value=127.0.0.1)>, '127.0.0.1')
    >>> classify_subject("user@example.com")
    (<RFC822Name(value='user@example.com')>, 'user@example.com')
    >>> classify_subject("https://example.com/path")
    (<UniformResourceIdentifier(value='https://example.com/path')>, 'https://example.com/path')
    >>> classify_subject("*.exämple.com")
    (<DNSName(value='*.xn--exmple-cua.com')>, '*.xn--exmple-cua.com')

    Raises
    ------
    SubjectError
        If the name is neither of the above.
    """
    try:
        return x509.IPAddress(ip_address(name)), name
    except ValueError:
        pass

    if (address := _parse_email(name)) is not None:
        return x509.RFC822Name(address), address

    if _is_uri(name):
        return x509.UniformResourceIdentifier(name), name

    try:
        punycode = encode_hostname(name)
    except idna.IDNAError as ex:
        raise SubjectError(f'"{name}" is not a valid hostname, IP, URL or email: {ex}') from ex

    if not HOSTNAME_RE.match(punycode):
        raise SubjectError(f'"{name}" is not a valid hostname, IP, URL or email')
    return x509.DNSName(punycode), punycode


def classify_subjects(names: list[str]) -> list[ClassifiedSubject]:
    """Classify a list of names given by the user.

    **Note:** Hostnames are replaced in-place in `names` with their IDNA encoded form, so that the caller can
    use the normalized names (e.g. for filenames):

    >>> names = ["bücher.example", "::1"]
    >>> classify_subjects(names)
    [<DNSName(value='xn--bcher-kva.example')>, <IPAddress(value=::1)>]
    >>> names
    ['xn--bcher-kva.example', '::1']

    Classification fails on the first name that cannot be classified, and `names` is not modified in this
    case.
    """
    classified: list[ClassifiedSubject] = []
    normalized: list[str] = []
    for name in names:
        subject, value = classify_subject(name)
        classified.append(subject)
        normalized.append(value)

    names[:] = normalized
    return classified
