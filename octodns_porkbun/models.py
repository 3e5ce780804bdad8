#
#
#

"""Typed values returned by the Porkbun API and their wire converters.

The API encodes booleans and integers as JSON strings. Domains use
``'1'``/``'0'``, URL forwards use ``'yes'``/``'no'`` and optional integers
use ``''`` for absent. Each ``from_wire`` accepts exactly those literals and
raises :class:`PorkbunConversionError` for anything else; nothing is ever
defaulted.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Generic, List, Optional, TypeVar

from .exceptions import PorkbunConversionError

T = TypeVar('T')

ONE_ZERO = {'1': True, '0': False}
YES_NO = {'yes': True, 'no': False}

_INT_RE = re.compile(r'-?[0-9]+')


def _literal(value):
    # JSON numbers are accepted where the API sometimes drops the quotes;
    # native booleans are not, they fall through and fail the lookup
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def parse_flag(name, value, table):
    try:
        return table[_literal(value)]
    except (KeyError, TypeError):
        expected = ' or '.join(repr(k) for k in table)
        raise PorkbunConversionError(name, value, f'expected {expected}')


def format_flag(value, table):
    for literal, flag in table.items():
        if flag is value:
            return literal
    raise ValueError(f'not a boolean: {value!r}')


def parse_int(name, value):
    if isinstance(value, bool):
        raise PorkbunConversionError(name, value, 'expected an integer')
    if isinstance(value, int):
        return value
    # int() on its own is more lenient than the API's integer literals
    if not isinstance(value, str) or not _INT_RE.fullmatch(value):
        raise PorkbunConversionError(name, value, 'expected an integer')
    return int(value, 10)


def parse_optional_int(name, value):
    if value is None or value == '':
        return None
    return parse_int(name, value)


def format_optional_int(value):
    return '' if value is None else str(value)


class Status(Enum):
    SUCCESS = 'SUCCESS'
    ERROR = 'ERROR'
    UNKNOWN = 'UNKNOWN'

    @classmethod
    def parse(cls, literal):
        if literal in ('SUCCESS', 'ERROR'):
            return cls(literal)
        return cls.UNKNOWN


@dataclass(frozen=True)
class StatusEnvelope:
    status: Status
    message: str = ''
    # the literal as received, kept for error reporting
    raw_status: Optional[str] = None

    @classmethod
    def from_wire(cls, data):
        if not isinstance(data, dict):
            return cls(status=Status.UNKNOWN)
        raw = data.get('status')
        return cls(
            status=Status.parse(raw),
            message=data.get('message') or '',
            raw_status=raw,
        )


@dataclass
class Batch(Generic[T]):
    """Items converted from a listing response plus per item failures.

    A conversion failure on one item does not drop the others; callers
    decide whether any error invalidates the whole batch.
    """

    items: List[T] = field(default_factory=list)
    errors: List[PorkbunConversionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def extend(self, other: 'Batch[T]') -> None:
        self.items.extend(other.items)
        self.errors.extend(other.errors)

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @classmethod
    def convert(cls, wire_items, converter):
        batch = cls()
        for wire in wire_items or []:
            if not isinstance(wire, dict):
                batch.errors.append(
                    PorkbunConversionError('item', wire, 'expected an object')
                )
                continue
            try:
                batch.items.append(converter(wire))
            except PorkbunConversionError as e:
                batch.errors.append(e)
        return batch


# Domain field -> the wire field its value is read from. The upstream
# listing has historically derived whoisPrivacy and autoRenew from notLocal;
# that mapping is kept until it has been checked against live responses.
# Every wire field is still validated against '1'/'0' on its own.
DOMAIN_FLAG_SOURCES = {
    'security_lock': 'securityLock',
    'whois_privacy': 'notLocal',
    'auto_renew': 'notLocal',
    'not_local': 'notLocal',
}

_DOMAIN_FLAG_WIRE = ('securityLock', 'whoisPrivacy', 'autoRenew', 'notLocal')


@dataclass(frozen=True)
class Domain:
    domain: str
    status: str
    tld: str
    create_date: str
    expire_date: str
    security_lock: bool
    whois_privacy: bool
    auto_renew: bool
    not_local: bool

    @classmethod
    def from_wire(cls, data):
        flags = {
            name: parse_flag(name, data.get(name), ONE_ZERO)
            for name in _DOMAIN_FLAG_WIRE
        }
        return cls(
            domain=data.get('domain', ''),
            status=data.get('status', ''),
            tld=data.get('tld', ''),
            create_date=data.get('createDate', ''),
            expire_date=data.get('expireDate', ''),
            **{
                attr: flags[source]
                for attr, source in DOMAIN_FLAG_SOURCES.items()
            },
        )


@dataclass(frozen=True)
class DNSRecord:
    subdomain: str
    type: str
    content: str
    ttl: int = 600
    id: Optional[int] = None
    priority: Optional[int] = None
    notes: str = ''

    @classmethod
    def from_wire(cls, data):
        if data.get('ttl') in (None, ''):
            raise PorkbunConversionError(
                'ttl', data.get('ttl'), 'ttl is required'
            )
        return cls(
            id=parse_optional_int('id', data.get('id')),
            subdomain=data.get('name', ''),
            type=data.get('type', ''),
            content=data.get('content', ''),
            ttl=parse_int('ttl', data['ttl']),
            priority=parse_optional_int('prio', data.get('prio')),
            notes=data.get('notes') or '',
        )

    def to_wire(self):
        ret = {
            'name': self.subdomain,
            'type': self.type,
            'content': self.content,
            'ttl': str(self.ttl),
            'prio': format_optional_int(self.priority),
            'notes': self.notes,
        }
        if self.id is not None:
            ret['id'] = str(self.id)
        return ret


@dataclass(frozen=True)
class URLForward:
    subdomain: str
    location: str
    type: str
    include_path: bool = False
    wildcard: bool = False
    id: Optional[int] = None

    @classmethod
    def from_wire(cls, data):
        return cls(
            id=parse_optional_int('id', data.get('id')),
            subdomain=data.get('subdomain', ''),
            location=data.get('location', ''),
            type=data.get('type', ''),
            include_path=parse_flag(
                'includePath', data.get('includePath'), YES_NO
            ),
            wildcard=parse_flag('wildcard', data.get('wildcard'), YES_NO),
        )

    def to_wire(self):
        ret = {
            'subdomain': self.subdomain,
            'location': self.location,
            'type': self.type,
            'includePath': format_flag(self.include_path, YES_NO),
            'wildcard': format_flag(self.wildcard, YES_NO),
        }
        if self.id is not None:
            ret['id'] = str(self.id)
        return ret


@dataclass(frozen=True)
class SSLBundle:
    intermediate_certificate: str
    certificate_chain: str
    public_key: str
    private_key: str

    @classmethod
    def from_wire(cls, data):
        return cls(
            intermediate_certificate=data.get('intermediatecertificate', ''),
            certificate_chain=data.get('certificatechain', ''),
            public_key=data.get('publickey', ''),
            private_key=data.get('privatekey', ''),
        )


@dataclass(frozen=True)
class Pricing:
    registration: str
    renewal: str
    transfer: str
    special_type: Optional[str] = None

    @classmethod
    def from_wire(cls, data, tld='pricing'):
        if not isinstance(data, dict):
            raise PorkbunConversionError(tld, data, 'expected an object')
        return cls(
            registration=data.get('registration', ''),
            renewal=data.get('renewal', ''),
            transfer=data.get('transfer', ''),
            special_type=data.get('specialType') or None,
        )

    def amount(self, name):
        '''Parse one of registration, renewal or transfer, e.g. "1,234.56".'''
        value = getattr(self, name)
        try:
            return Decimal(str(value).replace(',', ''))
        except InvalidOperation:
            raise PorkbunConversionError(name, value, 'expected a decimal')


def pricing_from_wire(data) -> Dict[str, Pricing]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PorkbunConversionError('pricing', data, 'expected an object')
    return {tld: Pricing.from_wire(p, tld) for tld, p in data.items()}
