#
#
#

import logging
import re
import shlex
from collections import defaultdict
from os import environ

from octodns.provider.base import BaseProvider
from octodns.record import Record
from octodns.record.tlsa import TlsaValue

from .exceptions import (
    PorkbunApiError,
    PorkbunClientException,
    PorkbunConversionError,
    PorkbunDeadlineExceeded,
    PorkbunProviderException,
    PorkbunTransportError,
    PorkbunUnexpectedStatus,
)
from .models import DNSRecord

__version__ = __VERSION__ = '0.1.0'

__all__ = [
    'PorkbunProvider',
    'PorkbunApiError',
    'PorkbunClientException',
    'PorkbunConversionError',
    'PorkbunDeadlineExceeded',
    'PorkbunProviderException',
    'PorkbunTransportError',
    'PorkbunUnexpectedStatus',
]


class PorkbunProvider(BaseProvider):
    SUPPORTS_GEO = False
    SUPPORTS_DYNAMIC = False
    SUPPORTS_ROOT_NS = True
    SUPPORTS = set(
        (
            'A',
            'AAAA',
            'ALIAS',
            'CAA',
            'CNAME',
            'MX',
            'NS',
            'SRV',
            'TLSA',
            'TXT',
        )
    )

    MIN_TTL = 600
    # Name servers live at the registry; getNs reports no TTL for them
    ROOT_NS_TTL = 86400

    API_KEY_RE = re.compile(r'^pk1_[0-9a-f]{64}$')
    SECRET_API_KEY_RE = re.compile(r'^sk1_[0-9a-f]{64}$')

    def __init__(
        self,
        id,
        api_key=None,
        secret_api_key=None,
        force_ipv4=False,
        timeout=30,
        *args,
        **kwargs,
    ):
        self.log = logging.getLogger(f'PorkbunProvider[{id}]')
        self.log.debug(
            '__init__: id=%s, api_key=***, secret_api_key=***, '
            'force_ipv4=%s, timeout=%s',
            id,
            force_ipv4,
            timeout,
        )
        super().__init__(id, *args, **kwargs)

        if api_key is None:
            api_key = environ.get('PORKBUN_API_KEY', '')
        if secret_api_key is None:
            secret_api_key = environ.get('PORKBUN_SECRET_API_KEY', '')
        if not self.API_KEY_RE.match(api_key):
            raise ValueError(
                "Invalid api_key, must be 'pk1_' followed by 64 lowercase "
                "hexadecimal digits"
            )
        if not self.SECRET_API_KEY_RE.match(secret_api_key):
            raise ValueError(
                "Invalid secret_api_key, must be 'sk1_' followed by 64 "
                "lowercase hexadecimal digits"
            )

        self.timeout = timeout
        self._client = self._create_client(api_key, secret_api_key, force_ipv4)

        # Cache structures
        self._domains = None
        self._zone_records = {}

    def _create_client(self, api_key, secret_api_key, force_ipv4):
        from .client import PorkbunClient

        return PorkbunClient(api_key, secret_api_key, force_ipv4=force_ipv4)

    def _append_dot(self, value):
        if value == '@' or value.endswith('.'):
            return value
        return f'{value}.'

    def _strip_dot(self, value):
        return value[:-1] if value.endswith('.') else value

    def _relative_name(self, name, domain):
        # Porkbun reports fully qualified names, the apex as the bare domain
        name = self._strip_dot(name.lower())
        if name == domain:
            return ''
        suffix = f'.{domain}'
        if name.endswith(suffix):
            return name[: -len(suffix)]
        return name

    def _raise_errors(self, context, batch):
        if batch.ok:
            return
        for error in batch.errors:
            self.log.error('%s: %s', context, error)
        raise batch.errors[0]

    def domain_names(self):
        if self._domains is None:
            batch = self._client.domains(timeout=self.timeout)
            self._raise_errors('domain_names', batch)
            self._domains = set(d.domain.lower() for d in batch)
        return self._domains

    def _data_for_multiple(self, _type, records):
        values = [record.content.replace(';', '\\;') for record in records]
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': values,
        }

    _data_for_A = _data_for_multiple
    _data_for_AAAA = _data_for_multiple
    _data_for_TXT = _data_for_multiple

    def _data_for_CAA(self, _type, records):
        values = []
        for record in records:
            raw = record.content
            try:
                flags, tag, value = shlex.split(raw)
                values.append({'flags': int(flags), 'tag': tag, 'value': value})
            except ValueError as e:
                self.log.warning(
                    '_data_for_CAA: failed to parse CAA record %r: %s, '
                    'using fallback values (flags=0, tag=issue)',
                    raw,
                    e,
                )
                values.append({'flags': 0, 'tag': 'issue', 'value': raw})
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': values,
        }

    def _data_for_CNAME(self, _type, records):
        record = records[0]
        return {
            'ttl': record.ttl,
            'type': _type,
            'value': self._append_dot(record.content),
        }

    _data_for_ALIAS = _data_for_CNAME

    def _data_for_MX(self, _type, records):
        values = []
        for record in records:
            values.append(
                {
                    'preference': record.priority or 0,
                    'exchange': self._append_dot(record.content),
                }
            )
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': values,
        }

    def _data_for_NS(self, _type, records):
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': [self._append_dot(r.content) for r in records],
        }

    def _data_for_SRV(self, _type, records):
        values = []
        for record in records:
            weight, port, target = record.content.strip().split()
            values.append(
                {
                    'port': int(port),
                    'priority': record.priority or 0,
                    'target': self._append_dot(target),
                    'weight': int(weight),
                }
            )
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': values,
        }

    def _data_for_TLSA(self, _type, records):
        values = []
        for record in records:
            values.append(TlsaValue.parse_rdata_text(record.content))
        return {
            'ttl': records[0].ttl,
            'type': _type,
            'values': values,
        }

    def list_zones(self):
        self.log.debug('list_zones:')
        return sorted(f'{d}.' for d in self.domain_names())

    def zone_records(self, zone):
        if zone.name not in self._zone_records:
            domain = zone.name[:-1]
            if domain not in self.domain_names():
                return []
            batch = self._client.dns_records(domain, timeout=self.timeout)
            self._raise_errors('zone_records', batch)
            self._zone_records[zone.name] = batch.items

        return self._zone_records[zone.name]

    def populate(self, zone, target=False, lenient=False):
        self.log.debug(
            'populate: name=%s, target=%s, lenient=%s',
            zone.name,
            target,
            lenient,
        )

        domain = zone.name[:-1]
        values = defaultdict(lambda: defaultdict(list))
        for record in self.zone_records(zone):
            _type = record.type
            if _type not in self.SUPPORTS:
                self.log.warning(
                    'populate: skipping unsupported %s record', _type
                )
                continue
            name = self._relative_name(record.subdomain, domain)
            if name == '' and _type == 'NS':
                # root NS is read from the registrar below
                continue
            values[name][_type].append(record)

        before = len(zone.records)
        for name, types in values.items():
            for _type, records in types.items():
                data_for = getattr(self, f'_data_for_{_type}')
                record = Record.new(
                    zone,
                    name,
                    data_for(_type, records),
                    source=self,
                    lenient=lenient,
                )
                zone.add_record(record, lenient=lenient)

        exists = zone.name in self._zone_records
        if exists:
            ns = self._client.name_servers(domain, timeout=self.timeout)
            if ns:
                record = Record.new(
                    zone,
                    '',
                    {
                        'ttl': self.ROOT_NS_TTL,
                        'type': 'NS',
                        'values': [self._append_dot(v.lower()) for v in ns],
                    },
                    source=self,
                    lenient=lenient,
                )
                zone.add_record(record, lenient=lenient)

        self.log.info(
            'populate:   found %s records, exists=%s',
            len(zone.records) - before,
            exists,
        )
        return exists

    def _process_desired_zone(self, desired):
        for record in desired.records:
            if record.ttl < self.MIN_TTL:
                msg = (
                    f'TTL {record.ttl} for {record.fqdn} is below the '
                    f'minimum of {self.MIN_TTL}'
                )
                fallback = f'using {self.MIN_TTL}'
                self.supports_warn_or_except(msg, fallback)
                record = record.copy()
                record.ttl = self.MIN_TTL
                desired.add_record(record, replace=True)

        return super()._process_desired_zone(desired)

    def _record_for(self, record, content, priority=None):
        return DNSRecord(
            subdomain=record.name,
            type=record._type,
            content=content,
            ttl=record.ttl,
            priority=priority,
        )

    def _params_for_multiple(self, record):
        for value in record.values:
            yield self._record_for(record, value.replace('\\;', ';'))

    _params_for_A = _params_for_multiple
    _params_for_AAAA = _params_for_multiple
    _params_for_TXT = _params_for_multiple

    def _params_for_CAA(self, record):
        for value in record.values:
            data = f'{value.flags} {value.tag} "{value.value}"'
            yield self._record_for(record, data)

    def _params_for_single(self, record):
        yield self._record_for(record, self._strip_dot(record.value))

    _params_for_ALIAS = _params_for_single
    _params_for_CNAME = _params_for_single

    def _params_for_MX(self, record):
        for value in record.values:
            yield self._record_for(
                record,
                self._strip_dot(value.exchange),
                priority=value.preference,
            )

    def _params_for_NS(self, record):
        for value in record.values:
            yield self._record_for(record, self._strip_dot(value))

    def _params_for_SRV(self, record):
        for value in record.values:
            target = self._strip_dot(value.target)
            data = f'{value.weight} {value.port} {target}'
            yield self._record_for(record, data, priority=value.priority)

    def _params_for_TLSA(self, record):
        for value in record.values:
            data = (
                f'{value.certificate_usage} {value.selector} {value.matching_type} '
                f'{value.certificate_association_data}'
            )
            yield self._record_for(record, data)

    def _is_root_ns(self, record):
        return record.name == '' and record._type == 'NS'

    def _apply_root_ns(self, domain, record):
        ns = [self._strip_dot(v) for v in record.values]
        self.log.debug('_apply_root_ns: domain=%s, ns=%s', domain, ns)
        self._client.update_name_servers(domain, ns, timeout=self.timeout)

    def _apply_Create(self, domain, change):
        new = change.new
        if self._is_root_ns(new):
            self._apply_root_ns(domain, new)
            return
        params_for = getattr(self, f'_params_for_{new._type}')
        for record in params_for(new):
            self._client.create_dns_record(domain, record, timeout=self.timeout)

    def _apply_Update(self, domain, change):
        if self._is_root_ns(change.new):
            self._apply_root_ns(domain, change.new)
            return
        # It's simpler to delete-then-recreate than to update
        self._apply_Delete(domain, change)
        self._apply_Create(domain, change)

    def _apply_Delete(self, domain, change):
        existing = change.existing
        if self._is_root_ns(existing):
            self.log.warning(
                '_apply_Delete: root NS of %s are managed at the registrar, '
                'not deleting',
                domain,
            )
            return
        for record in self.zone_records(existing.zone):
            if (
                self._relative_name(record.subdomain, domain) == existing.name
                and record.type == existing._type
            ):
                self._client.delete_dns_record(
                    domain, record.id, timeout=self.timeout
                )

    def _apply(self, plan):
        desired = plan.desired
        changes = plan.changes
        self.log.debug(
            '_apply: zone=%s, len(changes)=%d', desired.name, len(changes)
        )

        domain = desired.name[:-1]
        if domain not in self.domain_names():
            raise PorkbunProviderException(
                f'{domain} is not registered in this Porkbun account, '
                'zones cannot be created'
            )

        for change in changes:
            class_name = change.__class__.__name__
            getattr(self, f'_apply_{class_name}')(domain, change)

        # Clear out the cache if any
        self._zone_records.pop(desired.name, None)
