#
#
#

import json
import logging
from typing import Optional

from requests import RequestException, Session, Timeout

from octodns import __VERSION__ as octodns_version

from . import __version__ as package_version
from .exceptions import (
    PorkbunApiError,
    PorkbunConversionError,
    PorkbunDeadlineExceeded,
    PorkbunTransportError,
    PorkbunUnexpectedStatus,
)
from .models import (
    Batch,
    DNSRecord,
    Domain,
    SSLBundle,
    Status,
    StatusEnvelope,
    URLForward,
    parse_int,
    pricing_from_wire,
)
from .payloads import (
    Credentials,
    DNSRecordRequest,
    DomainListRequest,
    NameServersRequest,
    URLForwardRequest,
)
from .protocols import CredentialCarrier


class PorkbunClient(object):
    HOST = 'porkbun.com'
    HOST_IPV4 = 'api-ipv4.porkbun.com'
    API_PATH = 'api/json/v3'
    # domain/listAll returns at most this many domains per call
    PAGE_SIZE = 1000

    def __init__(
        self, api_key, secret_api_key, force_ipv4=False, session=None
    ):
        self.log = logging.getLogger('PorkbunClient')
        host = self.HOST_IPV4 if force_ipv4 else self.HOST
        self.base_url = f'https://{host}/{self.API_PATH}'
        self._credentials = Credentials(api_key, secret_api_key)

        if session is None:
            session = Session()
        session.headers.update(
            {
                'Content-Type': 'application/json',
                'Accept': 'application/json',
                'User-Agent': f'octodns/{octodns_version} octodns-porkbun/{package_version}',
            }
        )
        self._session = session
        self.log.debug(
            '__init__: base_url=%s, api_key=***, secret_api_key=***',
            self.base_url,
        )

    # --- Transport ---------------------------------------------------------

    def _do(self, method, path, body=None, timeout=None):
        url = f'{self.base_url}/{path}'
        data = None
        if body is not None:
            try:
                data = json.dumps(body)
            except (TypeError, ValueError) as e:
                raise PorkbunTransportError(
                    'failed to marshal request', e
                ) from e

        self.log.debug('_do: %s %s', method, url)
        try:
            response = self._session.request(
                method, url, data=data, timeout=timeout
            )
        except Timeout as e:
            context = 'request timed out'
            if timeout is not None:
                context = f'no response within {timeout}s'
            raise PorkbunDeadlineExceeded(context, e) from e
        except RequestException as e:
            raise PorkbunTransportError('failed to send request', e) from e

        try:
            content = response.content
        except RequestException as e:
            raise PorkbunTransportError(
                'failed to read response body', e
            ) from e

        try:
            return json.loads(content)
        except ValueError as e:
            raise PorkbunTransportError(
                f'failed to decode response body (HTTP {response.status_code})',
                e,
            ) from e

    def _check(self, data):
        envelope = StatusEnvelope.from_wire(data)
        if envelope.status is Status.SUCCESS:
            return data
        if envelope.status is Status.ERROR:
            raise PorkbunApiError(envelope.message)
        raise PorkbunUnexpectedStatus(envelope.raw_status)

    def _get(self, path, timeout=None):
        return self._check(self._do('GET', path, timeout=timeout))

    def _post(
        self, path, request: Optional[CredentialCarrier] = None, timeout=None
    ):
        if request is None:
            request = Credentials()
        request.set_api_key(self._credentials.api_key)
        request.set_secret_api_key(self._credentials.secret_api_key)
        return self._check(
            self._do('POST', path, request.to_wire(), timeout=timeout)
        )

    # --- General -----------------------------------------------------------

    def ping(self, *, timeout=None):
        return self._post('ping', timeout=timeout).get('yourIp', '')

    def pricing(self, *, timeout=None):
        data = self._get('pricing/get', timeout=timeout)
        return pricing_from_wire(data.get('pricing'))

    # --- Domains -----------------------------------------------------------

    def name_servers(self, domain, *, timeout=None):
        data = self._post(f'domain/getNs/{domain}', timeout=timeout)
        return list(data.get('ns') or [])

    def update_name_servers(self, domain, ns, *, timeout=None):
        self._post(
            f'domain/updateNs/{domain}',
            NameServersRequest(ns=list(ns)),
            timeout=timeout,
        )

    def domain_list(self, start=0, *, timeout=None):
        data = self._post(
            'domain/listAll', DomainListRequest(start=start), timeout=timeout
        )
        return Batch.convert(data.get('domains'), Domain.from_wire)

    def domains(self, *, timeout=None):
        ret = Batch()

        start = 0
        while True:
            self.log.debug('domains: start=%d', start)
            page = self.domain_list(start, timeout=timeout)
            ret.extend(page)
            # a short page is the only end-of-data signal
            if len(page.items) + len(page.errors) < self.PAGE_SIZE:
                break
            start += self.PAGE_SIZE

        return ret

    def ssl_bundle(self, domain, *, timeout=None):
        data = self._post(f'ssl/retrieve/{domain}', timeout=timeout)
        return SSLBundle.from_wire(data)

    # --- URL forwarding ----------------------------------------------------

    def url_forwards(self, domain, *, timeout=None):
        data = self._post(
            f'domain/getUrlForwarding/{domain}', timeout=timeout
        )
        return Batch.convert(data.get('forwards'), URLForward.from_wire)

    def add_url_forward(self, domain, forward, *, timeout=None):
        self._post(
            f'domain/addUrlForward/{domain}',
            URLForwardRequest(forward=forward),
            timeout=timeout,
        )

    def delete_url_forward(self, domain, id, *, timeout=None):
        # The path is spelled as the API serves it, including its
        # inconsistency with the other URL forwarding endpoints
        self._post(f'domain/deleteUrlForward/{domain}/{id}', timeout=timeout)

    # --- DNS records -------------------------------------------------------

    def dns_records(self, domain, id=None, *, timeout=None):
        path = f'dns/retrieve/{domain}'
        if id is not None:
            path = f'{path}/{id}'
        data = self._post(path, timeout=timeout)
        return Batch.convert(data.get('records'), DNSRecord.from_wire)

    def dns_records_by_name_type(
        self, domain, _type, subdomain=None, *, timeout=None
    ):
        path = f'dns/retrieveByNameType/{domain}/{_type}'
        if subdomain:
            path = f'{path}/{subdomain}'
        data = self._post(path, timeout=timeout)
        return Batch.convert(data.get('records'), DNSRecord.from_wire)

    def create_dns_record(self, domain, record, *, timeout=None):
        data = self._post(
            f'dns/create/{domain}',
            DNSRecordRequest(record=record),
            timeout=timeout,
        )
        if data.get('id') in (None, ''):
            raise PorkbunConversionError('id', data.get('id'), 'id is required')
        return parse_int('id', data['id'])

    def edit_dns_record(self, domain, record, *, timeout=None):
        if record.id is None:
            raise ValueError('edit_dns_record: record.id is required')
        self._post(
            f'dns/edit/{domain}/{record.id}',
            DNSRecordRequest(record=record),
            timeout=timeout,
        )

    def delete_dns_record(self, domain, id, *, timeout=None):
        self._post(f'dns/delete/{domain}/{id}', timeout=timeout)
