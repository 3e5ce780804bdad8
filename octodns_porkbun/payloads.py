#
#
#

"""Request bodies for authenticated (POST) endpoints.

Each payload embeds :class:`Credentials`, which gives it the
``set_api_key``/``set_secret_api_key`` capability the client needs. A
payload is built fresh for every call and is the only thing the client
mutates.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import DNSRecord, URLForward


@dataclass
class Credentials:
    api_key: str = ''
    secret_api_key: str = ''

    def set_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    def set_secret_api_key(self, secret_api_key: str) -> None:
        self.secret_api_key = secret_api_key

    def _fields(self) -> Dict:
        return {}

    def to_wire(self) -> Dict:
        ret = {'apikey': self.api_key, 'secretapikey': self.secret_api_key}
        ret.update(self._fields())
        return ret

    def __repr__(self):
        # never leak keys into logs or tracebacks
        return f'{self.__class__.__name__}(api_key=***, secret_api_key=***)'


@dataclass(repr=False)
class DomainListRequest(Credentials):
    start: int = 0

    def _fields(self):
        return {'start': self.start}


@dataclass(repr=False)
class NameServersRequest(Credentials):
    ns: List[str] = field(default_factory=list)

    def _fields(self):
        return {'ns': list(self.ns)}


@dataclass(repr=False)
class DNSRecordRequest(Credentials):
    record: Optional[DNSRecord] = None

    def _fields(self):
        return self.record.to_wire()


@dataclass(repr=False)
class URLForwardRequest(Credentials):
    forward: Optional[URLForward] = None

    def _fields(self):
        return self.forward.to_wire()
