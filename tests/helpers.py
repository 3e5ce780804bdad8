#
# Shared fixtures: a fake requests session and canned wire payloads
#

import json
from unittest import TestCase
from unittest.mock import Mock

from octodns_porkbun.client import PorkbunClient

API_KEY = 'pk1_' + 'a' * 64
SECRET_API_KEY = 'sk1_' + 'b' * 64


def response(body, status_code=200):
    content = body if isinstance(body, bytes) else json.dumps(body).encode()
    return Mock(content=content, status_code=status_code)


def domain_wire(**kwargs):
    data = {
        'domain': 'example.com',
        'status': 'ACTIVE',
        'tld': 'com',
        'createDate': '2018-08-20 17:52:51',
        'expireDate': '2023-08-20 17:52:51',
        'securityLock': '1',
        'whoisPrivacy': '1',
        'autoRenew': '0',
        'notLocal': '0',
    }
    data.update(kwargs)
    return data


class ClientTestCase(TestCase):
    def client(self, *bodies, force_ipv4=False):
        session = Mock()
        session.headers = {}
        session.request.side_effect = [
            b if isinstance(b, Mock) else response(b) for b in bodies
        ]
        client = PorkbunClient(
            API_KEY, SECRET_API_KEY, force_ipv4=force_ipv4, session=session
        )
        return client, session

    def sent(self, session, index=-1):
        call = session.request.call_args_list[index]
        method, url = call.args
        data = call.kwargs['data']
        return method, url, json.loads(data) if data is not None else None
