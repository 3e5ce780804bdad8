#
# Tests for the wire <-> typed value converters
#

from decimal import Decimal
from unittest import TestCase

from octodns_porkbun.exceptions import PorkbunConversionError
from octodns_porkbun.models import (
    Batch,
    DNSRecord,
    Domain,
    Pricing,
    SSLBundle,
    Status,
    StatusEnvelope,
    URLForward,
    pricing_from_wire,
)

from helpers import domain_wire


class TestStatusEnvelope(TestCase):
    def test_known_literals(self):
        env = StatusEnvelope.from_wire({'status': 'SUCCESS'})
        self.assertEqual(Status.SUCCESS, env.status)
        self.assertEqual('', env.message)

        env = StatusEnvelope.from_wire({'status': 'ERROR', 'message': 'nope'})
        self.assertEqual(Status.ERROR, env.status)
        self.assertEqual('nope', env.message)

    def test_anything_else_is_unknown(self):
        for literal in ('success', 'OK', '', None, 1):
            env = StatusEnvelope.from_wire({'status': literal})
            self.assertEqual(Status.UNKNOWN, env.status)
            self.assertEqual(literal, env.raw_status)

        self.assertEqual(Status.UNKNOWN, StatusEnvelope.from_wire({}).status)
        self.assertEqual(
            Status.UNKNOWN, StatusEnvelope.from_wire(['SUCCESS']).status
        )


class TestDomain(TestCase):
    def test_from_wire(self):
        domain = Domain.from_wire(domain_wire())
        self.assertEqual('example.com', domain.domain)
        self.assertEqual('ACTIVE', domain.status)
        self.assertEqual('com', domain.tld)
        self.assertEqual('2018-08-20 17:52:51', domain.create_date)
        self.assertEqual('2023-08-20 17:52:51', domain.expire_date)
        self.assertTrue(domain.security_lock)
        self.assertFalse(domain.not_local)

    def test_numeric_literals(self):
        domain = Domain.from_wire(domain_wire(securityLock=0, notLocal=1))
        self.assertFalse(domain.security_lock)
        self.assertTrue(domain.not_local)

    def test_whois_privacy_and_auto_renew_follow_not_local(self):
        domain = Domain.from_wire(
            domain_wire(whoisPrivacy='0', autoRenew='0', notLocal='1')
        )
        self.assertTrue(domain.whois_privacy)
        self.assertTrue(domain.auto_renew)
        self.assertTrue(domain.not_local)

    def test_invalid_flags_name_the_field(self):
        for field in ('securityLock', 'whoisPrivacy', 'autoRenew', 'notLocal'):
            for literal in ('yes', 'true', '2', '', None, True):
                with self.assertRaises(PorkbunConversionError) as ctx:
                    Domain.from_wire(domain_wire(**{field: literal}))
                self.assertEqual(field, ctx.exception.field)
                self.assertEqual(literal, ctx.exception.value)
                self.assertIn(field, str(ctx.exception))


class TestDNSRecord(TestCase):
    def test_from_wire(self):
        record = DNSRecord.from_wire(
            {
                'id': '106926659',
                'name': 'www.example.com',
                'type': 'MX',
                'content': 'mail.example.com',
                'ttl': '600',
                'prio': '10',
                'notes': '',
            }
        )
        self.assertEqual(106926659, record.id)
        self.assertEqual('www.example.com', record.subdomain)
        self.assertEqual('MX', record.type)
        self.assertEqual('mail.example.com', record.content)
        self.assertEqual(600, record.ttl)
        self.assertEqual(10, record.priority)

    def test_empty_optionals_are_absent(self):
        record = DNSRecord.from_wire(
            {
                'id': '',
                'name': 'example.com',
                'type': 'A',
                'content': '1.2.3.4',
                'ttl': '600',
                'prio': '',
                'notes': None,
            }
        )
        self.assertIsNone(record.id)
        self.assertIsNone(record.priority)
        self.assertEqual('', record.notes)

        record = DNSRecord.from_wire(
            {'name': '', 'type': 'A', 'content': '1.2.3.4', 'ttl': 600}
        )
        self.assertIsNone(record.id)
        self.assertIsNone(record.priority)
        self.assertEqual(600, record.ttl)

    def test_ttl_is_required(self):
        for ttl in ('', None):
            with self.assertRaises(PorkbunConversionError) as ctx:
                DNSRecord.from_wire({'type': 'A', 'ttl': ttl})
            self.assertEqual('ttl', ctx.exception.field)

        with self.assertRaises(PorkbunConversionError) as ctx:
            DNSRecord.from_wire({'type': 'A'})
        self.assertEqual('ttl', ctx.exception.field)

    def test_invalid_numbers(self):
        base = {'name': '', 'type': 'A', 'content': '1.2.3.4', 'ttl': '600'}
        for field, value in (
            ('ttl', 'ten'),
            ('ttl', '6.5'),
            ('id', 'abc'),
            ('prio', 'high'),
            ('prio', True),
            ('ttl', '6_00'),
            ('ttl', ' 600\n'),
            ('ttl', '+600'),
            ('ttl', '٦٠٠'),
            ('id', '9_9'),
            ('id', 12.0),
            ('prio', '1e1'),
        ):
            data = dict(base)
            data[field] = value
            with self.assertRaises(PorkbunConversionError) as ctx:
                DNSRecord.from_wire(data)
            self.assertEqual(field, ctx.exception.field)
            self.assertEqual(value, ctx.exception.value)

    def test_to_wire(self):
        record = DNSRecord(
            subdomain='www', type='A', content='1.2.3.4', ttl=600
        )
        self.assertEqual(
            {
                'name': 'www',
                'type': 'A',
                'content': '1.2.3.4',
                'ttl': '600',
                'prio': '',
                'notes': '',
            },
            record.to_wire(),
        )

        record = DNSRecord(
            subdomain='',
            type='MX',
            content='mail.example.com',
            ttl=3600,
            id=42,
            priority=10,
            notes='primary',
        )
        wire = record.to_wire()
        self.assertEqual('42', wire['id'])
        self.assertEqual('10', wire['prio'])
        self.assertEqual('3600', wire['ttl'])
        self.assertEqual('primary', wire['notes'])

    def test_wire_and_back(self):
        present = DNSRecord(
            subdomain='www',
            type='MX',
            content='mail.example.com',
            ttl=600,
            id=12345,
            priority=0,
        )
        self.assertEqual(present, DNSRecord.from_wire(present.to_wire()))

        absent = DNSRecord(
            subdomain='www', type='A', content='1.2.3.4', ttl=600
        )
        back = DNSRecord.from_wire(absent.to_wire())
        self.assertEqual(absent, back)
        self.assertIsNone(back.id)
        self.assertIsNone(back.priority)

    def test_from_wire_does_not_mutate(self):
        data = {'id': '', 'name': 'a', 'type': 'A', 'ttl': '600', 'prio': ''}
        copy = dict(data)
        DNSRecord.from_wire(data)
        self.assertEqual(copy, data)


class TestURLForward(TestCase):
    def test_from_wire(self):
        forward = URLForward.from_wire(
            {
                'id': '22049209',
                'subdomain': '',
                'location': 'https://porkbun.com',
                'type': 'temporary',
                'includePath': 'no',
                'wildcard': 'yes',
            }
        )
        self.assertEqual(22049209, forward.id)
        self.assertEqual('https://porkbun.com', forward.location)
        self.assertEqual('temporary', forward.type)
        self.assertFalse(forward.include_path)
        self.assertTrue(forward.wildcard)

    def test_one_zero_is_not_accepted(self):
        base = {
            'subdomain': 'blog',
            'location': 'https://example.net',
            'type': 'permanent',
            'includePath': 'yes',
            'wildcard': 'no',
        }
        for field in ('includePath', 'wildcard'):
            for literal in ('1', '0', 'YES', 'true', None):
                data = dict(base)
                data[field] = literal
                with self.assertRaises(PorkbunConversionError) as ctx:
                    URLForward.from_wire(data)
                self.assertEqual(field, ctx.exception.field)
                self.assertEqual(literal, ctx.exception.value)

    def test_invalid_id(self):
        data = {
            'id': '9_9',
            'subdomain': '',
            'location': 'https://example.net',
            'type': 'temporary',
            'includePath': 'no',
            'wildcard': 'no',
        }
        with self.assertRaises(PorkbunConversionError) as ctx:
            URLForward.from_wire(data)
        self.assertEqual('id', ctx.exception.field)
        self.assertEqual('9_9', ctx.exception.value)

    def test_to_wire(self):
        forward = URLForward(
            subdomain='blog',
            location='https://example.net',
            type='permanent',
            include_path=True,
        )
        self.assertEqual(
            {
                'subdomain': 'blog',
                'location': 'https://example.net',
                'type': 'permanent',
                'includePath': 'yes',
                'wildcard': 'no',
            },
            forward.to_wire(),
        )
        self.assertEqual(forward, URLForward.from_wire(forward.to_wire()))

        with self.assertRaises(ValueError):
            URLForward(
                subdomain='', location='', type='', wildcard='yes'
            ).to_wire()


class TestSSLBundleAndPricing(TestCase):
    def test_ssl_bundle(self):
        bundle = SSLBundle.from_wire(
            {
                'intermediatecertificate': 'INTER',
                'certificatechain': 'CHAIN',
                'publickey': 'PUB',
                'privatekey': 'PRIV',
            }
        )
        self.assertEqual('INTER', bundle.intermediate_certificate)
        self.assertEqual('CHAIN', bundle.certificate_chain)
        self.assertEqual('PUB', bundle.public_key)
        self.assertEqual('PRIV', bundle.private_key)

    def test_pricing_keeps_wire_strings(self):
        pricing = pricing_from_wire(
            {
                'com': {
                    'registration': '9.68',
                    'renewal': '9.68',
                    'transfer': '9.68',
                },
                'luxury': {
                    'registration': '1,234.50',
                    'renewal': '1,234.50',
                    'transfer': '1,234.50',
                    'specialType': 'handshake',
                },
            }
        )
        self.assertEqual(
            Pricing('9.68', '9.68', '9.68', None), pricing['com']
        )
        luxury = pricing['luxury']
        self.assertEqual('1,234.50', luxury.registration)
        self.assertEqual('handshake', luxury.special_type)
        self.assertEqual(Decimal('1234.50'), luxury.amount('registration'))
        self.assertEqual(Decimal('9.68'), pricing['com'].amount('transfer'))

        self.assertEqual({}, pricing_from_wire(None))

    def test_pricing_amount_invalid(self):
        with self.assertRaises(PorkbunConversionError) as ctx:
            Pricing('n/a', '1', '1').amount('registration')
        self.assertEqual('registration', ctx.exception.field)

        with self.assertRaises(PorkbunConversionError) as ctx:
            Pricing(None, '1', '1').amount('registration')
        self.assertEqual('registration', ctx.exception.field)

    def test_pricing_entry_not_an_object(self):
        for entry in (None, [], '9.68'):
            with self.assertRaises(PorkbunConversionError) as ctx:
                pricing_from_wire({'com': entry})
            self.assertEqual('com', ctx.exception.field)
            self.assertEqual(entry, ctx.exception.value)

    def test_pricing_not_an_object(self):
        for data in ([], 'com', 42):
            with self.assertRaises(PorkbunConversionError) as ctx:
                pricing_from_wire(data)
            self.assertEqual('pricing', ctx.exception.field)
            self.assertEqual(data, ctx.exception.value)


class TestBatch(TestCase):
    def test_convert_collects_errors(self):
        batch = Batch.convert(
            [
                {'name': 'a', 'type': 'A', 'content': '1.1.1.1', 'ttl': '600'},
                {'name': 'b', 'type': 'A', 'content': '2.2.2.2', 'ttl': 'x'},
                'garbage',
                {'name': 'c', 'type': 'A', 'content': '3.3.3.3', 'ttl': '900'},
            ],
            DNSRecord.from_wire,
        )
        self.assertFalse(batch.ok)
        self.assertEqual(['a', 'c'], [r.subdomain for r in batch])
        self.assertEqual(2, len(batch))
        self.assertEqual(2, len(batch.errors))
        self.assertEqual('ttl', batch.errors[0].field)
        self.assertEqual('item', batch.errors[1].field)

    def test_convert_empty(self):
        batch = Batch.convert(None, DNSRecord.from_wire)
        self.assertTrue(batch.ok)
        self.assertEqual([], batch.items)
