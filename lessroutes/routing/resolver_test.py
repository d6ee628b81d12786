import unittest

from lessroutes.routing.resolver import CountryAssignment, resolve
from lessroutes.util.net.addr import CidrBlock

_b = CidrBlock.parse

class TestResolver(unittest.TestCase):

    def test_resolve(self):
        registry = [
            ('US', _b('3.0.0.0/8')),
            ('DE', _b('5.0.0.0/8')),
            ('JP', _b('1.0.16.0/20')),
            ('US', _b('3.0.0.0/8')),
            ('CN', _b('2001:db8::/32')),
        ]
        gateways = { 'US': 'a', 'JP': 'a', 'CN': 'b' }

        self.assertEqual(list(resolve(registry, gateways)), [
            CountryAssignment(_b('3.0.0.0/8'), 'a', 'US'),
            CountryAssignment(_b('1.0.16.0/20'), 'a', 'JP'),
            CountryAssignment(_b('3.0.0.0/8'), 'a', 'US'),
            CountryAssignment(_b('2001:db8::/32'), 'b', 'CN'),
        ])


    def test_no_gateways(self):
        self.assertEqual(list(resolve([('US', _b('3.0.0.0/8'))], {})), [])
