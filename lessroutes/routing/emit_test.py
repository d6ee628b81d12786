import unittest

from lessroutes.routing.emit import emit, route_record
from lessroutes.util.net.addr import CidrBlock

_b = CidrBlock.parse

class TestEmit(unittest.TestCase):

    def test_ipv4(self):
        self.assertEqual(route_record(_b('10.0.0.0/8'), 'a'), {
            'prefix': '10.0.0.0', 'mask': '255.0.0.0', 'length': 8, 'gateway': 'a',
        })
        self.assertEqual(route_record(_b('192.168.1.128/25'), 'b')['mask'],
                         '255.255.255.128')
        self.assertEqual(route_record(_b('0.0.0.0/0'), 'c'), {
            'prefix': '0.0.0.0', 'mask': '0.0.0.0', 'length': 0, 'gateway': 'c',
        })
        self.assertEqual(route_record(_b('1.2.3.4/32'), 'd')['mask'],
                         '255.255.255.255')


    def test_ipv6(self):
        self.assertEqual(route_record(_b('2001:db8::/32'), 'a'), {
            'prefix': '2001:db8::', 'mask': 'ffff:ffff::', 'length': 32,
            'gateway': 'a',
        })
        self.assertEqual(route_record(_b('::/0'), 'b'), {
            'prefix': '::', 'mask': '::', 'length': 0, 'gateway': 'b',
        })
        self.assertEqual(
            route_record(_b('2001:db8::1/128'), 'c')['mask'],
            'ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff',
        )


    def test_emit_keeps_order_and_labels(self):
        routes = emit([ (_b('1.0.0.0/8'), 'Gw'), (_b('2.0.0.0/8'), 'gw') ])
        self.assertEqual([ r['prefix'] for r in routes ], ['1.0.0.0', '2.0.0.0'])
        self.assertEqual([ r['gateway'] for r in routes ], ['Gw', 'gw'])
