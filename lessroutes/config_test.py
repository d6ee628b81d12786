from pathlib import Path
import tempfile
import unittest

from lessroutes.config import (
    ConfigError, GatewayMapping, country_map, gateways_from_config,
    options_from_config, parse_gateway_arg, read_config,
)

class TestGatewayConfig(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(
            GatewayMapping.parse('a=US,JP'),
            GatewayMapping('a', frozenset({'US', 'JP'})),
        )
        self.assertEqual(
            GatewayMapping.parse('Office VPN=CN'),
            GatewayMapping('Office VPN', frozenset({'CN'})),
        )
        for bad in ['a', 'a=US=JP', 'a=us', 'a=USA', 'a=', '=US', 'a=U1']:
            with self.assertRaises(ConfigError, msg=bad): GatewayMapping.parse(bad)


    def test_parse_gateway_arg(self):
        self.assertEqual(parse_gateway_arg('a=US:b=HK,GB'), [
            GatewayMapping('a', frozenset({'US'})),
            GatewayMapping('b', frozenset({'HK', 'GB'})),
        ])


    def test_country_map(self):
        self.assertEqual(
            country_map(parse_gateway_arg('a=US,JP:b=HK:a=DE')),
            { 'JP': 'a', 'US': 'a', 'HK': 'b', 'DE': 'a' },
        )
        self.assertEqual(
            list(country_map(parse_gateway_arg('b=HK:a=US')).values()),
            ['b', 'a'],
        )
        with self.assertRaises(ConfigError):
            country_map(parse_gateway_arg('a=US:b=US'))


    def test_read_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'lessroutes.ini'
            path.write_text(
                '[gateways]\n' +
                'Home = US,JP\n' +
                'vpn = CN\n' +
                '\n' +
                '[lessroutes]\n' +
                'default-gateway = Home\n' +
                'output_v4 = out/v4.json\n',
                encoding='utf-8',
            )
            config = read_config(path)

            self.assertEqual(gateways_from_config(config), [
                GatewayMapping('Home', frozenset({'US', 'JP'})),
                GatewayMapping('vpn', frozenset({'CN'})),
            ])
            self.assertEqual(options_from_config(config), {
                'default_gateway': 'Home',
                'output_v4': 'out/v4.json',
            })

            with self.assertRaises(ConfigError): read_config(Path(tmp) / 'missing.ini')
