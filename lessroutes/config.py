"""Gateway configuration: which countries are routed through which gateway.

Mappings are written as `name=CC1,CC2,...`, either on the command line
(several of them can be joined with `:`) or in the `[gateways]` section of an
ini file:

    [gateways]
    a = US,JP
    b = HK,GB

    [lessroutes]
    default_gateway = a
    conflict_policy = last
"""

import configparser
import typing as t
from dataclasses import dataclass
from pathlib import Path
import logging

from lessroutes.util.net.typ import CountryCode, GatewayLabel

_LOG = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


def _check_country(cc: str) -> CountryCode:
    if len(cc) != 2 or not all('A' <= c <= 'Z' for c in cc):
        raise ConfigError(f"'{cc}' is not a country code")
    return cc


@dataclass(frozen=True)
class GatewayMapping:
    gateway: GatewayLabel
    countries: t.FrozenSet[CountryCode]

    @staticmethod
    def parse(spec: str) -> 'GatewayMapping':
        kv = spec.split('=')
        if len(kv) != 2: raise ConfigError(f"missing '=' in {spec!r}")
        gateway, countries = kv[0].strip(), kv[1].strip()
        if gateway == '': raise ConfigError(f'empty gateway name in {spec!r}')
        return GatewayMapping(gateway, frozenset(
            _check_country(cc.strip()) for cc in countries.split(',')
        ))


def parse_gateway_arg(arg: str) -> t.List[GatewayMapping]:
    return [ GatewayMapping.parse(spec) for spec in arg.split(':') ]


def country_map(
        mappings: t.Iterable[GatewayMapping]
) -> t.Dict[CountryCode, GatewayLabel]:
    """Invert the mappings; a country may only belong to one gateway.

    The order of the result follows the order of the mappings, which is the
    order `routing.choose_default_gateway` breaks ties in.
    """
    ret: t.Dict[CountryCode, GatewayLabel] = {}
    for mapping in mappings:
        for cc in sorted(mapping.countries):
            if cc in ret and ret[cc] != mapping.gateway:
                raise ConfigError(
                    f'{cc} is assigned to both {ret[cc]} and {mapping.gateway}'
                )
            ret[cc] = mapping.gateway
    return ret


def read_config(path: t.Union[Path, str]) -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    # gateway names are case sensitive
    config.optionxform = str # type: ignore
    if not config.read(path, encoding='utf-8'):
        raise ConfigError(f'Could not read config file {path}')
    _LOG.info(f'Read config from {path}')
    return config


def gateways_from_config(
        config: configparser.ConfigParser
) -> t.List[GatewayMapping]:
    if not config.has_section('gateways'): return []
    return [
        GatewayMapping.parse(f'{name}={countries}')
        for name, countries in config.items('gateways')
    ]


def options_from_config(config: configparser.ConfigParser) -> t.Dict[str, str]:
    """The `[lessroutes]` section, keys spelled like the cli options."""
    if not config.has_section('lessroutes'): return {}
    return {
        key.replace('-', '_'): value
        for key, value in config.items('lessroutes')
    }
