import argparse
import logging
import typing as t
from pathlib import Path

from lessroutes.caching import CacheMissingError
from lessroutes.config import (
    ConfigError, country_map, gateways_from_config, options_from_config,
    parse_gateway_arg, read_config,
)
from lessroutes.logging_config import logging_setup
from lessroutes.output import write_routes
from lessroutes.routing import RouteJob, compute_all
from lessroutes.routing.trie import CONFLICT_POLICIES
from lessroutes.service.ext import rir_delegations
from lessroutes.util.const import ENV
from lessroutes.util.net.addr import IPVersion

_LOG = logging.getLogger(__name__)

_DEFAULTS = {
    'output_v4': 'routes.v4.json',
    'output_v6': 'routes.v6.json',
    'cache_file': 'delegations.json',
    'conflict_policy': 'last',
}


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lessroutes',
        description='Generate a minimal route table sending the address ' +
        'space of each country to its gateway.',
    )

    parser.add_argument(
        '-g', '--gateway', action='append', default=[], type=parse_gateway_arg,
        help='Gateway name and associated countries, e.g. ' +
        '--gateway a=US,JP --gateway b=HK,GB (or a=US,JP:b=HK,GB)',
    )
    parser.add_argument('--config', type=Path, help='ini file with a ' +
                        '[gateways] and an optional [lessroutes] section')

    parser.add_argument('-4', '--output-v4', help='Output file for IPv4 routes')
    parser.add_argument('--no-v4', action='store_true',
                        help='Do not generate IPv4 routes')
    parser.add_argument('-6', '--output-v6', help='Output file for IPv6 routes')
    parser.add_argument('--no-v6', action='store_true',
                        help='Do not generate IPv6 routes')

    parser.add_argument('-c', '--cache-file',
                        help='Cache file for delegations retrieved from registries')
    parser.add_argument('--no-cache', action='store_true',
                        help='Do not use a cache file')
    update = parser.add_mutually_exclusive_group()
    update.add_argument('--update', action='store_true',
                        help='Force update delegations from registries')
    update.add_argument('--no-update', action='store_true',
                        help='Do not update delegations from registries')

    default = parser.add_mutually_exclusive_group()
    default.add_argument('--no-default-gateway', action='store_true',
                         help='Do not generate a route for 0.0.0.0/0 or ::/0')
    default.add_argument('--default-gateway', metavar='GATEWAY',
                         help='Gateway for all addresses of no configured ' +
                         'country (default: the one giving the fewest routes)')

    parser.add_argument('--conflict-policy', choices=sorted(CONFLICT_POLICIES),
                        help='What to do when a block is assigned to two ' +
                        'gateways: keep the last, keep the first, or fail')
    parser.add_argument('--parallel', action='store_true',
                        help='Compute IPv4 and IPv6 in separate processes')
    parser.add_argument('--progress', action='store_true',
                        help='Show progress bars')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('--log-file', type=Path)
    return parser


def main(argv: t.Optional[t.List[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)

    logging_setup(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )
    _LOG.debug(f'{args}')

    if args.no_cache and (args.update or args.no_update):
        parser.error('--update and --no-update can not be used with --no-cache')

    try:
        config = read_config(args.config) if args.config is not None else ENV
        mappings = gateways_from_config(config) + \
            [ m for arg in args.gateway for m in arg ]
        gateways = country_map(mappings)
    except ConfigError as e:
        parser.error(str(e))
    if len(gateways) == 0: parser.error('no gateways given')

    options = options_from_config(config)
    opt = lambda key: getattr(args, key) if getattr(args, key) is not None \
        else options.get(key, _DEFAULTS.get(key))

    conflict_policy = opt('conflict_policy')
    if conflict_policy not in CONFLICT_POLICIES:
        parser.error(f'invalid conflict policy {conflict_policy!r}')

    default_gateway = opt('default_gateway')
    auto_default = default_gateway is None and not args.no_default_gateway
    if args.no_default_gateway: default_gateway = None

    versions: t.List[IPVersion] = []
    if not args.no_v4: versions.append(4)
    if not args.no_v6: versions.append(6)
    if len(versions) == 0:
        _LOG.warning('Both IPv4 and IPv6 are disabled, nothing to do')
        return 0

    try:
        if args.no_cache:
            delegations = rir_delegations.get_delegations()
        else:
            delegations = rir_delegations.get_delegations_with_cache(
                opt('cache_file'), args.update, args.no_update,
            )
    except CacheMissingError as e:
        _LOG.error(str(e))
        return 1

    _LOG.info('Generating minimum routes')
    jobs: t.List[RouteJob] = [
        {
            'version': version,
            'registry': list(rir_delegations.iter_registry(delegations, version)),
            'gateways': gateways,
            'default_gateway': default_gateway,
            'auto_default': auto_default,
            'conflict_policy': conflict_policy,
            'progress': args.progress,
        } for version in versions
    ]
    routes = compute_all(jobs, parallel=args.parallel)

    for version in versions:
        write_routes(opt(f'output_v{version}'), routes[version])
    return 0


if __name__ == '__main__': raise SystemExit(main())
