from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from ipaddress import IPv4Address, ip_network, summarize_address_range
from itertools import groupby
from pathlib import Path
import logging
import typing as t
import csv

from lessroutes.caching import CacheMissingError, JSONFileCache
from lessroutes.util.benchmark import bench_function
from lessroutes.util.net.addr import CidrBlock, IPVersion
from lessroutes.util.net.download import download_text
from lessroutes.util.net.typ import CountryCode, IPNetwork

RIR = t.Literal['apnic', 'arin', 'ripencc', 'lacnic', 'afrinic']

DELEGATION_URLS: t.Dict[RIR, str] = {
    'apnic': 'https://ftp.apnic.net/stats/apnic/delegated-apnic-latest',
    'arin': 'https://ftp.arin.net/pub/stats/arin/delegated-arin-extended-latest',
    'ripencc': 'https://ftp.ripe.net/pub/stats/ripencc/delegated-ripencc-extended-latest',
    'lacnic': 'https://ftp.lacnic.net/pub/stats/lacnic/delegated-lacnic-latest',
    'afrinic': 'https://ftp.afrinic.net/pub/stats/afrinic/delegated-afrinic-latest',
}

CACHE_MAX_AGE = timedelta(hours=24)

_LOG = logging.getLogger(__name__)


class Delegations(t.TypedDict):
    # country code -> networks in cidr notation, in registry order
    by_country: t.Dict[CountryCode, t.List[str]]


def parse_delegations(lines: t.Iterable[str]) -> t.Iterator[t.Tuple[CountryCode, IPNetwork]]:
    """Address blocks of a delegation file, one `(country, network)` each.

    See https://ftp.ripe.net/pub/stats/ripencc/RIR-Statistics-Exchange-Format.txt
    for the format. Only allocated or assigned ipv4/ipv6 records are used.
    IPv4 records give a start address and an address count, which is not
    necessarily a power of two, so they can come out as several networks.
    """

    def _csv_iter() -> t.Iterator[str]:
        for line in lines:
            if line.startswith('#') or line.strip() == '': continue
            yield line

    for line in csv.reader(_csv_iter(), delimiter='|'):
        # version header: 2|apnic|20231017|...
        if len(line) >= 1 and line[0][:1].isdigit(): continue
        if len(line) >= 6 and line[5] == 'summary': continue
        if len(line) < 7: raise ValueError(f'Truncated line: {line}')
        if line[2] not in ('ipv4', 'ipv6'): continue
        if line[6] not in ('allocated', 'assigned'): continue

        try:
            cc, start, value = line[1], line[3], int(line[4])
            assert value > 0, line
            if line[2] == 'ipv4':
                first = IPv4Address(start)
                for net in summarize_address_range(first, first + (value - 1)):
                    yield cc, net
            else:
                yield cc, ip_network((start, value))
        except ValueError:
            _LOG.error(f'Could not parse line: {line}')
            raise


def group_by_country(
        pairs: t.Iterable[t.Tuple[CountryCode, IPNetwork]]
) -> Delegations:
    # stable, so blocks of one country keep their registry order
    ordered = sorted(pairs, key=lambda el: el[0])
    return { 'by_country': {
        cc: [ str(net) for _, net in nets ]
        for cc, nets in groupby(ordered, key=lambda el: el[0])
    } }


@bench_function
def get_delegations(
        rirs: t.Iterable[RIR] = tuple(DELEGATION_URLS)
) -> Delegations:
    rirs = list(rirs)
    _LOG.info('Downloading latest delegations from registries')
    with ThreadPoolExecutor(max_workers=len(rirs) or 1) as executor:
        contents = list(executor.map(
            lambda rir: download_text(DELEGATION_URLS[rir]), rirs
        ))

    pairs: t.List[t.Tuple[CountryCode, IPNetwork]] = []
    for rir, content in zip(rirs, contents):
        before = len(pairs)
        pairs.extend(parse_delegations(content.splitlines()))
        _LOG.info(f'{rir}: {len(pairs) - before} address blocks')
    return group_by_country(pairs)


def get_delegations_with_cache(
        cache_file: t.Union[Path, str],
        update: bool = False,
        no_update: bool = False,
        getter: t.Callable[[], Delegations] = get_delegations,
) -> Delegations:
    """Delegations from `cache_file`, refreshed when older than a day.

    - `update`: always download and rewrite the cache
    - `no_update`: never download, the cache file has to exist
    """
    assert not (update and no_update)
    cache = JSONFileCache(cache_file, getter, max_age=CACHE_MAX_AGE)

    if no_update:
        if not cache.exists: raise CacheMissingError(
                f'Cache file {cache_file} is not present but updating is disabled'
        )
        return t.cast(Delegations, cache.load())

    if update and cache.exists: cache.invalidate()
    return t.cast(Delegations, cache.get())


def iter_registry(
        delegations: Delegations, version: IPVersion,
) -> t.Iterator[t.Tuple[CountryCode, CidrBlock]]:
    """`(country, block)` pairs of one family, sorted by country."""
    for cc in sorted(delegations['by_country']):
        for net in delegations['by_country'][cc]:
            block = CidrBlock.parse(net)
            if block.version == version: yield cc, block
