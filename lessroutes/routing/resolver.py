import logging
import typing as t

from lessroutes.util.net.addr import CidrBlock
from lessroutes.util.net.typ import CountryCode, GatewayLabel

_LOG = logging.getLogger(__name__)


class CountryAssignment(t.NamedTuple):
    block: CidrBlock
    gateway: GatewayLabel
    country: CountryCode


def resolve(
        registry: t.Iterable[t.Tuple[CountryCode, CidrBlock]],
        gateways: t.Mapping[CountryCode, GatewayLabel],
) -> t.Iterator[CountryAssignment]:
    """Attach the gateway of each block's country, in registry order.

    Blocks of countries without a gateway are dropped. Duplicates are passed
    through as they are, overlaps are for the trie to sort out.
    """
    kept, dropped = 0, 0
    for country, block in registry:
        gateway = gateways.get(country)
        if gateway is None:
            dropped += 1
            continue
        kept += 1
        yield CountryAssignment(block, gateway, country)

    _LOG.debug(f'Resolved {kept} blocks, dropped {dropped} without gateway')
