import typing as t

from lessroutes.util.net.addr import CidrBlock, addr_to_ip
from lessroutes.util.net.typ import GatewayLabel, RouteRecord


def route_record(block: CidrBlock, gateway: GatewayLabel) -> RouteRecord:
    return {
        'prefix': str(addr_to_ip(block.base, block.width)),
        'mask': str(addr_to_ip(block.mask, block.width)),
        'length': block.length,
        'gateway': gateway,
    }


def emit(
        entries: t.Iterable[t.Tuple[CidrBlock, GatewayLabel]]
) -> t.List[RouteRecord]:
    return [ route_record(block, gateway) for block, gateway in entries ]
