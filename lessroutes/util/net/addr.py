"""Integer model of IPv4/IPv6 addresses and CIDR blocks.

Addresses are plain python ints of a fixed bit width (32 or 128), bit 0 being
the most significant one. Nothing in here goes through floats, so 128 bit
arithmetic is exact.
"""

from dataclasses import dataclass
from ipaddress import (
    IPv4Address, IPv4Network, IPv6Address, IPv6Network, ip_network,
)
import typing as t

from lessroutes.util.net.typ import IPAddress, IPNetwork

IPVersion = t.Literal[4, 6]

WIDTH: t.Dict[IPVersion, int] = { 4: 32, 6: 128 }
VERSION: t.Dict[int, IPVersion] = { 32: 4, 128: 6 }


class AddressDomainError(ValueError):
    """A block or address outside of what the address space allows.

    This is always a contract violation of the caller (bad registry data or a
    programming error) and is never corrected silently.
    """


def _check_width(width: int):
    if width not in VERSION:
        raise AddressDomainError(f'Unsupported address width {width}')


def mask_of(length: int, width: int) -> int:
    """`length` leading one bits followed by zero bits, `width` bits total."""
    if not 0 <= length <= width:
        raise AddressDomainError(f'Prefix length {length} not in 0..{width}')
    return ((1 << length) - 1) << (width - length)


def bit_at(addr: int, i: int, width: int) -> int:
    if not 0 <= i < width:
        raise AddressDomainError(f'Bit index {i} not in 0..{width - 1}')
    return (addr >> (width - 1 - i)) & 1


def block_of_length(addr: int, length: int, width: int) -> 'CidrBlock':
    return CidrBlock(addr & mask_of(length, width), length, width)


@dataclass(frozen=True, order=True)
class CidrBlock:
    base: int
    length: int
    width: int

    def __post_init__(self):
        _check_width(self.width)
        if not 0 <= self.length <= self.width:
            raise AddressDomainError(
                f'Prefix length {self.length} not in 0..{self.width}'
            )
        if not 0 <= self.base < (1 << self.width):
            raise AddressDomainError(
                f'Address {self.base:#x} does not fit in {self.width} bits'
            )
        if self.base & ~mask_of(self.length, self.width):
            raise AddressDomainError(
                f'Non-canonical block {self.base:#x}/{self.length}: ' +
                'host bits are set'
            )

    @property
    def version(self) -> IPVersion: return VERSION[self.width]

    @property
    def size(self) -> int: return 1 << (self.width - self.length)

    @property
    def last(self) -> int: return self.base + self.size - 1

    @property
    def mask(self) -> int: return mask_of(self.length, self.width)

    def to_network(self) -> IPNetwork:
        if self.width == 32: return IPv4Network((self.base, self.length))
        return IPv6Network((self.base, self.length))

    def __str__(self) -> str:
        return str(self.to_network())

    @staticmethod
    def from_network(net: IPNetwork) -> 'CidrBlock':
        return CidrBlock(
            int(net.network_address), net.prefixlen, WIDTH[net.version]
        )

    @staticmethod
    def parse(text: str) -> 'CidrBlock':
        """Parse `a.b.c.d/n` or `x::/n`. Host bits must not be set."""
        try:
            net = ip_network(text, strict=True)
        except ValueError as e:
            raise AddressDomainError(f'Invalid block {text!r}: {e}') from e
        return CidrBlock.from_network(net)


def block_contains(block: CidrBlock, addr: int) -> bool:
    if block.length == 0: return True
    shift = block.width - block.length
    return (addr >> shift) == (block.base >> shift)


def split(block: CidrBlock) -> t.Tuple[CidrBlock, CidrBlock]:
    """The two halves of `block` (left has bit `length` unset)."""
    if block.length == block.width:
        raise AddressDomainError(f'Can not split single address block {block}')
    length = block.length + 1
    half = 1 << (block.width - length)
    return (
        CidrBlock(block.base, length, block.width),
        CidrBlock(block.base | half, length, block.width),
    )


def addr_from_ip(ip: t.Union[IPAddress, str], width: int) -> int:
    _check_width(width)
    if isinstance(ip, str):
        try:
            ip = IPv4Address(ip) if width == 32 else IPv6Address(ip)
        except ValueError as e:
            raise AddressDomainError(f'Invalid {width} bit address: {e}') from e
    if WIDTH[ip.version] != width:
        raise AddressDomainError(f'{ip} is not a {width} bit address')
    return int(ip)


def addr_to_ip(addr: int, width: int) -> IPAddress:
    _check_width(width)
    if width == 32: return IPv4Address(addr)
    return IPv6Address(addr)
