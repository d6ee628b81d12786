import typing as t
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network

IPAddress = t.Union[IPv4Address, IPv6Address]
IPNetwork = t.Union[IPv4Network, IPv6Network]

GatewayLabel = str
CountryCode = str


class RouteRecord(t.TypedDict):
    prefix: str
    mask: str
    length: int
    gateway: GatewayLabel
