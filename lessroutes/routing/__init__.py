"""Country to gateway route aggregation.

The pipeline for one address family is

    registry -> resolve -> AssignmentTrie -> aggregate -> emit

IPv4 and IPv6 never share any state, so both families can be computed in
separate worker processes.
"""

import logging
import multiprocessing
import typing as t

from tqdm import tqdm

from lessroutes.routing.aggregate import Entry, aggregate
from lessroutes.routing.emit import emit
from lessroutes.routing.resolver import CountryAssignment, resolve
from lessroutes.routing.trie import (
    AssignmentTrie, ConflictPolicy, GatewayConflictError,
)
from lessroutes.util.benchmark import bench_function
from lessroutes.util.net.addr import WIDTH, CidrBlock, IPVersion
from lessroutes.util.net.typ import CountryCode, GatewayLabel, RouteRecord

_LOG = logging.getLogger(__name__)

Registry = t.Sequence[t.Tuple[CountryCode, CidrBlock]]


def build_trie(
        version: IPVersion,
        registry: t.Iterable[t.Tuple[CountryCode, CidrBlock]],
        gateways: t.Mapping[CountryCode, GatewayLabel],
        default_gateway: t.Optional[GatewayLabel] = None,
        conflict_policy: ConflictPolicy = 'last',
        progress: bool = False,
) -> AssignmentTrie:
    trie = AssignmentTrie(WIDTH[version], conflict_policy)
    if default_gateway is not None: trie.insert_default(default_gateway)

    for assignment in tqdm(
            resolve(registry, gateways),
            f'IPv{version} blocks', unit='block',
            # None: tqdm turns itself off when stderr is not a terminal
            disable=None if progress else True,
    ):
        trie.insert(assignment.block, assignment.gateway)

    if len(trie.conflicts) != 0:
        _LOG.warning(
            f'IPv{version}: {len(trie.conflicts)} conflicting blocks, ' +
            f'resolved with policy "{conflict_policy}"'
        )
    return trie


def aggregate_registry(
        version: IPVersion,
        registry: t.Iterable[t.Tuple[CountryCode, CidrBlock]],
        gateways: t.Mapping[CountryCode, GatewayLabel],
        default_gateway: t.Optional[GatewayLabel] = None,
        conflict_policy: ConflictPolicy = 'last',
        progress: bool = False,
) -> t.List[Entry]:
    return aggregate(build_trie(
        version, registry, gateways,
        default_gateway, conflict_policy, progress,
    ))


def gateway_labels(
        gateways: t.Mapping[CountryCode, GatewayLabel]
) -> t.List[GatewayLabel]:
    """Distinct gateway labels in the order they first appear."""
    return list(dict.fromkeys(gateways.values()))


@bench_function
def choose_default_gateway(
        version: IPVersion,
        registry: Registry,
        gateways: t.Mapping[CountryCode, GatewayLabel],
        conflict_policy: ConflictPolicy = 'last',
) -> t.Optional[GatewayLabel]:
    """The gateway that, used as default, gives the shortest route table.

    Ties go to the gateway that comes first in `gateways`. `None` if there
    are no gateways at all.
    """
    best: t.Optional[GatewayLabel] = None
    best_count = 0
    for label in gateway_labels(gateways):
        count = len(aggregate_registry(
            version, registry, gateways, label, conflict_policy
        ))
        _LOG.debug(f'IPv{version}: default gateway {label} -> {count} routes')
        if best is None or count < best_count:
            best, best_count = label, count

    if best is not None:
        _LOG.info(
            f'IPv{version}: using {best} as default gateway ({best_count} routes)'
        )
    return best


@bench_function
def compute_routes(
        version: IPVersion,
        registry: Registry,
        gateways: t.Mapping[CountryCode, GatewayLabel],
        default_gateway: t.Optional[GatewayLabel] = None,
        auto_default: bool = False,
        conflict_policy: ConflictPolicy = 'last',
        progress: bool = False,
) -> t.List[RouteRecord]:
    """Minimal route table of one address family.

    With `auto_default`, `default_gateway` is ignored and the gateway giving
    the fewest routes is used as default instead.
    """
    if auto_default:
        default_gateway = choose_default_gateway(
            version, registry, gateways, conflict_policy
        )

    routes = emit(aggregate_registry(
        version, registry, gateways,
        default_gateway, conflict_policy, progress,
    ))
    _LOG.info(f'IPv{version}: {len(routes)} routes')
    return routes


class RouteJob(t.TypedDict):
    version: IPVersion
    registry: Registry
    gateways: t.Mapping[CountryCode, GatewayLabel]
    default_gateway: t.Optional[GatewayLabel]
    auto_default: bool
    conflict_policy: ConflictPolicy
    progress: bool


def _compute_routes_worker(job: RouteJob) -> t.List[RouteRecord]:
    return compute_routes(**job)


def compute_all(
        jobs: t.List[RouteJob], parallel: bool = False,
) -> t.Dict[IPVersion, t.List[RouteRecord]]:
    if parallel and len(jobs) > 1:
        with multiprocessing.Pool(len(jobs)) as p:
            results = p.map(_compute_routes_worker, jobs)
    else:
        results = [ _compute_routes_worker(job) for job in jobs ]

    return { job['version']: res for job, res in zip(jobs, results) }


__all__ = [
    'AssignmentTrie', 'CountryAssignment', 'GatewayConflictError', 'RouteJob',
    'aggregate', 'aggregate_registry', 'build_trie', 'choose_default_gateway',
    'compute_all', 'compute_routes', 'emit', 'gateway_labels', 'resolve',
]
