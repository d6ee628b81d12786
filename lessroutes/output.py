import json
import typing as t
from pathlib import Path
import logging

from lessroutes.util.net.typ import RouteRecord

_LOG = logging.getLogger(__name__)


def write_routes(path: t.Union[Path, str], routes: t.List[RouteRecord]):
    """Write `routes` as a json array of {prefix, mask, length, gateway}."""
    path = Path(path)
    _LOG.info(f'Writing {len(routes)} routes to {path}')
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([
            {
                'prefix': r['prefix'],
                'mask': r['mask'],
                'length': r['length'],
                'gateway': r['gateway'],
            } for r in routes
        ], f, indent=2)


def read_routes(path: t.Union[Path, str]) -> t.List[RouteRecord]:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
