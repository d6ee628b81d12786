import logging
import typing as t

from lessroutes.routing.trie import ROOT, AssignmentTrie
from lessroutes.util.net.addr import CidrBlock
from lessroutes.util.net.typ import GatewayLabel

_LOG = logging.getLogger(__name__)

Entry = t.Tuple[CidrBlock, GatewayLabel]

# (gateway if the subtree reduced to a single entry covering all of it,
#  entries of the subtree)
_Reduced = t.Tuple[t.Optional[GatewayLabel], t.List[Entry]]


def aggregate(trie: AssignmentTrie) -> t.List[Entry]:
    """Collapse `trie` into the fewest non-overlapping same-gateway blocks.

    Post-order walk over an explicit stack (the depth is bounded by the
    address width, but 128 levels of python recursion per call are not
    needed). Two sibling halves are merged into their parent block when both
    reduced to exactly one entry covering the full half with the same
    gateway. A merged subtree looks like a leaf to its parent, so merges
    propagate upwards as far as possible.

    The result is sorted by block base address.
    """
    width = trie.width
    stack: t.List[t.Tuple[int, int, int, bool]] = [ (ROOT, 0, 0, False) ]
    reduced: t.List[_Reduced] = []

    while len(stack) != 0:
        node, base, length, expanded = stack.pop()
        children = trie.children(node)

        if children is None:
            gateway = trie.gateway(node)
            if gateway is None: reduced.append((None, []))
            else: reduced.append(
                    (gateway, [ (CidrBlock(base, length, width), gateway) ])
            )
            continue

        if not expanded:
            half = 1 << (width - length - 1)
            stack.append((node, base, length, True))
            stack.append((children[1], base | half, length + 1, False))
            stack.append((children[0], base, length + 1, False))
            continue

        right_full, right_entries = reduced.pop()
        left_full, left_entries = reduced.pop()
        if left_full is not None and left_full == right_full:
            reduced.append(
                (left_full, [ (CidrBlock(base, length, width), left_full) ])
            )
        else:
            left_entries.extend(right_entries)
            reduced.append((None, left_entries))

    assert len(reduced) == 1, len(reduced)
    entries = reduced[0][1]
    _LOG.debug(f'Aggregated {trie} into {len(entries)} entries')
    return entries
