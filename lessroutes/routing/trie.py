import logging
import typing as t

from lessroutes.util.net.addr import (
    AddressDomainError, CidrBlock, bit_at, block_of_length,
)
from lessroutes.util.net.typ import GatewayLabel

_LOG = logging.getLogger(__name__)

ConflictPolicy = t.Literal['last', 'first', 'error']
CONFLICT_POLICIES: t.Set[ConflictPolicy] = set(t.get_args(ConflictPolicy))

NIL = -1
ROOT = 0


class GatewayConflictError(AddressDomainError):
    pass


class Conflict(t.NamedTuple):
    block: CidrBlock
    kept: GatewayLabel
    discarded: GatewayLabel


class AssignmentTrie:
    """Binary trie mapping every address of a family to at most one gateway.

    Nodes live in an arena of parallel lists and are referred to by index.
    A node is in one of three states:

    - unassigned: no children and no gateway
    - leaf: no children, the whole block maps to `gateway`
    - split: two children covering the lower and upper half of the block

    Insertions are applied in the order they are made. The most specific
    block wins for the addresses it covers; a block inserted later overwrites
    everything previously inserted at or below its own depth.

    Inserting the exact same block twice with different gateways is a
    conflict, which is resolved according to `conflict_policy`:

    - `'last'`: the later insertion wins
    - `'first'`: the earlier insertion is kept
    - `'error'`: `GatewayConflictError` is raised

    Conflicts are logged and collected in `conflicts` no matter the policy.
    """

    def __init__(self, width: int, conflict_policy: ConflictPolicy = 'last'):
        if conflict_policy not in CONFLICT_POLICIES:
            raise ValueError(f'Unknown conflict policy {conflict_policy!r}')
        self.width = width
        self.conflict_policy = conflict_policy
        self.conflicts: t.List[Conflict] = []

        self.__left: t.List[int] = []
        self.__right: t.List[int] = []
        self.__gateway: t.List[t.Optional[GatewayLabel]] = []
        # gateway given for exactly this node's block by `insert`, survives
        # the node being split by a more specific insertion
        self.__claim: t.List[t.Optional[GatewayLabel]] = []
        self.__free: t.List[int] = []
        self.__inserted = 0

        root = self.__new_node(None)
        assert root == ROOT

    # arena
    # ----------------------------------------------------------------------

    def __new_node(self, gateway: t.Optional[GatewayLabel]) -> int:
        if len(self.__free) != 0:
            node = self.__free.pop()
            self.__left[node] = NIL
            self.__right[node] = NIL
            self.__gateway[node] = gateway
            self.__claim[node] = None
            return node

        self.__left.append(NIL)
        self.__right.append(NIL)
        self.__gateway.append(gateway)
        self.__claim.append(None)
        return len(self.__left) - 1

    def __release_children(self, node: int):
        stack = [ self.__left[node], self.__right[node] ]
        self.__left[node] = NIL
        self.__right[node] = NIL
        while len(stack) != 0:
            n = stack.pop()
            if n == NIL: continue
            stack.append(self.__left[n])
            stack.append(self.__right[n])
            self.__free.append(n)

    def children(self, node: int) -> t.Optional[t.Tuple[int, int]]:
        if self.__left[node] == NIL: return None
        return self.__left[node], self.__right[node]

    def gateway(self, node: int) -> t.Optional[GatewayLabel]:
        return self.__gateway[node]

    def __len__(self) -> int:
        return len(self.__left) - len(self.__free)

    # insertion
    # ----------------------------------------------------------------------

    def __check_block(self, block: CidrBlock):
        if block.width != self.width:
            raise AddressDomainError(
                f'{block} ({block.width} bit) inserted into {self.width} bit trie'
            )

    def __descend_to(self, block: CidrBlock) -> int:
        node = ROOT
        for i in range(block.length):
            if self.__left[node] == NIL:
                # a leaf hands its gateway down to both halves, an unassigned
                # node gets two unassigned halves
                inherited = self.__gateway[node]
                self.__left[node] = self.__new_node(inherited)
                self.__right[node] = self.__new_node(inherited)
                self.__gateway[node] = None
            if bit_at(block.base, i, self.width):
                node = self.__right[node]
            else:
                node = self.__left[node]
        return node

    def insert(self, block: CidrBlock, gateway: GatewayLabel):
        self.__check_block(block)
        node = self.__descend_to(block)

        claim = self.__claim[node]
        if claim is not None and claim != gateway:
            # under 'error' the trie keeps the earlier claim, too
            kept = gateway if self.conflict_policy == 'last' else claim
            discarded = gateway if kept == claim else claim
            self.conflicts.append(Conflict(block, kept, discarded))
            action = 'raising' if self.conflict_policy == 'error' \
                else f'keeping {kept}'
            _LOG.warning(
                f'Conflicting gateways for {block}: {claim} and {gateway}, ' +
                action
            )
            if self.conflict_policy == 'error':
                raise GatewayConflictError(
                    f'{block} assigned to both {claim} and {gateway}'
                )
            if self.conflict_policy == 'first':
                self.__inserted += 1
                return

        self.__release_children(node)
        self.__gateway[node] = gateway
        self.__claim[node] = gateway
        self.__inserted += 1

    def insert_default(self, gateway: GatewayLabel):
        """Assign the whole address space to `gateway`.

        Has to come before any other insertion, it would wipe them otherwise.
        """
        if self.__inserted != 0:
            raise AddressDomainError(
                'The default gateway has to be inserted before any other block'
            )
        self.__gateway[ROOT] = gateway
        # not a claim: a later explicit /0 is an override, not a conflict
        self.__inserted += 1

    # query
    # ----------------------------------------------------------------------

    def lookup(self, addr: int) -> t.Optional[GatewayLabel]:
        node = ROOT
        for i in range(self.width):
            if self.__left[node] == NIL: return self.__gateway[node]
            if bit_at(addr, i, self.width): node = self.__right[node]
            else: node = self.__left[node]
        return self.__gateway[node]

    def lookup_block(self, addr: int) -> t.Optional[CidrBlock]:
        """The block of the leaf or unassigned node that holds `addr`."""
        node, length = ROOT, 0
        while length < self.width and self.__left[node] != NIL:
            if bit_at(addr, length, self.width): node = self.__right[node]
            else: node = self.__left[node]
            length += 1
        if self.__gateway[node] is None: return None
        return block_of_length(addr, length, self.width)

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__} width={self.width} ' +
            f'nodes={len(self)} conflicts={len(self.conflicts)}>'
        )

    @staticmethod
    def from_entries(
            width: int,
            entries: t.Iterable[t.Tuple[CidrBlock, GatewayLabel]],
            conflict_policy: ConflictPolicy = 'last',
    ) -> 'AssignmentTrie':
        trie = AssignmentTrie(width, conflict_policy)
        for block, gateway in entries: trie.insert(block, gateway)
        return trie
