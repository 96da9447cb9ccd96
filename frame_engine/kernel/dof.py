# frame_engine/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing
=======================================

PURPOSE:
--------
Maps (node_id, local_dof) to a row/column of the global matrices. This is the
one thing that changes between the 2D-reduced and the 3D analysis:

    2D Frame:  3 DOF/node (ux, uy, rz)
    3D Frame:  6 DOF/node (ux, uy, uz, rx, ry, rz)

Node ids are whatever the caller used (ints, strings); the manager numbers
them in the order given, so node k owns rows [k*dpn, (k+1)*dpn).

USAGE:
------
    dof = DOFManager(dof_per_node=6, node_ids=["A", "B", "C"])
    dof.idx("B", 2)              # → 8  (uz of the second node)
    dof.element_dof_map(["A", "C"])
    # → [0, 1, 2, 3, 4, 5, 12, 13, 14, 15, 16, 17]
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Sequence, Tuple


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for a fixed, ordered set of nodes.

    Attributes:
    -----------
    dof_per_node : int
        3 for the 2D frame, 6 for the 3D frame
    node_ids : Sequence
        Node identifiers in numbering order

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=3, node_ids=[10, 20])
    >>> dof.idx(20, 1)
    4
    >>> dof.ndof
    6
    """
    dof_per_node: int
    node_ids: Sequence[Hashable] = ()
    _index: Dict[Hashable, int] = field(init=False, repr=False)

    def __post_init__(self):
        self.node_ids = tuple(self.node_ids)
        self._index = {nid: k for k, nid in enumerate(self.node_ids)}
        if len(self._index) != len(self.node_ids):
            raise ValueError("DOFManager: node ids must be unique")

    @property
    def n_nodes(self) -> int:
        return len(self.node_ids)

    @property
    def ndof(self) -> int:
        """Total number of DOFs (size of K)."""
        return self.dof_per_node * len(self.node_ids)

    def index_of(self, node_id: Hashable) -> int:
        try:
            return self._index[node_id]
        except KeyError:
            raise KeyError(f"Unknown node id {node_id!r}") from None

    def idx(self, node_id: Hashable, local_dof: int) -> int:
        """
        Global DOF index for a node's local DOF.

        local_dof is 0..dof_per_node-1 in the analysis' own ordering
        (2D: 0=ux, 1=uy, 2=rz; 3D: 0=ux ... 5=rz).
        """
        if not 0 <= local_dof < self.dof_per_node:
            raise IndexError(f"local_dof {local_dof} out of range for {self.dof_per_node} DOF/node")
        return self.dof_per_node * self.index_of(node_id) + local_dof

    def node_dofs(self, node_id: Hashable) -> List[int]:
        """
        All global DOF indices of one node.

        >>> DOFManager(dof_per_node=3, node_ids=[0, 1, 2]).node_dofs(2)
        [6, 7, 8]
        """
        base = self.dof_per_node * self.index_of(node_id)
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: Sequence[Hashable]) -> List[int]:
        """
        Flattened global DOF indices of an element's nodes, used to scatter
        element matrices into (and gather vectors from) the global system.
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def locate(self, global_dof: int) -> Tuple[Hashable, int]:
        """Inverse of idx: (node_id, local_dof) for a global DOF index."""
        k, local = divmod(int(global_dof), self.dof_per_node)
        return self.node_ids[k], local
