from __future__ import annotations

from collections import deque
from typing import Dict, List

import networkx as nx

from .schema import CycleDetectionResult, NodeId


def find_cyclic_nodes(g: nx.MultiDiGraph) -> List[NodeId]:
    # Kahn leftovers include nodes downstream of a cycle; keep only
    # multi-node components and self-loops
    on_cycle = set(nx.nodes_with_selfloops(g))
    for component in nx.strongly_connected_components(g):
        if len(component) > 1:
            on_cycle.update(component)
    return sorted(on_cycle)


def kahn_toposort(g: nx.MultiDiGraph) -> CycleDetectionResult:
    # in_degree counts parallel edges, so decrement once per edge below
    local: Dict[NodeId, int] = dict(g.in_degree())

    q: deque[NodeId] = deque(n for n, d in local.items() if d == 0)
    order: List[NodeId] = []

    while q:
        cur = q.popleft()
        order.append(cur)
        for _, nb in g.out_edges(cur):
            local[nb] -= 1
            if local[nb] == 0:
                q.append(nb)

    success = len(order) == g.number_of_nodes()
    cyclic_nodes = [] if success else find_cyclic_nodes(g)
    return CycleDetectionResult(
        success=success,
        order=order,
        cyclic_nodes=cyclic_nodes,
    )
