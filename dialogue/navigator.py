from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

import networkx as nx

from .schema import (
    ChoiceInfo,
    ContainsCycles,
    DanglingReferences,
    DialogueGraph,
    DialogueNode,
    DroppedEdge,
    NodeId,
    UnfinishedPaths,
    UnreachableNodes,
    ValidationError,
)
from .toposort import kahn_toposort

logger = logging.getLogger(__name__)

REACHABILITY_METHODS = ("traversal", "scc_membership")


class DialogueGraphNavigator:
    """Traversal view over a ``DialogueGraph``.

    Vertices are ``NodeId``s, edges carry the choice text they were declared
    with. A navigator is disposable: rebuild it from the store with
    ``from_graph`` whenever the store changes, never edit it by hand.

    ``add_node`` wires a node only to targets that are already registered,
    so inserting nodes one at a time is order sensitive: an edge to a node
    inserted later is dropped for good (see ``dropped_edges``).
    ``from_graph`` registers every vertex before wiring any edge and is
    the default way to build one.
    """

    def __init__(self) -> None:
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self.dropped_edges: List[DroppedEdge] = []

    @classmethod
    def from_graph(cls, graph: DialogueGraph, two_pass: bool = True) -> "DialogueGraphNavigator":
        nav = cls()
        if two_pass:
            for node in graph:
                nav.register_node(node)
            for node in graph:
                nav.connect_node(node)
        else:
            for node in graph:
                nav.add_node(node)
        logger.debug(
            f"Navigator built ({'two-pass' if two_pass else 'single-pass'}): "
            f"{nav.graph.number_of_nodes()} nodes, {nav.graph.number_of_edges()} edges, "
            f"{len(nav.dropped_edges)} dropped"
        )
        return nav

    # ------------------------------
    # Construction
    # ------------------------------
    def add_node(self, node: DialogueNode) -> NodeId:
        self.register_node(node)
        self.connect_node(node)
        return node.id

    def register_node(self, node: DialogueNode) -> NodeId:
        self.graph.add_node(node.id, is_ending=node.content.is_ending)
        return node.id

    def connect_node(self, node: DialogueNode) -> int:
        """Materialise the node's outgoing edges; returns how many were added.

        Re-connecting an id replaces its previous edges.
        """
        if node.id not in self.graph:
            return 0
        self.graph.remove_edges_from(list(self.graph.out_edges(node.id, keys=True)))
        self.dropped_edges = [e for e in self.dropped_edges if e.source != node.id]
        added = 0
        for position, (target, text, choice_id) in enumerate(node.targets()):
            if target not in self.graph:
                logger.debug(f"Dropping edge {node.id} -> {target}: target not registered")
                self.dropped_edges.append(DroppedEdge(source=node.id, target=target, choice_text=text))
                continue
            self.graph.add_edge(
                node.id,
                target,
                choice_text=text,
                choice_id=choice_id,
                position=position,
            )
            added += 1
        return added

    # ------------------------------
    # Queries
    # ------------------------------
    def __contains__(self, node_id: object) -> bool:
        return node_id in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def node_ids(self) -> List[NodeId]:
        return list(self.graph.nodes())

    def get_edges(self, node_id: NodeId) -> List[Tuple[NodeId, ChoiceInfo]]:
        if node_id not in self.graph:
            return []
        edges = sorted(self.graph.out_edges(node_id, data=True), key=lambda e: e[2]["position"])
        return [
            (v, ChoiceInfo(choice_text=a["choice_text"], choice_id=a["choice_id"]))
            for _, v, a in edges
        ]

    def get_next_nodes(self, node_id: NodeId) -> List[NodeId]:
        return [target for target, _ in self.get_edges(node_id)]

    def has_cycles(self) -> bool:
        return not kahn_toposort(self.graph).success

    def find_unreachable_nodes(self, start_node: NodeId, method: str = "traversal") -> List[NodeId]:
        """Nodes with no path from ``start_node``.

        ``method="scc_membership"`` flattens the strongly connected components
        into a membership set instead of traversing. Every vertex is in some
        component, so it never reports anything.
        """
        if method == "scc_membership":
            return self._scc_membership_unreachable(start_node)
        if method != "traversal":
            raise ValueError(f"Unknown reachability method: {method!r} (expected one of {REACHABILITY_METHODS})")

        reachable = self._reachable_from(start_node)
        return sorted(n for n in self.graph.nodes() if n not in reachable)

    def find_leaf_nodes(self) -> List[NodeId]:
        return sorted(n for n, d in self.graph.out_degree() if d == 0)

    def find_ending_nodes(self) -> List[NodeId]:
        return sorted(n for n, a in self.graph.nodes(data=True) if a.get("is_ending"))

    def find_unfinished_paths(self) -> List[NodeId]:
        return [n for n in self.find_leaf_nodes() if not self.graph.nodes[n].get("is_ending")]

    def find_dangling_references(self) -> List[Tuple[NodeId, NodeId]]:
        return [(e.source, e.target) for e in self.dropped_edges if e.target not in self.graph]

    def validate(self, start_node: NodeId) -> List[ValidationError]:
        errors: List[ValidationError] = []

        if self.has_cycles():
            errors.append(ContainsCycles())

        unreachable = self.find_unreachable_nodes(start_node)
        if unreachable:
            errors.append(UnreachableNodes(unreachable))

        # Leaves flagged as authored endings are intentional
        unfinished = self.find_unfinished_paths()
        if unfinished:
            errors.append(UnfinishedPaths(unfinished))

        dangling = self.find_dangling_references()
        if dangling:
            errors.append(DanglingReferences(dangling))

        return errors

    # ------------------------------
    # Internals
    # ------------------------------
    def _reachable_from(self, start: NodeId) -> set:
        visited: set = set()
        if start not in self.graph:
            return visited
        stack = [start]
        while stack:
            cur = stack.pop()
            if cur in visited:
                continue
            visited.add(cur)
            for nb in self.graph.successors(cur):
                if nb not in visited:
                    stack.append(nb)
        return visited

    def _scc_membership_unreachable(self, start_node: NodeId) -> List[NodeId]:
        if start_node not in self.graph:
            return []
        members = set(_flatten(nx.kosaraju_strongly_connected_components(self.graph)))
        return sorted(n for n in self.graph.nodes() if n not in members)


def _flatten(components: Iterable[Iterable[NodeId]]) -> Iterable[NodeId]:
    for component in components:
        yield from component


def build_navigator(graph: DialogueGraph, two_pass: bool = True) -> DialogueGraphNavigator:
    return DialogueGraphNavigator.from_graph(graph, two_pass=two_pass)
