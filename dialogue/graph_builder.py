from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from .navigator import DialogueGraphNavigator, build_navigator
from .preprocess import graph_from_dict, graph_to_dict, load_json
from .schema import DialogueGraph, NodeId, ValidationReport
from .toposort import kahn_toposort
from .validator import format_report, validate_dialogue
from .visualize import draw_dialogue_graph

logger = logging.getLogger(__name__)


class DialogueGraphBuilder:
    """Load a dialogue document, build its navigator and validate it."""

    def __init__(self, two_pass: bool = True) -> None:
        self.two_pass = two_pass
        self.dialogue: Optional[DialogueGraph] = None
        self.navigator: DialogueGraphNavigator = DialogueGraphNavigator()
        self.report: Optional[ValidationReport] = None

    def load_from_json(self, json_path: str) -> bool:
        try:
            raw = load_json(json_path)
            self.dialogue = graph_from_dict(raw)
            logger.info(f"Loaded dialogue: {json_path} ({len(self.dialogue)} nodes)")
            return True
        except FileNotFoundError:
            logger.error(f"Dialogue file not found: {json_path}")
            return False
        except json.JSONDecodeError as e:
            logger.error(f"JSON parse error in {json_path}: {e}")
            return False
        except ValueError as e:
            logger.error(f"Invalid dialogue document {json_path}: {e}")
            return False

    def load_graph(self, dialogue: DialogueGraph) -> None:
        self.dialogue = dialogue

    def build_graph(self) -> bool:
        if self.dialogue is None:
            logger.error("No dialogue loaded.")
            return False

        self.navigator = build_navigator(self.dialogue, two_pass=self.two_pass)
        logger.info(
            f"Navigator built: {self.navigator.graph.number_of_nodes()} nodes, "
            f"{self.navigator.graph.number_of_edges()} edges"
        )

        self.report = validate_dialogue(self.dialogue, navigator=self.navigator)
        for line in format_report(self.report):
            logger.warning(line)
        return self.report.ok

    def detect_cycles(self) -> Dict[str, Any]:
        result = kahn_toposort(self.navigator.graph)
        if result.success:
            logger.info("No cycles: dialogue graph is a DAG")
        else:
            logger.warning(f"Cycle detected; nodes not fully ordered: {result.cyclic_nodes}")
        return {
            "success": result.success,
            "order": result.order,
            "cyclic_nodes": result.cyclic_nodes,
        }

    def get_node_info(self, node_id: NodeId) -> Dict[str, Any]:
        if self.dialogue is None or node_id not in self.dialogue:
            logger.warning(f"Node not found: {node_id}")
            return {}
        payload = graph_to_dict(self.dialogue)
        info = next(n for n in payload["nodes"] if n["id"] == node_id)
        info["successors"] = self.navigator.get_next_nodes(node_id)
        return info

    def export_graph_info(self) -> Dict[str, Any]:
        g = self.navigator.graph
        nodes_payload = [{"id": n, **attrs} for n, attrs in g.nodes(data=True)]
        edges_payload = [
            {"from": u, "to": v, "choice_text": a["choice_text"], "choice_id": a["choice_id"]}
            for u, v, a in g.edges(data=True)
        ]

        cycle_result = kahn_toposort(g)
        graph_stats = {
            "nodes": g.number_of_nodes(),
            "edges": g.number_of_edges(),
            "is_dag": cycle_result.success,
            "dropped_edges": len(self.navigator.dropped_edges),
        }

        report = self.report
        return {
            "start_node": self.dialogue.start_node if self.dialogue is not None else None,
            "nodes": nodes_payload,
            "edges": edges_payload,
            "graph_stats": graph_stats,
            "leaf_nodes": self.navigator.find_leaf_nodes(),
            "valid": report.ok if report is not None else None,
            "errors": [e.message for e in report.errors] if report is not None else [],
        }

    def visualize_graph(self, save_path: str) -> bool:
        if self.dialogue is None:
            return False
        labels = {n.id: f"{n.id}\n{_short(n.content.text)}" for n in self.dialogue}
        return draw_dialogue_graph(self.navigator, save_path, self.dialogue.start_node, labels=labels)

    def get_predecessors(self, node_id: NodeId) -> List[NodeId]:
        if node_id not in self.navigator:
            return []
        return list(self.navigator.graph.predecessors(node_id))

    def get_successors(self, node_id: NodeId) -> List[NodeId]:
        return self.navigator.get_next_nodes(node_id)


def _short(text: str, limit: int = 18) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"
