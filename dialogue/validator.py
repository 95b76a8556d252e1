from __future__ import annotations

import logging
from typing import List, Optional

from .navigator import DialogueGraphNavigator, build_navigator
from .schema import (
    ContainsCycles,
    DanglingReferences,
    DialogueGraph,
    UnfinishedPaths,
    UnreachableNodes,
    ValidationReport,
)
from .toposort import kahn_toposort

logger = logging.getLogger(__name__)


def validate_dialogue(
    graph: DialogueGraph,
    *,
    two_pass: bool = True,
    navigator: Optional[DialogueGraphNavigator] = None,
) -> ValidationReport:
    """Build a navigator for ``graph`` (unless one is given) and run every check."""
    nav = navigator if navigator is not None else build_navigator(graph, two_pass=two_pass)
    start = graph.start_node

    errors = nav.validate(start)
    warnings: List[str] = []

    if start not in nav:
        warnings.append(f"Start node {start} is not defined in the graph.")

    for error in errors:
        logger.debug(f"[{error.code}] {error.message}")

    report = ValidationReport(
        ok=not errors,
        start_node=start,
        errors=errors,
        warnings=warnings,
        leaf_nodes=nav.find_leaf_nodes(),
        ending_nodes=nav.find_ending_nodes(),
    )
    for error in errors:
        if isinstance(error, UnreachableNodes):
            report.unreachable_nodes = list(error.node_ids)
        elif isinstance(error, UnfinishedPaths):
            report.unfinished_nodes = list(error.node_ids)
        elif isinstance(error, DanglingReferences):
            report.dangling_references = list(error.edges)
        elif isinstance(error, ContainsCycles):
            report.cyclic_nodes = kahn_toposort(nav.graph).cyclic_nodes

    return report


def format_report(report: ValidationReport) -> List[str]:
    lines: List[str] = []
    for e in report.errors:
        lines.append(f"[ERROR] {e.code}: {e.message}")
    for w in report.warnings:
        lines.append(f"[WARN] {w}")
    return lines
