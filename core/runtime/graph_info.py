from __future__ import annotations

from dataclasses import dataclass

from dialogue.graph_builder import DialogueGraphBuilder
from dialogue.navigator import DialogueGraphNavigator
from dialogue.schema import DialogueGraph, ValidationReport


@dataclass
class GraphInfo:
    dialogue: DialogueGraph
    navigator: DialogueGraphNavigator
    report: ValidationReport


def load_and_validate(json_path: str, two_pass: bool = True, strict: bool = False) -> GraphInfo:
    """Load a dialogue document, build its navigator, validate, and return the bundle.

    Structural findings are kept in ``report``; with ``strict=True`` any finding raises.
    """
    gb = DialogueGraphBuilder(two_pass=two_pass)
    if not gb.load_from_json(json_path):
        raise ValueError(f"Invalid JSON or failed to load: {json_path}")
    ok = gb.build_graph()
    if strict and not ok:
        raise ValueError("Dialogue validation failed: " + "; ".join(e.message for e in gb.report.errors))

    return GraphInfo(dialogue=gb.dialogue, navigator=gb.navigator, report=gb.report)
