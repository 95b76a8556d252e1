from __future__ import annotations

from typing import Optional

from .models import (
    APIData, APIResponse, ChoiceView, ErrorItem, NodeView, SessionInfo, SpeakerView, ValidationResponse,
)
from ..models import DialogueState
from dialogue.schema import Choices, DialogueNode, ValidationReport


def build_node_view(node: DialogueNode) -> NodeView:
    speaker = None
    if node.content.speaker is not None:
        sp = node.content.speaker
        speaker = SpeakerView(name=sp.name, portrait=sp.portrait, variation=sp.variation)

    choices = []
    next_node = None
    if isinstance(node.next, Choices):
        choices = [ChoiceView(id=c.id, text=c.text, next_node=c.next_node) for c in node.next.choices]
    else:
        next_node = node.next.target

    return NodeView(
        id=node.id,
        text=node.content.text,
        speaker=speaker,
        is_ending=node.content.is_ending,
        choices=choices,
        next_node=next_node,
    )


def build_api_response(dialogue_state: DialogueState, node: Optional[DialogueNode]) -> APIResponse:
    session_info = SessionInfo(
        id=dialogue_state.session_id,
        is_complete=dialogue_state.is_complete,
        current_node=dialogue_state.current_node,
        previous_node=dialogue_state.previous_node,
        visited_nodes=list(dialogue_state.visited_nodes),
        started_at=dialogue_state.started_at,
        last_updated=dialogue_state.last_updated,
    )
    return APIResponse(
        data=APIData(
            session=session_info,
            node=build_node_view(node) if node is not None else None,
        )
    )


def build_validation_response(report: ValidationReport) -> ValidationResponse:
    return ValidationResponse(
        ok=report.ok,
        start_node=report.start_node,
        errors=[ErrorItem(code=e.code, message=e.message) for e in report.errors],
        warnings=report.warnings,
        leaf_nodes=report.leaf_nodes,
        ending_nodes=report.ending_nodes,
        unreachable_nodes=report.unreachable_nodes,
        unfinished_nodes=report.unfinished_nodes,
        dangling_references=report.dangling_references,
        cyclic_nodes=report.cyclic_nodes,
    )
