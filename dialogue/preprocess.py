from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .schema import (
    ChoiceId,
    Choices,
    DialogueChoice,
    DialogueContent,
    DialogueGraph,
    DialogueNode,
    NodeId,
    Single,
    SpeakerInfo,
)

logger = logging.getLogger(__name__)

U64 = Annotated[int, Field(ge=0, lt=2**64)]


class _Doc(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SpeakerDoc(_Doc):
    name: str
    portrait: str = ""
    variation: Optional[str] = None


class ContentDoc(_Doc):
    text: str
    speaker: Optional[SpeakerDoc] = None
    is_ending: bool = False


class ChoiceDoc(_Doc):
    id: U64
    text: str
    next_node: U64


class NextDoc(_Doc):
    single: Optional[U64] = None
    choices: Optional[List[ChoiceDoc]] = None

    @model_validator(mode="after")
    def _one_kind(self) -> "NextDoc":
        if self.single is not None and self.choices is not None:
            raise ValueError("'next' must hold either 'single' or 'choices', not both")
        return self


class NodeDoc(_Doc):
    id: U64
    content: ContentDoc
    next: NextDoc = Field(default_factory=NextDoc)
    editor_position: Tuple[float, float] = (0.0, 0.0)


class DialogueGraphDoc(_Doc):
    start_node: U64
    nodes: List[NodeDoc] = Field(default_factory=list)


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def graph_from_dict(raw: Dict[str, Any]) -> DialogueGraph:
    if not isinstance(raw, dict):
        raise ValueError("Dialogue document must be a JSON object")
    try:
        doc = DialogueGraphDoc.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid dialogue document: {e}") from e
    return doc_to_graph(doc)


def doc_to_graph(doc: DialogueGraphDoc) -> DialogueGraph:
    graph = DialogueGraph(NodeId(doc.start_node))
    for node_doc in doc.nodes:
        if node_doc.id in graph:
            logger.warning(f"Duplicate node id {node_doc.id} in document; later definition wins")
        graph.add_node(_node_from_doc(node_doc))
    return graph


def _node_from_doc(doc: NodeDoc) -> DialogueNode:
    speaker = None
    if doc.content.speaker is not None:
        speaker = SpeakerInfo(
            name=doc.content.speaker.name,
            portrait=doc.content.speaker.portrait,
            variation=doc.content.speaker.variation,
        )
    content = DialogueContent(text=doc.content.text, speaker=speaker, is_ending=doc.content.is_ending)

    if doc.next.choices is not None:
        nxt = Choices([
            DialogueChoice(id=ChoiceId(c.id), text=c.text, next_node=NodeId(c.next_node))
            for c in doc.next.choices
        ])
    else:
        target = doc.next.single
        nxt = Single(NodeId(target) if target is not None else None)

    return DialogueNode(
        id=NodeId(doc.id),
        content=content,
        next=nxt,
        editor_position=tuple(doc.editor_position),
    )


def graph_to_dict(graph: DialogueGraph) -> Dict[str, Any]:
    nodes_payload = []
    for node in sorted(graph, key=lambda n: n.id):
        content: Dict[str, Any] = {"text": node.content.text}
        if node.content.speaker is not None:
            sp = node.content.speaker
            content["speaker"] = {"name": sp.name, "portrait": sp.portrait, "variation": sp.variation}
        if node.content.is_ending:
            content["is_ending"] = True

        if isinstance(node.next, Choices):
            nxt: Dict[str, Any] = {
                "choices": [
                    {"id": c.id, "text": c.text, "next_node": c.next_node}
                    for c in node.next.choices
                ]
            }
        else:
            nxt = {"single": node.next.target}

        nodes_payload.append({
            "id": node.id,
            "content": content,
            "next": nxt,
            "editor_position": list(node.editor_position),
        })
    return {"start_node": graph.start_node, "nodes": nodes_payload}


def load_graph(path: str) -> DialogueGraph:
    return graph_from_dict(load_json(path))


def save_graph(graph: DialogueGraph, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(graph_to_dict(graph), f, ensure_ascii=False, indent=2)
