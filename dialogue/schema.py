from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NewType, Optional, Tuple, Union

NodeId = NewType("NodeId", int)
ChoiceId = NewType("ChoiceId", int)


@dataclass
class SpeakerInfo:
    name: str
    portrait: str
    # e.g. "angry", "happy"
    variation: Optional[str] = None


@dataclass
class DialogueContent:
    text: str
    speaker: Optional[SpeakerInfo] = None
    is_ending: bool = False


@dataclass
class DialogueChoice:
    id: ChoiceId
    text: str
    next_node: NodeId


@dataclass
class Single:
    """Direct successor. ``target=None`` marks an explicit end of dialogue."""

    target: Optional[NodeId] = None


@dataclass
class Choices:
    """Player-facing branching. An empty list also ends the dialogue."""

    choices: List[DialogueChoice] = field(default_factory=list)


DialogueNext = Union[Single, Choices]


@dataclass
class DialogueNode:
    id: NodeId
    content: DialogueContent
    next: DialogueNext = field(default_factory=Single)
    # editor only
    editor_position: Tuple[float, float] = (0.0, 0.0)

    def targets(self) -> List[Tuple[NodeId, str, Optional[ChoiceId]]]:
        """Declared transitions as (target, choice_text, choice_id), in order."""
        if isinstance(self.next, Single):
            if self.next.target is None:
                return []
            return [(self.next.target, "", None)]
        return [(choice.next_node, choice.text, choice.id) for choice in self.next.choices]

    def is_terminal(self) -> bool:
        return not self.targets()

    def find_choice(self, choice_id: ChoiceId) -> Optional[DialogueChoice]:
        if not isinstance(self.next, Choices):
            return None
        for choice in self.next.choices:
            if choice.id == choice_id:
                return choice
        return None


class DialogueGraph:
    """Authored dialogue content: nodes keyed by id plus a start node.

    Storage only. Lookups return ``None`` for unknown ids and nothing is
    validated here; see ``DialogueGraphNavigator.validate``.
    """

    def __init__(self, start_node: NodeId) -> None:
        self.nodes: Dict[NodeId, DialogueNode] = {}
        self.start_node: NodeId = start_node

    @classmethod
    def new(cls, start_node: NodeId) -> "DialogueGraph":
        return cls(start_node)

    def add_node(self, node: DialogueNode) -> None:
        self.nodes[node.id] = node

    def get_node(self, node_id: NodeId) -> Optional[DialogueNode]:
        return self.nodes.get(node_id)

    def get_node_mut(self, node_id: NodeId) -> Optional[DialogueNode]:
        # Same live object as get_node; named for callers that intend to edit it.
        return self.nodes.get(node_id)

    def remove_node(self, node_id: NodeId) -> Optional[DialogueNode]:
        return self.nodes.pop(node_id, None)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[DialogueNode]:
        return iter(self.nodes.values())

    def __repr__(self) -> str:
        return f"DialogueGraph(start_node={self.start_node}, nodes={len(self.nodes)})"


@dataclass
class ChoiceInfo:
    choice_text: str
    choice_id: Optional[ChoiceId] = None


@dataclass
class DroppedEdge:
    source: NodeId
    target: NodeId
    choice_text: str = ""


@dataclass
class CycleDetectionResult:
    success: bool
    order: List[NodeId]
    cyclic_nodes: List[NodeId]


class ValidationError:
    """Base for structural findings reported by ``validate``."""

    code: str = "INVALID"

    @property
    def message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ContainsCycles(ValidationError):
    code = "CONTAINS_CYCLES"

    @property
    def message(self) -> str:
        return "Dialogue graph contains cycles"


@dataclass(frozen=True)
class UnreachableNodes(ValidationError):
    node_ids: Tuple[NodeId, ...]
    code = "UNREACHABLE_NODES"

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_ids", tuple(self.node_ids))

    @property
    def message(self) -> str:
        return f"Found unreachable nodes: {list(self.node_ids)}"


@dataclass(frozen=True)
class UnfinishedPaths(ValidationError):
    node_ids: Tuple[NodeId, ...]
    code = "UNFINISHED_PATHS"

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_ids", tuple(self.node_ids))

    @property
    def message(self) -> str:
        return f"Found unfinished paths ending at: {list(self.node_ids)}"


@dataclass(frozen=True)
class DanglingReferences(ValidationError):
    edges: Tuple[Tuple[NodeId, NodeId], ...]
    code = "DANGLING_REFERENCES"

    def __post_init__(self) -> None:
        object.__setattr__(self, "edges", tuple(tuple(e) for e in self.edges))

    @property
    def message(self) -> str:
        pairs = ", ".join(f"{src} -> {dst}" for src, dst in self.edges)
        return f"Found references to missing nodes: {pairs}"


@dataclass
class ValidationReport:
    ok: bool
    start_node: Optional[NodeId] = None
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    leaf_nodes: List[NodeId] = field(default_factory=list)
    ending_nodes: List[NodeId] = field(default_factory=list)
    unreachable_nodes: List[NodeId] = field(default_factory=list)
    unfinished_nodes: List[NodeId] = field(default_factory=list)
    dangling_references: List[Tuple[NodeId, NodeId]] = field(default_factory=list)
    cyclic_nodes: List[NodeId] = field(default_factory=list)
