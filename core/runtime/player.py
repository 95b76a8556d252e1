from __future__ import annotations

import logging
from typing import List, Optional

from core.models import DialogueState, create_dialogue_state
from dialogue.schema import ChoiceId, Choices, DialogueChoice, DialogueGraph, DialogueNode, NodeId, Single

logger = logging.getLogger(__name__)


class DialoguePlayer:
    """Moves a playback cursor through a DialogueGraph.

    The graph is read only here. Progression on a ``Single`` node follows its
    successor; a node with choices waits for ``choose``. Reaching an explicit
    ending (``Single(None)``, an empty choice list) or a reference to a node
    that does not exist completes the session.
    """

    def __init__(self, dialogue: DialogueGraph):
        self.dialogue = dialogue

    def start(self, session_id: Optional[str] = None) -> DialogueState:
        start = self.dialogue.start_node
        if self.dialogue.get_node(start) is None:
            raise ValueError(f"Start node {start} is not defined in the dialogue")
        state = create_dialogue_state(session_id)
        state.update_node(start)
        logger.info(f"Dialogue session started: {state.session_id} at node {start}")
        return state

    def current(self, state: DialogueState) -> DialogueNode:
        if state.current_node is None:
            raise ValueError(f"Session {state.session_id} has no current node")
        node = self.dialogue.get_node(NodeId(state.current_node))
        if node is None:
            raise KeyError(state.current_node)
        return node

    def available_choices(self, state: DialogueState) -> List[DialogueChoice]:
        node = self.current(state)
        if isinstance(node.next, Choices):
            return list(node.next.choices)
        return []

    def progress(self, state: DialogueState) -> DialogueState:
        self._ensure_active(state)
        node = self.current(state)
        if isinstance(node.next, Choices):
            if node.next.choices:
                raise ValueError(f"Node {node.id} is waiting for a choice")
            return self._finish(state)
        if isinstance(node.next, Single) and node.next.target is None:
            return self._finish(state)
        return self._move(state, node.next.target)

    def choose(self, state: DialogueState, choice_id: ChoiceId) -> DialogueState:
        self._ensure_active(state)
        node = self.current(state)
        choice = node.find_choice(choice_id)
        if choice is None:
            raise ValueError(f"Node {node.id} has no choice {choice_id}")
        logger.debug(f"Session {state.session_id}: choice {choice_id} ({choice.text!r}) on node {node.id}")
        return self._move(state, choice.next_node)

    def _ensure_active(self, state: DialogueState) -> None:
        if state.is_complete:
            raise ValueError(f"Session {state.session_id} is already complete")

    def _move(self, state: DialogueState, target: NodeId) -> DialogueState:
        if self.dialogue.get_node(target) is None:
            logger.warning(f"Session {state.session_id}: node {target} does not exist; ending dialogue")
            return self._finish(state)
        state.update_node(target)
        return state

    def _finish(self, state: DialogueState) -> DialogueState:
        state.complete()
        logger.info(f"Dialogue session complete: {state.session_id}")
        return state
