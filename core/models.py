from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class BaseConfig(BaseModel):
    """Base configuration with common settings"""
    model_config = ConfigDict(
        validate_assignment=True,
    )


class DialogueState(BaseConfig):
    """Playback state of one dialogue session"""
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    current_node: Optional[int] = None
    previous_node: Optional[int] = None
    visited_nodes: List[int] = Field(default_factory=list)

    # Timestamps
    started_at: datetime = Field(default_factory=datetime.now)
    last_updated: datetime = Field(default_factory=datetime.now)

    # Status
    is_complete: bool = False

    def update_node(self, node_id: int) -> None:
        """Move the cursor to node_id"""
        self.previous_node = self.current_node
        self.current_node = node_id
        self.visited_nodes.append(node_id)
        self.last_updated = datetime.now()

    def complete(self) -> None:
        self.is_complete = True
        self.last_updated = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def create_dialogue_state(session_id: Optional[str] = None) -> DialogueState:
    """Factory function for a fresh dialogue state"""
    if session_id:
        return DialogueState(session_id=session_id)
    return DialogueState()
