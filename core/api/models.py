from __future__ import annotations

from typing import List, Optional, Tuple
from datetime import datetime
from pydantic import BaseModel, Field


class SpeakerView(BaseModel):
    name: str
    portrait: str
    variation: Optional[str] = None


class ChoiceView(BaseModel):
    id: int
    text: str
    next_node: int


class NodeView(BaseModel):
    id: int
    text: str
    speaker: Optional[SpeakerView] = None
    is_ending: bool = False
    choices: List[ChoiceView] = Field(default_factory=list)
    next_node: Optional[int] = None


class SessionInfo(BaseModel):
    id: str
    is_complete: bool
    current_node: Optional[int] = None
    previous_node: Optional[int] = None
    visited_nodes: List[int] = Field(default_factory=list)
    started_at: datetime
    last_updated: datetime


class APIData(BaseModel):
    session: SessionInfo
    node: Optional[NodeView] = None


class APIResponse(BaseModel):
    data: APIData


class ErrorItem(BaseModel):
    code: str
    message: str


class ValidationResponse(BaseModel):
    ok: bool
    start_node: Optional[int] = None
    errors: List[ErrorItem] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    leaf_nodes: List[int] = Field(default_factory=list)
    ending_nodes: List[int] = Field(default_factory=list)
    unreachable_nodes: List[int] = Field(default_factory=list)
    unfinished_nodes: List[int] = Field(default_factory=list)
    dangling_references: List[Tuple[int, int]] = Field(default_factory=list)
    cyclic_nodes: List[int] = Field(default_factory=list)
