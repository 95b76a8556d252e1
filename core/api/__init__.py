from __future__ import annotations

from .models import (
    APIResponse, APIData, SessionInfo, NodeView, ChoiceView, SpeakerView, ErrorItem, ValidationResponse,
)
from .builders import build_api_response, build_node_view, build_validation_response

__all__ = [
    'APIResponse', 'APIData', 'SessionInfo', 'NodeView', 'ChoiceView', 'SpeakerView', 'ErrorItem',
    'ValidationResponse',
    'build_api_response', 'build_node_view', 'build_validation_response'
]
