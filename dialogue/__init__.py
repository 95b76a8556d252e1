"""
Dialogue package: branching dialogue graph model, navigator and structural validation
"""

from .schema import (
    NodeId, ChoiceId, SpeakerInfo, DialogueContent, DialogueChoice, Single, Choices,
    DialogueNext, DialogueNode, DialogueGraph, ChoiceInfo, DroppedEdge, CycleDetectionResult,
    ValidationError, ContainsCycles, UnreachableNodes, UnfinishedPaths, DanglingReferences,
    ValidationReport,
)
from .navigator import DialogueGraphNavigator, build_navigator
from .toposort import kahn_toposort
from .validator import validate_dialogue, format_report
from .preprocess import load_json, load_graph, save_graph, graph_from_dict, graph_to_dict
from .graph_builder import DialogueGraphBuilder
from .visualize import draw_dialogue_graph

__all__ = [
    'NodeId', 'ChoiceId', 'SpeakerInfo', 'DialogueContent', 'DialogueChoice', 'Single', 'Choices',
    'DialogueNext', 'DialogueNode', 'DialogueGraph', 'ChoiceInfo', 'DroppedEdge', 'CycleDetectionResult',
    'ValidationError', 'ContainsCycles', 'UnreachableNodes', 'UnfinishedPaths', 'DanglingReferences',
    'ValidationReport',
    'DialogueGraphNavigator', 'build_navigator',
    'kahn_toposort',
    'validate_dialogue', 'format_report',
    'load_json', 'load_graph', 'save_graph', 'graph_from_dict', 'graph_to_dict',
    'DialogueGraphBuilder',
    'draw_dialogue_graph',
]
