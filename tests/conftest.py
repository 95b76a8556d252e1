from pathlib import Path

import pytest

from dialogue.preprocess import load_graph
from dialogue.schema import DialogueGraph
from tests.helpers.graph_factory import line, make_graph

TAVERN_PATH = Path(__file__).resolve().parent.parent / "config" / "tavern_dialogue.json"


@pytest.fixture
def chain_graph() -> DialogueGraph:
    """0 -> 1 -> 2 -> 3, no branching."""
    return make_graph(0, line(0, 1), line(1, 2), line(2, 3), line(3))


@pytest.fixture
def tavern_path() -> Path:
    return TAVERN_PATH


@pytest.fixture
def tavern_graph() -> DialogueGraph:
    return load_graph(str(TAVERN_PATH))
