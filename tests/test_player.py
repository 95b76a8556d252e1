import pytest

from core.runtime.player import DialoguePlayer
from dialogue.schema import ChoiceId, DialogueGraph, NodeId
from tests.helpers.graph_factory import branch, line, make_graph


def test_start_places_cursor_on_start_node(tavern_graph):
    player = DialoguePlayer(tavern_graph)
    state = player.start(session_id="abc")

    assert state.session_id == "abc"
    assert state.current_node == 1
    assert state.visited_nodes == [1]
    assert not state.is_complete
    assert [c.text for c in player.available_choices(state)] == [
        "An ale, please.",
        "Heard any rumours?",
        "Nothing, thanks.",
    ]


def test_start_without_start_node_raises():
    with pytest.raises(ValueError):
        DialoguePlayer(DialogueGraph(NodeId(1))).start()


def test_choices_then_ending(tavern_graph):
    player = DialoguePlayer(tavern_graph)
    state = player.start()

    player.choose(state, ChoiceId(2))
    assert state.current_node == 3
    assert state.previous_node == 1

    player.choose(state, ChoiceId(1))
    assert player.current(state).content.text.startswith("Talk to the foreman")

    player.progress(state)
    assert state.is_complete
    assert state.visited_nodes == [1, 3, 4]


def test_single_successor_then_empty_choices(tavern_graph):
    player = DialoguePlayer(tavern_graph)
    state = player.start()

    player.choose(state, ChoiceId(1))
    player.progress(state)
    assert state.current_node == 5
    assert player.available_choices(state) == []

    player.progress(state)
    assert state.is_complete


def test_progress_on_choice_node_raises(tavern_graph):
    player = DialoguePlayer(tavern_graph)
    state = player.start()
    with pytest.raises(ValueError):
        player.progress(state)


def test_unknown_choice_raises(tavern_graph):
    player = DialoguePlayer(tavern_graph)
    state = player.start()
    with pytest.raises(ValueError):
        player.choose(state, ChoiceId(99))
    assert state.current_node == 1


def test_completed_session_rejects_input():
    player = DialoguePlayer(make_graph(1, line(1)))
    state = player.start()
    player.progress(state)

    with pytest.raises(ValueError):
        player.progress(state)
    with pytest.raises(ValueError):
        player.choose(state, ChoiceId(1))


def test_dangling_target_ends_dialogue():
    player = DialoguePlayer(make_graph(1, branch(1, [(1, "Go", 99)])))
    state = player.start()

    player.choose(state, ChoiceId(1))
    assert state.is_complete
    assert state.current_node == 1


def test_removed_current_node_raises_key_error(chain_graph):
    player = DialoguePlayer(chain_graph)
    state = player.start()
    chain_graph.remove_node(NodeId(0))

    with pytest.raises(KeyError):
        player.current(state)
