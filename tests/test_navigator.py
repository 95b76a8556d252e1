import pytest

from dialogue.navigator import DialogueGraphNavigator
from dialogue.schema import (
    ContainsCycles,
    DanglingReferences,
    DialogueGraph,
    NodeId,
    UnfinishedPaths,
    UnreachableNodes,
)
from tests.helpers.graph_factory import branch, line, make_graph


def test_empty_graph_is_vacuously_valid():
    nav = DialogueGraphNavigator.from_graph(DialogueGraph(NodeId(1)))

    assert not nav.has_cycles()
    assert nav.find_leaf_nodes() == []
    assert nav.find_unreachable_nodes(NodeId(1)) == []
    assert nav.validate(NodeId(1)) == []


def test_chain_has_single_leaf_and_everything_reachable(chain_graph):
    nav = DialogueGraphNavigator.from_graph(chain_graph)

    assert not nav.has_cycles()
    assert nav.find_leaf_nodes() == [3]
    assert nav.find_unreachable_nodes(NodeId(0)) == []
    assert nav.get_next_nodes(NodeId(1)) == [2]


def test_back_edge_is_a_cycle(chain_graph):
    chain_graph.get_node_mut(NodeId(3)).next.target = NodeId(0)
    nav = DialogueGraphNavigator.from_graph(chain_graph)

    assert nav.has_cycles()
    assert ContainsCycles() in nav.validate(NodeId(0))


def test_self_loop_is_a_cycle():
    nav = DialogueGraphNavigator.from_graph(make_graph(1, line(1, 1)))
    assert nav.has_cycles()


def test_single_pass_drops_edge_to_later_node():
    nav = DialogueGraphNavigator()
    nav.add_node(line(1, 2))
    nav.add_node(line(2, ending=True))

    assert nav.get_next_nodes(NodeId(1)) == []
    assert [(e.source, e.target) for e in nav.dropped_edges] == [(1, 2)]
    # Never retried once the target shows up
    assert nav.find_leaf_nodes() == [1, 2]


def test_single_pass_keeps_edge_when_target_inserted_first():
    nav = DialogueGraphNavigator()
    nav.add_node(line(2, ending=True))
    nav.add_node(line(1, 2))

    assert nav.get_next_nodes(NodeId(1)) == [2]
    assert nav.dropped_edges == []


def test_two_pass_keeps_forward_edges():
    graph = make_graph(1, line(1, 2), line(2, ending=True))

    single = DialogueGraphNavigator.from_graph(graph, two_pass=False)
    two = DialogueGraphNavigator.from_graph(graph)

    assert single.get_next_nodes(NodeId(1)) == []
    assert two.get_next_nodes(NodeId(1)) == [2]
    assert two.validate(NodeId(1)) == []


def test_disconnected_node_is_unreachable():
    graph = make_graph(1, line(1, 2), line(2, ending=True), line(3, ending=True))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.find_unreachable_nodes(NodeId(1)) == [3]
    assert nav.validate(NodeId(1)) == [UnreachableNodes([NodeId(3)])]


def test_scc_membership_method_never_reports_unreachable():
    graph = make_graph(1, line(1, 2), line(2, ending=True), line(3, ending=True))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.find_unreachable_nodes(NodeId(1), method="scc_membership") == []
    assert nav.find_unreachable_nodes(NodeId(99), method="scc_membership") == []


def test_unknown_reachability_method_raises():
    nav = DialogueGraphNavigator.from_graph(make_graph(1, line(1)))
    with pytest.raises(ValueError):
        nav.find_unreachable_nodes(NodeId(1), method="bfs")


def test_missing_start_makes_every_node_unreachable():
    nav = DialogueGraphNavigator.from_graph(make_graph(99, line(1, 2), line(2)))
    assert nav.find_unreachable_nodes(NodeId(99)) == [1, 2]


def test_empty_choices_is_a_leaf():
    graph = make_graph(1, branch(1, [(1, "Go", 2)]), branch(2, []))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.find_leaf_nodes() == [2]
    assert nav.validate(NodeId(1)) == [UnfinishedPaths([NodeId(2)])]


def test_marked_endings_are_not_unfinished():
    graph = make_graph(1, branch(1, [(1, "Go", 2)]), branch(2, [], ending=True))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.find_leaf_nodes() == [2]
    assert nav.find_ending_nodes() == [2]
    assert nav.find_unfinished_paths() == []
    assert nav.validate(NodeId(1)) == []


def test_get_next_nodes_follows_declared_choices():
    node = branch(1, [(10, "Left", 2), (11, "Right", 3), (12, "Also left", 2)])
    graph = make_graph(1, node, line(2, ending=True), line(3, ending=True))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.get_next_nodes(NodeId(1)) == [2, 3, 2]
    edges = nav.get_edges(NodeId(1))
    assert [(target, info.choice_text, info.choice_id) for target, info in edges] == [
        (2, "Left", 10),
        (3, "Right", 11),
        (2, "Also left", 12),
    ]


def test_single_successor_edge_has_empty_label(chain_graph):
    nav = DialogueGraphNavigator.from_graph(chain_graph)
    [(target, info)] = nav.get_edges(NodeId(0))

    assert target == 1
    assert info.choice_text == ""
    assert info.choice_id is None


def test_get_next_nodes_for_unknown_id_is_empty(chain_graph):
    nav = DialogueGraphNavigator.from_graph(chain_graph)
    assert nav.get_next_nodes(NodeId(42)) == []
    assert nav.get_next_nodes(NodeId(3)) == []


def test_dangling_reference_is_reported():
    graph = make_graph(1, branch(1, [(1, "Go", 2), (2, "Nowhere", 99)]), line(2, ending=True))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.get_next_nodes(NodeId(1)) == [2]
    assert nav.validate(NodeId(1)) == [DanglingReferences([(NodeId(1), NodeId(99))])]


def test_all_checks_run_together():
    graph = make_graph(1, line(1, 2), line(2, 1), line(3))
    nav = DialogueGraphNavigator.from_graph(graph)

    assert nav.validate(NodeId(1)) == [
        ContainsCycles(),
        UnreachableNodes([NodeId(3)]),
        UnfinishedPaths([NodeId(3)]),
    ]


def test_validate_does_not_mutate(chain_graph):
    nav = DialogueGraphNavigator.from_graph(chain_graph)
    before = (nav.graph.number_of_nodes(), nav.graph.number_of_edges())

    nav.validate(NodeId(0))
    nav.validate(NodeId(2))

    assert (nav.graph.number_of_nodes(), nav.graph.number_of_edges()) == before


def test_reinserting_a_node_replaces_its_edges():
    nav = DialogueGraphNavigator()
    nav.add_node(line(2, ending=True))
    nav.add_node(line(1, 2))
    nav.add_node(line(1, 2))

    assert nav.get_next_nodes(NodeId(1)) == [2]

    nav.add_node(line(1, 3))
    assert nav.get_next_nodes(NodeId(1)) == []
    assert nav.find_dangling_references() == [(1, 3)]
