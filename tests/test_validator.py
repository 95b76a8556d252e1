import pytest

from dialogue.schema import DialogueGraph, NodeId
from dialogue.validator import format_report, validate_dialogue
from tests.helpers.graph_factory import branch, line, make_graph


def test_tavern_dialogue_is_valid(tavern_graph):
    report = validate_dialogue(tavern_graph)

    assert report.ok
    assert report.errors == []
    assert report.leaf_nodes == [4, 5]
    assert report.ending_nodes == [4, 5]
    assert format_report(report) == []


def test_empty_graph_is_ok_but_warns_about_start():
    report = validate_dialogue(DialogueGraph(NodeId(1)))

    assert report.ok
    assert report.warnings == ["Start node 1 is not defined in the graph."]


def test_report_collects_every_finding():
    graph = make_graph(
        1,
        branch(1, [(1, "Loop", 2), (2, "Lost", 99)]),
        line(2, 1),
        line(3),
    )
    report = validate_dialogue(graph)

    assert not report.ok
    assert [e.code for e in report.errors] == [
        "CONTAINS_CYCLES",
        "UNREACHABLE_NODES",
        "UNFINISHED_PATHS",
        "DANGLING_REFERENCES",
    ]
    assert report.cyclic_nodes == [1, 2]
    assert report.unreachable_nodes == [3]
    assert report.unfinished_nodes == [3]
    assert report.dangling_references == [(1, 99)]


def test_single_pass_report_differs_from_two_pass():
    graph = make_graph(1, line(1, 2), line(2, ending=True))

    assert validate_dialogue(graph).ok
    single = validate_dialogue(graph, two_pass=False)
    assert not single.ok
    assert single.unreachable_nodes == [2]
    assert single.unfinished_nodes == [1]
    # lost to ordering, not dangling
    assert single.dangling_references == []


def test_format_report_lines():
    report = validate_dialogue(make_graph(5, line(1)))
    lines = format_report(report)

    assert "[ERROR] UNREACHABLE_NODES: Found unreachable nodes: [1]" in lines
    assert "[WARN] Start node 5 is not defined in the graph." in lines


def test_cyclic_nodes_exclude_the_tail_of_a_cycle():
    graph = make_graph(1, line(1, 2), branch(2, [(1, "Again", 1), (2, "Leave", 3)]), line(3, ending=True))
    report = validate_dialogue(graph)

    assert [e.code for e in report.errors] == ["CONTAINS_CYCLES"]
    assert report.cyclic_nodes == [1, 2]


def test_two_pass_is_keyword_only():
    with pytest.raises(TypeError):
        validate_dialogue(make_graph(1, line(1, ending=True)), False)
