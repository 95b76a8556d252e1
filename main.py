from __future__ import annotations

import os
from dialogue.graph_builder import DialogueGraphBuilder
from dialogue.validator import format_report


def main() -> None:
    print("=" * 60)
    print("DialogueGraphBuilder demo")
    print("=" * 60)

    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, 'config', 'tavern_dialogue.json')
    output_png = os.path.join(base_dir, 'dialogue_graph.png')

    builder = DialogueGraphBuilder()

    if not builder.load_from_json(config_path):
        return

    ok = builder.build_graph()
    for line in format_report(builder.report):
        print(line)

    cycle_result = builder.detect_cycles()
    if cycle_result["success"]:
        print("Topological order: " + " -> ".join(str(n) for n in cycle_result["order"]))

    graph_info = builder.export_graph_info()
    print(f"\nNodes: {graph_info['graph_stats']['nodes']}")
    print(f"Edges: {graph_info['graph_stats']['edges']}")
    print(f"DAG: {graph_info['graph_stats']['is_dag']}")
    print(f"Valid: {ok}")

    if builder.visualize_graph(output_png):
        print(f"\nGraph drawing saved: {output_png}")


if __name__ == "__main__":
    main()
