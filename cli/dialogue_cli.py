#!/usr/bin/env python3
"""
CLI for validating, exporting and playing back dialogue graphs
"""

import argparse
import json
import os
import sys
import logging
from typing import List, Optional
from dotenv import load_dotenv

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from core.runtime.graph_info import load_and_validate
from core.runtime.player import DialoguePlayer
from dialogue.graph_builder import DialogueGraphBuilder
from dialogue.schema import ChoiceId
from dialogue.validator import format_report

load_dotenv()


def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def default_two_pass() -> bool:
    return bool(int(os.getenv("DIALOGUE_TWO_PASS", "1")))


def cmd_validate(args) -> int:
    """Validate a dialogue file; 0 when valid"""
    builder = DialogueGraphBuilder(two_pass=not args.single_pass)
    if not builder.load_from_json(args.path):
        print(f"Failed to load dialogue: {args.path}")
        return 1

    ok = builder.build_graph()
    stats = builder.export_graph_info()["graph_stats"]
    print(f"Nodes: {stats['nodes']}  Edges: {stats['edges']}  DAG: {stats['is_dag']}")
    for line in format_report(builder.report):
        print(line)

    if args.visualize:
        if builder.visualize_graph(args.visualize):
            print(f"Graph drawing saved: {args.visualize}")
        else:
            print("Graph drawing skipped (matplotlib not installed)")

    print("Dialogue is valid." if ok else "Dialogue has structural errors.")
    return 0 if ok else 1


def cmd_export(args) -> int:
    """Print graph info as JSON"""
    builder = DialogueGraphBuilder(two_pass=not args.single_pass)
    if not builder.load_from_json(args.path):
        print(f"Failed to load dialogue: {args.path}")
        return 1
    builder.build_graph()
    print(json.dumps(builder.export_graph_info(), ensure_ascii=False, indent=2))
    return 0


def cmd_play(args, input_fn=input) -> int:
    """Interactive playback"""
    graph_info = load_and_validate(args.path, two_pass=default_two_pass())
    for line in format_report(graph_info.report):
        print(line)

    player = DialoguePlayer(graph_info.dialogue)
    state = player.start()

    while not state.is_complete:
        node = player.current(state)
        speaker = node.content.speaker
        prefix = f"{speaker.name}: " if speaker else ""
        print(f"\n{prefix}{node.content.text}")

        choices = player.available_choices(state)
        try:
            if choices:
                for idx, choice in enumerate(choices, 1):
                    print(f"  {idx}. {choice.text}")
                answer = input_fn("> ").strip()
                if answer.lower() in ['quit', 'exit', 'q']:
                    break
                if not answer.isdigit() or not 1 <= int(answer) <= len(choices):
                    print("Pick one of the listed numbers.")
                    continue
                player.choose(state, ChoiceId(choices[int(answer) - 1].id))
            else:
                answer = input_fn("[enter] ").strip()
                if answer.lower() in ['quit', 'exit', 'q']:
                    break
                player.progress(state)
        except (KeyboardInterrupt, EOFError):
            print("\nPlayback stopped.")
            break

    if state.is_complete:
        print("\nEnd of dialogue.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dialogue graph validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cli.dialogue_cli validate config/tavern_dialogue.json
  python -m cli.dialogue_cli validate config/tavern_dialogue.json --visualize tavern_dialogue.png
  python -m cli.dialogue_cli play config/tavern_dialogue.json
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p_validate = sub.add_parser('validate', help='Validate a dialogue file and exit')
    p_validate.add_argument('path', help='Path to dialogue JSON file')
    p_validate.add_argument('--single-pass', action='store_true',
                            help='Wire edges while inserting nodes (order sensitive)')
    p_validate.add_argument('--visualize', metavar='PNG', help='Save a drawing of the graph')
    p_validate.set_defaults(func=cmd_validate)

    p_export = sub.add_parser('export', help='Print graph info as JSON')
    p_export.add_argument('path', help='Path to dialogue JSON file')
    p_export.add_argument('--single-pass', action='store_true')
    p_export.set_defaults(func=cmd_export)

    p_play = sub.add_parser('play', help='Play a dialogue in the terminal')
    p_play.add_argument('path', help='Path to dialogue JSON file')
    p_play.set_defaults(func=cmd_play)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Dialogue error: {e}")
        print(f"Dialogue error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
