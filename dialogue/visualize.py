from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import networkx as nx

from .navigator import DialogueGraphNavigator
from .schema import NodeId

logger = logging.getLogger(__name__)

# Node role -> color
COLOR_MAP: Dict[str, str] = {
    "start": "#90EE90",
    "line": "#87CEEB",
    "branch": "#DDA0DD",
    "ending": "#FFA07A",
    "dead_end": "#FF6B6B",
    "unreachable": "#D3D3D3",
}


def _try_graphviz_layout(g: nx.DiGraph) -> Dict[NodeId, Tuple[float, float]]:
    try:
        from networkx.drawing.nx_agraph import graphviz_layout  # type: ignore
        return graphviz_layout(g, prog="dot")
    except Exception:
        try:
            from networkx.drawing.nx_pydot import graphviz_layout  # type: ignore
            return graphviz_layout(g, prog="dot")
        except Exception:
            return {}


def _depth_layered_layout(g: nx.DiGraph, start: NodeId) -> Dict[NodeId, Tuple[float, float]]:
    # Columns by shortest-path depth from start; unreachable nodes go last
    depths: Dict[NodeId, int] = {}
    if start in g:
        depths = dict(nx.single_source_shortest_path_length(g, start))
    last_col = (max(depths.values()) + 1) if depths else 0

    grouped: Dict[int, List[NodeId]] = {}
    for n in g.nodes():
        grouped.setdefault(depths.get(n, last_col), []).append(n)

    pos: Dict[NodeId, Tuple[float, float]] = {}
    col_gap = 3.0
    row_gap = 1.5
    for col, nodes in sorted(grouped.items()):
        nodes.sort()
        x = col * col_gap
        offset = (len(nodes) - 1) * row_gap / 2.0
        for i, n in enumerate(nodes):
            pos[n] = (x, -offset + i * row_gap)
    return pos


def node_roles(nav: DialogueGraphNavigator, start: NodeId) -> Dict[NodeId, str]:
    unreachable = set(nav.find_unreachable_nodes(start))
    roles: Dict[NodeId, str] = {}
    for n, attrs in nav.graph.nodes(data=True):
        out_deg = nav.graph.out_degree(n)
        if n == start:
            roles[n] = "start"
        elif n in unreachable:
            roles[n] = "unreachable"
        elif out_deg == 0:
            roles[n] = "ending" if attrs.get("is_ending") else "dead_end"
        elif out_deg > 1:
            roles[n] = "branch"
        else:
            roles[n] = "line"
    return roles


def draw_dialogue_graph(
    nav: DialogueGraphNavigator,
    save_path: str,
    start: NodeId,
    labels: Optional[Dict[NodeId, str]] = None,
) -> bool:
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Patch
    except ImportError:
        logger.warning("matplotlib is not installed; skipping graph drawing")
        return False

    # Parallel choices collapse into one drawn edge
    g = nx.DiGraph(nav.graph)
    pos = _try_graphviz_layout(g)
    if not pos:
        pos = _depth_layered_layout(g, start)
    if not pos and g.number_of_nodes():
        pos = nx.spring_layout(g, seed=42, k=0.7)

    roles = node_roles(nav, start)
    node_list = list(g.nodes())
    colors = [COLOR_MAP[roles[n]] for n in node_list]
    node_labels = {n: (labels or {}).get(n) or str(n) for n in node_list}

    plt.figure(figsize=(16, 10))
    if node_list:
        nx.draw_networkx_nodes(
            g,
            pos,
            nodelist=node_list,
            node_color=colors,
            node_size=2000,
            edgecolors="#444444",
            linewidths=2,
        )
        nx.draw_networkx_edges(
            g,
            pos,
            arrows=True,
            arrowstyle="-|>",
            arrowsize=22,
            width=2.0,
            edge_color="#555555",
            connectionstyle="arc3,rad=0.06",
        )
        nx.draw_networkx_labels(g, pos, labels=node_labels, font_size=11, font_weight="bold")

        edge_labels: Dict[Tuple[NodeId, NodeId], str] = {}
        for u, v, a in nav.graph.edges(data=True):
            text = a.get("choice_text", "")
            if not text:
                continue
            key = (u, v)
            edge_labels[key] = f"{edge_labels[key]} / {text}" if key in edge_labels else text
        if edge_labels:
            nx.draw_networkx_edge_labels(
                g,
                pos,
                edge_labels=edge_labels,
                font_size=9,
                bbox=dict(boxstyle="round,pad=0.3", facecolor="white", edgecolor="gray", alpha=0.9),
                label_pos=0.55,
            )

    handles = [Patch(facecolor=col, edgecolor="#444444", label=role) for role, col in COLOR_MAP.items()]
    plt.legend(handles=handles, title="Node", loc="lower left", bbox_to_anchor=(1.02, 0), borderaxespad=0.0)
    plt.axis("off")
    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight", facecolor="white", edgecolor="none")
    plt.close()
    logger.info(f"Graph drawing saved: {save_path}")
    return True
