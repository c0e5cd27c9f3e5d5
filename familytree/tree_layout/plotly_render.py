from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from plotly import graph_objects as go

from .colors import build_sibling_colors
from .engine import compute_layout, unique_members
from .index import build_relationship_index
from .models import EdgeKind, Layout, Member, Relationship
from .normalize import display_label, hover_label

PLOTLY_CONFIG = {"scrollZoom": True, "displayModeBar": True, "responsive": True}


def _edge_trace(layout: Layout, kind: EdgeKind, dash: str) -> go.Scatter:
    edge_x: List[Optional[float]] = []
    edge_y: List[Optional[float]] = []
    for edge in layout.edges:
        if edge.kind is not kind:
            continue
        p0 = layout.positions.get(edge.source)
        p1 = layout.positions.get(edge.target)
        if p0 is None or p1 is None or edge.source == edge.target:
            continue
        edge_x += [p0.x, p1.x, None]
        edge_y += [p0.y, p1.y, None]

    return go.Scatter(
        x=edge_x,
        y=edge_y,
        mode="lines",
        name=kind.value,
        line=dict(width=1, color="gray", dash=dash),
        hoverinfo="none",
    )


def build_plotly_figure(
    members: Sequence[Member],
    relationships: Sequence[Relationship],
    layout: Optional[Layout] = None,
) -> go.Figure:
    members = unique_members(members)
    if not members:
        fig = go.Figure()
        fig.update_layout(title="No family members yet")
        return fig

    if layout is None:
        layout = compute_layout(members, relationships)
    children_map, parents_map = build_relationship_index(relationships)

    hierarchy_trace = _edge_trace(layout, EdgeKind.HIERARCHY, "solid")
    partnership_trace = _edge_trace(layout, EdgeKind.PARTNERSHIP, "dash")

    node_colors = build_sibling_colors(members, children_map, parents_map)

    node_x, node_y, texts, hover_texts, ids = [], [], [], [], []
    for m in members:
        p = layout.positions[m.id]
        node_x.append(p.x)
        node_y.append(p.y)
        texts.append(display_label(m).replace("\n", "<br>"))
        hover_texts.append(hover_label(m))
        ids.append(m.id)

    node_trace = go.Scatter(
        x=node_x,
        y=node_y,
        mode="markers+text",
        name="members",
        text=texts,
        customdata=ids,
        textposition="bottom center",
        hoverinfo="text",
        hovertext=hover_texts,
        marker=dict(size=28, color=node_colors, line=dict(width=1, color="#333")),
        textfont=dict(size=10),
    )

    xs = [p.x for p in layout.positions.values()]
    ys = [p.y for p in layout.positions.values()]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    pad_x = 0.15 * (x_max - x_min if x_max > x_min else 1) + 100
    pad_y = 0.15 * (y_max - y_min if y_max > y_min else 1) + 80

    fig = go.Figure(data=[hierarchy_trace, partnership_trace, node_trace])
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        dragmode="pan",
        autosize=True,
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="white",
        paper_bgcolor="white",
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[x_min - pad_x, x_max + pad_x],
        ),
        # generation 0 at the top
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[y_max + pad_y, y_min - pad_y],
        ),
    )
    return fig


def figure_json(fig: go.Figure) -> Dict[str, Any]:
    return json.loads(fig.to_json())


def render_html(fig: go.Figure) -> str:
    return fig.to_html(include_plotlyjs="cdn", full_html=True, config=PLOTLY_CONFIG)


def write_html(fig: go.Figure, out_path: str) -> None:
    Path(out_path).write_text(render_html(fig), encoding="utf-8")
