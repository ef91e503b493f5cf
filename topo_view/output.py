# Copyright 2025 topo-view contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Output rendering for the rendering surface and reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from topo_view.models import STYLE_TRACE, VisualEdge, VisualNode
from topo_view.search import TraceViewState
from topo_view.view import ViewResult


def node_to_dict(node: VisualNode) -> dict[str, Any]:
    """Serialise a node in the rendering surface's shape."""

    return {
        "id": node.node_id,
        "label": node.label,
        "type": node.device_type,
        "status": node.status,
        "ipAddress": node.ip_address,
        "position": {"x": node.position.x, "y": node.position.y},
        "highlighted": node.highlighted,
        "centerAligned": node.center_aligned,
        "selected": node.selected,
    }


def edge_to_dict(edge: VisualEdge) -> dict[str, Any]:
    """Serialise an edge in the rendering surface's shape."""

    return {
        "id": str(edge.key),
        "source": edge.source,
        "target": edge.target,
        "style": edge.style,
        "linkKey": [edge.link_key.node_a, edge.link_key.node_b] if edge.link_key else None,
        "label": edge.label,
    }


def view_to_dict(result: ViewResult) -> dict[str, Any]:
    return {
        "nodes": [node_to_dict(node) for node in result.nodes],
        "edges": [edge_to_dict(edge) for edge in result.edges],
    }


def write_view_json(path: str | Path, result: ViewResult) -> None:
    """Write the final node and edge lists as JSON."""

    with Path(path).open("w", encoding="utf-8") as handle:
        json.dump(view_to_dict(result), handle, indent=2, ensure_ascii=False)
        handle.write("\n")


def build_summary(result: ViewResult, trace: TraceViewState | None = None) -> dict[str, Any]:
    """Counts and trace outcome for a computed view."""

    by_type: dict[str, int] = {}
    for node in result.nodes:
        by_type[node.device_type] = by_type.get(node.device_type, 0) + 1

    summary: dict[str, Any] = {
        "visible_nodes": len(result.nodes),
        "visible_edges": len(result.edges),
        "trace_edges": sum(1 for edge in result.edges if edge.style == STYLE_TRACE),
        "nodes_by_type": dict(sorted(by_type.items())),
        "trace_phase": trace.phase.value if trace else None,
        "trace_error": trace.error if trace else None,
    }
    if trace is not None and trace.result is not None:
        summary["trace_start"] = trace.result.start_device_name
        summary["trace_end"] = trace.result.end_device_name
        summary["trace_hops"] = len(trace.result.path)
    return summary


def write_summary(path: str | Path, result: ViewResult, trace: TraceViewState | None = None) -> None:
    """Write summary report."""

    summary = build_summary(result, trace)
    with Path(path).open("w", encoding="utf-8") as handle:
        for key, value in summary.items():
            if isinstance(value, dict):
                value = ", ".join(f"{name}={count}" for name, count in value.items())
            handle.write(f"{key}: {'' if value is None else value}\n")


def write_summary_json(path: str | Path, result: ViewResult, trace: TraceViewState | None = None) -> None:
    """Write summary report JSON."""

    with Path(path).open("w", encoding="utf-8") as handle:
        json.dump(build_summary(result, trace), handle, indent=2, ensure_ascii=False)
        handle.write("\n")
