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
"""Mermaid diagram generation for the visible topology."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from topo_view.models import STATUS_ONLINE, STYLE_TRACE
from topo_view.view import ViewResult

_LOGGER = logging.getLogger(__name__)

_TRACE_LINK_STYLE = "stroke:#10b981,stroke-width:2px,stroke-dasharray:5 5"


def generate_mermaid_diagram(result: ViewResult, max_nodes: int = 200) -> str:
    """Generate a Mermaid flowchart from a computed view.

    Args:
        result: Computed view to render
        max_nodes: Maximum number of nodes to include (default: 200)

    Returns:
        Mermaid diagram as a string
    """

    nodes = result.nodes
    if len(nodes) > max_nodes:
        _LOGGER.warning(
            "Too many nodes (%d) for Mermaid diagram (max: %d). "
            "Keeping the first %d in view order.",
            len(nodes),
            max_nodes,
            max_nodes,
        )
        nodes = nodes[:max_nodes]
    included = {node.node_id for node in nodes}

    lines = ["graph LR"]
    for node in nodes:
        lines.append(f'    {_sanitize_id(node.node_id)}["{_escape(node.label)}"]')

    trace_indexes: list[int] = []
    link_index = 0
    for edge in result.edges:
        if edge.source not in included or edge.target not in included:
            continue
        source_id = _sanitize_id(edge.source)
        target_id = _sanitize_id(edge.target)
        if edge.label:
            lines.append(f"    {source_id} ---|{_escape(edge.label)}| {target_id}")
        else:
            lines.append(f"    {source_id} --- {target_id}")
        if edge.style == STYLE_TRACE:
            trace_indexes.append(link_index)
        link_index += 1

    lines.append("")
    lines.append("    %% Styling")
    for node in nodes:
        fill = "#ccffcc" if node.status == STATUS_ONLINE else "#ffcccc"
        lines.append(f"    style {_sanitize_id(node.node_id)} fill:{fill}")
    if trace_indexes:
        lines.append(f"    linkStyle {','.join(str(i) for i in trace_indexes)} {_TRACE_LINK_STYLE}")

    return "\n".join(lines)


def _sanitize_id(node_id: str) -> str:
    """Node ids are device ids; prefix them so Mermaid accepts numeric ids."""
    return "n_" + re.sub(r"[^0-9A-Za-z_]", "_", node_id)


def _escape(text: str) -> str:
    return text.replace('"', "#quot;").replace("|", "#124;")


def write_mermaid_diagram(path: str | Path, result: ViewResult, max_nodes: int = 200) -> None:
    """Write Mermaid diagram to a file."""

    diagram = generate_mermaid_diagram(result, max_nodes)

    with Path(path).open("w", encoding="utf-8") as handle:
        handle.write(diagram)
        handle.write("\n")

    _LOGGER.info("Mermaid diagram written to %s", path)
