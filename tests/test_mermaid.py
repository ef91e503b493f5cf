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
"""Tests for Mermaid diagram generation."""

from pathlib import Path

from topo_view.mermaid import generate_mermaid_diagram, write_mermaid_diagram
from topo_view.models import EdgeKey, LinkKey, VisualEdge, VisualNode
from topo_view.view import ViewResult


def _result() -> ViewResult:
    nodes = [
        VisualNode("1", "srv-1", "server", "online"),
        VisualNode("2", "sw-2", "switch", "offline"),
        VisualNode("3", 'pc "3"', "pc", "online"),
    ]
    edges = [
        VisualEdge(EdgeKey("cable", "c1"), "1", "2", "base", LinkKey.of(1, 2), "uplink"),
        VisualEdge(EdgeKey("trace", "c2", "x"), "3", "2", "trace", LinkKey.of(2, 3)),
    ]
    return ViewResult(nodes=nodes, edges=edges)


def test_generate_mermaid_diagram_basic() -> None:
    diagram = generate_mermaid_diagram(_result())

    assert diagram.startswith("graph LR")
    assert 'n_1["srv-1"]' in diagram
    assert 'n_3["pc #quot;3#quot;"]' in diagram
    assert "n_1 ---|uplink| n_2" in diagram
    assert "n_3 --- n_2" in diagram


def test_generate_mermaid_diagram_styles_status_and_trace() -> None:
    diagram = generate_mermaid_diagram(_result())

    assert "style n_1 fill:#ccffcc" in diagram
    assert "style n_2 fill:#ffcccc" in diagram
    assert "linkStyle 1 stroke:#10b981" in diagram


def test_generate_mermaid_diagram_truncates_nodes() -> None:
    diagram = generate_mermaid_diagram(_result(), max_nodes=2)

    assert "n_3" not in diagram
    assert "n_1 ---|uplink| n_2" in diagram
    assert "linkStyle" not in diagram


def test_write_mermaid_diagram(tmp_path: Path) -> None:
    path = tmp_path / "topology.mmd"

    write_mermaid_diagram(path, _result())

    content = path.read_text(encoding="utf-8")
    assert content.startswith("graph LR")
    assert content.endswith("\n")
