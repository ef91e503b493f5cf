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
"""Tests for centroid alignment."""

import math
from dataclasses import replace

import pytest

from topo_view.centering import CentroidAligner, EdgeSignature
from topo_view.graph import build_base_edges
from topo_view.models import Cable, Position, VisualNode


def _node(node_id: str, device_type: str, x: float, y: float, status: str = "online") -> VisualNode:
    return VisualNode(
        node_id=node_id,
        label=f"{device_type}-{node_id}",
        device_type=device_type,
        status=status,
        position=Position(x, y),
    )


def _star() -> tuple[list[VisualNode], list[Cable]]:
    nodes = [
        _node("1", "switch", 500.0, 500.0),
        _node("2", "pc", 0.0, 0.0),
        _node("3", "pc", 10.0, 0.0),
        _node("4", "pc", 0.0, 10.0),
    ]
    cables = [Cable("a", 1, 2), Cable("b", 3, 1), Cable("c", 1, 4)]
    return nodes, cables


def test_centroid_of_three_neighbors() -> None:
    nodes, cables = _star()
    aligner = CentroidAligner()

    centers = aligner.compute_centers(nodes, build_base_edges(cables))

    info = centers["1"]
    assert info.center.x == pytest.approx(3.33, abs=0.01)
    assert info.center.y == pytest.approx(3.33, abs=0.01)
    assert set(info.neighbor_ids) == {"2", "3", "4"}
    assert info.original_position == Position(500.0, 500.0)


def test_align_anchors_hub_by_type_box() -> None:
    nodes, cables = _star()
    aligner = CentroidAligner()

    aligned = aligner.align(nodes, build_base_edges(cables))

    hub = aligned[0]
    assert hub.center_aligned
    assert hub.position.x == pytest.approx(10 / 3 - 24)
    assert hub.position.y == pytest.approx(10 / 3 - 36)
    assert aligned[1] is nodes[1]
    assert nodes[0].position == Position(500.0, 500.0)


def test_non_finite_neighbor_positions_are_excluded() -> None:
    nodes, cables = _star()
    nodes[3] = _node("4", "pc", math.nan, 10.0)
    aligner = CentroidAligner()

    info = aligner.compute_centers(nodes, build_base_edges(cables))["1"]

    assert info.center == Position(5.0, 0.0)
    assert "4" not in info.neighbor_ids


def test_hub_without_valid_neighbors_is_untouched() -> None:
    nodes = [_node("1", "server", 7.0, 8.0), _node("2", "pc", math.inf, 0.0)]
    aligner = CentroidAligner()

    aligned = aligner.align(nodes, build_base_edges([Cable("a", 1, 2)]))

    assert aligned[0].position == Position(7.0, 8.0)
    assert not aligned[0].center_aligned


def test_status_change_reuses_cached_center() -> None:
    nodes, cables = _star()
    edges = build_base_edges(cables)
    aligner = CentroidAligner()

    first = aligner.compute_centers(nodes, edges)["1"]
    changed = [replace(node, status="offline") if node.node_id == "3" else node for node in nodes]
    second = aligner.compute_centers(changed, edges)["1"]

    assert second is first
    assert aligner.computed == 1
    assert aligner.edge_index.builds == 1


def test_adding_a_cable_invalidates_every_cached_center() -> None:
    nodes, cables = _star()
    nodes.append(_node("5", "pc", 30.0, 30.0))
    aligner = CentroidAligner()

    first = aligner.compute_centers(nodes, build_base_edges(cables))["1"]
    second = aligner.compute_centers(nodes, build_base_edges([*cables, Cable("d", 1, 5)]))["1"]

    assert second is not first
    assert aligner.computed == 2
    assert aligner.edge_index.builds == 2
    assert second.center.x == pytest.approx(10.0)
    assert second.center.y == pytest.approx(10.0)


def test_invalidate_drops_cache() -> None:
    nodes, cables = _star()
    aligner = CentroidAligner()
    aligner.compute_centers(nodes, build_base_edges(cables))

    aligner.invalidate()

    assert len(aligner.cache) == 0
    assert aligner.edge_index.signature is None


def test_edge_signature_of_empty_list() -> None:
    assert EdgeSignature.of([]) == EdgeSignature(0, None, None)
