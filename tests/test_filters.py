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
"""Tests for visibility filters."""

from topo_view.config import ViewConfig
from topo_view.filters import (
    apply_context_filters,
    level_of_detail,
    nearest_hub,
    problem_device_ids,
    search_visible_ids,
    smart_reveal,
)
from topo_view.graph import build_cable_graph, build_nodes
from topo_view.models import Cable, Device, Position, ViewportState, ViewState, VisualNode


def _devices() -> list[Device]:
    return [
        Device(1, "core", "server", "online"),
        Device(2, "sw-a", "switch", "offline"),
        Device(3, "pc-a", "pc", "offline", "10.1.0.3"),
        Device(4, "pc-b", "pc", "online", "10.1.0.4"),
        Device(5, "lab", "router", "unstable"),
    ]


def _cables() -> list[Cable]:
    return [Cable("c1", 1, 2), Cable("c2", 2, 3), Cable("c3", 2, 4), Cable("c4", 1, 5)]


def _ids(nodes: list[VisualNode]) -> set[str]:
    return {node.node_id for node in nodes}


def test_problem_device_ids_excludes_online() -> None:
    assert problem_device_ids(_devices()) == {"2", "3", "5"}


def test_search_visible_ids_expands_one_hop() -> None:
    graph = build_cable_graph(_cables())

    assert search_visible_ids(_devices(), graph, "PC-B") == {"4", "2"}
    assert search_visible_ids(_devices(), graph, "10.1.0.3") == {"3", "2"}
    assert search_visible_ids(_devices(), graph, "   ") is None
    assert search_visible_ids(_devices(), graph, "nothing") == set()


def test_problem_only_and_search_intersect() -> None:
    devices = _devices()
    graph = build_cable_graph(_cables())
    state = ViewState(search_query="pc", problem_only=True)

    nodes = apply_context_filters(build_nodes(devices), state, devices, graph)

    # search: {3, 4} + neighbour 2; problem: {2, 3, 5}
    assert _ids(nodes) == {"2", "3"}


def test_trace_filter_is_a_hard_mask() -> None:
    devices = _devices()
    graph = build_cable_graph(_cables())
    state = ViewState(trace_filter=frozenset({"1", "2", "99"}))

    nodes = apply_context_filters(build_nodes(devices), state, devices, graph)

    assert _ids(nodes) == {"1", "2"}


def test_level_of_detail_hides_leaves_when_zoomed_out() -> None:
    nodes = build_nodes(_devices())

    assert _ids(level_of_detail(nodes, ViewState(zoom=0.5))) == {"1", "2", "5"}
    assert _ids(level_of_detail(nodes, ViewState(zoom=0.7))) == {"1", "2", "3", "4", "5"}


def test_level_of_detail_reads_viewport_zoom() -> None:
    nodes = build_nodes(_devices())
    state = ViewState(zoom=1.5, viewport=ViewportState(zoom=0.5))

    assert _ids(level_of_detail(nodes, state)) == {"1", "2", "5"}


def test_level_of_detail_is_skipped_when_a_context_filter_is_active() -> None:
    nodes = build_nodes(_devices())

    for state in (
        ViewState(zoom=0.1, problem_only=True),
        ViewState(zoom=0.1, search_query="pc"),
        ViewState(zoom=0.1, trace_filter=frozenset({"3"})),
    ):
        assert len(level_of_detail(nodes, state)) == 5


def _placed() -> list[VisualNode]:
    return [
        VisualNode("1", "core", "server", "online", position=Position(1000.0, 0.0)),
        VisualNode("2", "sw-a", "switch", "online", position=Position(0.0, 0.0)),
        VisualNode("6", "sw-b", "switch", "online", position=Position(3000.0, 0.0)),
        VisualNode("3", "pc-a", "pc", "online", position=Position(0.0, 200.0)),
        VisualNode("7", "pc-c", "pc", "online", position=Position(3000.0, 200.0)),
    ]


def _placed_graph():
    return build_cable_graph(
        [Cable("c1", 1, 2), Cable("c2", 2, 3), Cable("c5", 1, 6), Cable("c6", 6, 7)]
    )


def test_smart_reveal_shows_leaves_of_nearest_switch() -> None:
    viewport = ViewportState(zoom=1.5, center_x=100.0, center_y=50.0)
    state = ViewState(zoom=1.5, viewport=viewport)

    nodes = smart_reveal(_placed(), state, _placed_graph())

    assert _ids(nodes) == {"1", "2", "6", "3"}


def test_smart_reveal_hides_leaves_when_no_switch_in_radius() -> None:
    viewport = ViewportState(zoom=1.5, center_x=1500.0, center_y=5000.0)
    state = ViewState(zoom=1.5, viewport=viewport)

    nodes = smart_reveal(_placed(), state, _placed_graph())

    assert _ids(nodes) == {"1", "2", "6"}


def test_smart_reveal_needs_zoom_and_no_context() -> None:
    viewport = ViewportState(zoom=0.8, center_x=100.0, center_y=50.0)

    assert len(smart_reveal(_placed(), ViewState(zoom=0.8, viewport=viewport), _placed_graph())) == 5
    assert len(smart_reveal(_placed(), ViewState(zoom=2.0), _placed_graph())) == 5
    state = ViewState(zoom=2.0, viewport=viewport, search_query="pc")
    assert len(smart_reveal(_placed(), state, _placed_graph())) == 5


def test_nearest_hub_respects_radius() -> None:
    nodes = _placed()

    assert nearest_hub(nodes, Position(2900.0, 0.0), 900.0).node_id == "6"
    assert nearest_hub(nodes, Position(1400.0, 0.0), 900.0) is None
    assert nearest_hub(nodes, Position(1400.0, 0.0), ViewConfig().smart_reveal_radius * 2).node_id == "2"
