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
"""Visibility filters for the topology view.

Every filter is a pure function of its inputs and returns a new list.
The view composes them as successive intersections.
"""

from __future__ import annotations

import math
from typing import Sequence

import networkx as nx

from topo_view.config import ViewConfig
from topo_view.graph import matches_query, neighbor_ids
from topo_view.models import (
    INTERMEDIATE_HUB_TYPE,
    STATUS_ONLINE,
    Device,
    Position,
    ViewState,
    VisualNode,
)


def problem_device_ids(devices: Sequence[Device]) -> set[str]:
    """Ids of devices whose status is not online."""

    return {device.node_id for device in devices if device.status != STATUS_ONLINE}


def search_visible_ids(
    devices: Sequence[Device],
    cable_graph: nx.Graph,
    query: str,
) -> set[str] | None:
    """Devices matching ``query`` plus everything one cable hop away.

    Returns None when the query is blank (no filtering).
    """

    if not query.strip():
        return None

    matched = {device.node_id for device in devices if matches_query(device, query)}
    expanded = set(matched)
    for node_id in matched:
        expanded.update(neighbor_ids(cable_graph, node_id))
    return expanded


def filter_by_ids(nodes: Sequence[VisualNode], allowed: set[str] | frozenset[str] | None) -> list[VisualNode]:
    """Keep nodes whose id is in ``allowed``; None keeps everything."""

    if allowed is None:
        return list(nodes)
    return [node for node in nodes if node.node_id in allowed]


def context_filters_active(state: ViewState) -> bool:
    """True when a problem-only, trace or search filter is in effect."""

    return state.problem_only or state.trace_filter is not None or bool(state.search_query.strip())


def level_of_detail(
    nodes: Sequence[VisualNode],
    state: ViewState,
    config: ViewConfig | None = None,
) -> list[VisualNode]:
    """Drop leaf nodes when zoomed out and no context filter is active."""

    config = config or ViewConfig()
    if context_filters_active(state) or state.effective_zoom >= config.zoom_hide_leaf:
        return list(nodes)
    return [node for node in nodes if not node.is_leaf]


def apply_context_filters(
    nodes: Sequence[VisualNode],
    state: ViewState,
    devices: Sequence[Device],
    cable_graph: nx.Graph,
) -> list[VisualNode]:
    """Intersect the problem-only, trace and search filters."""

    filtered = list(nodes)
    if state.problem_only:
        filtered = filter_by_ids(filtered, problem_device_ids(devices))
    if state.trace_filter is not None:
        filtered = filter_by_ids(filtered, state.trace_filter)
    filtered = filter_by_ids(filtered, search_visible_ids(devices, cable_graph, state.search_query))
    return filtered


def nearest_hub(
    nodes: Sequence[VisualNode],
    point: Position,
    radius: float,
    hub_type: str = INTERMEDIATE_HUB_TYPE,
) -> VisualNode | None:
    """Closest node of ``hub_type`` to ``point`` within ``radius``."""

    best: VisualNode | None = None
    best_distance = math.inf
    for node in nodes:
        if node.device_type != hub_type:
            continue
        distance = math.hypot(node.position.x - point.x, node.position.y - point.y)
        if distance < best_distance:
            best, best_distance = node, distance
    if best is None or best_distance > radius:
        return None
    return best


def smart_reveal(
    nodes: Sequence[VisualNode],
    state: ViewState,
    cable_graph: nx.Graph,
    config: ViewConfig | None = None,
) -> list[VisualNode]:
    """Show only the leaves of the switch nearest to the viewport centre.

    Applies when zoomed in past ``smart_reveal_zoom`` with no context
    filter and a known viewport centre. Non-leaf nodes are always kept.
    """

    config = config or ViewConfig()
    center = state.viewport.center if state.viewport is not None else None
    if center is None or state.effective_zoom < config.smart_reveal_zoom or context_filters_active(state):
        return list(nodes)

    hub = nearest_hub(nodes, center, config.smart_reveal_radius)
    revealed = neighbor_ids(cable_graph, hub.node_id) if hub is not None else set()
    return [node for node in nodes if not node.is_leaf or node.node_id in revealed]
