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
"""Diagram layouts: radial around the server hubs, or layered left to right.

In the radial layout servers sit at the origin (or on a small inner ring when there is more
than one), switches and routers are spread evenly on a large ring around
them, and every pc is clustered on a secondary ring around the first ring
node it is cabled to. Nodes that end up with no position are placed on a
row-major grid below the diagram.

The hierarchical layout ranks nodes by cable distance from the servers
and lays the ranks out as columns.

Layouts are recomputed from scratch on every call, so the same input
always produces the same positions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Sequence

import networkx as nx

from topo_view.config import ViewConfig
from topo_view.models import (
    TOP_HUB_TYPE,
    TYPE_ROUTER,
    TYPE_SWITCH,
    LayoutMode,
    Position,
    VisualEdge,
    VisualNode,
)

_LOGGER = logging.getLogger(__name__)

RING_TYPES = (TYPE_SWITCH, TYPE_ROUTER)


def polar_position(center: Position, radius: float, angle: float) -> Position:
    """Point at ``angle`` radians and ``radius`` from ``center``."""

    return Position(
        center.x + radius * math.cos(angle),
        center.y + radius * math.sin(angle),
    )


def radial_layout(
    nodes: Sequence[VisualNode],
    edges: Sequence[VisualEdge],
    config: ViewConfig | None = None,
) -> list[VisualNode]:
    """Assign a position to every node.

    Args:
        nodes: Nodes to place, in feed order
        edges: Edges restricted to ``nodes``
        config: Geometry settings

    Returns:
        New node objects with positions set; input nodes are not modified
    """

    config = config or ViewConfig()
    servers = [node for node in nodes if node.device_type == TOP_HUB_TYPE]
    if not servers:
        _LOGGER.debug("No %s node present, using grid layout for %d nodes", TOP_HUB_TYPE, len(nodes))
        return grid_layout(nodes, config)

    centers: dict[str, Position] = {}
    angles: dict[str, float] = {}

    if len(servers) == 1:
        centers[servers[0].node_id] = config.origin
        angles[servers[0].node_id] = 0.0
    else:
        core_step = 2 * math.pi / len(servers)
        for index, server in enumerate(servers):
            angle = index * core_step
            centers[server.node_id] = polar_position(config.origin, config.core_ring_radius, angle)
            angles[server.node_id] = angle

    ring = [node for node in nodes if node.device_type in RING_TYPES]
    ring_step = 2 * math.pi / max(len(ring), 1)
    for index, hub in enumerate(ring):
        angle = index * ring_step
        centers[hub.node_id] = polar_position(config.origin, config.hub_ring_radius, angle)
        angles[hub.node_id] = angle

    adjacency = _adjacency(edges)
    leaf_ids = {node.node_id for node in nodes if node.is_leaf}
    placed: set[str] = set()
    # Ring nodes claim their leaves before the servers do.
    for anchor in [*ring, *servers]:
        attached: list[str] = []
        for other in adjacency.get(anchor.node_id, ()):
            if other in leaf_ids and other not in placed and other not in attached:
                attached.append(other)
        if not attached:
            continue

        radius = config.leaf_ring_base + config.leaf_ring_step * len(attached)
        step = 2 * math.pi / len(attached)
        start = angles[anchor.node_id] - math.pi / 2
        for index, leaf_id in enumerate(attached):
            centers[leaf_id] = polar_position(centers[anchor.node_id], radius, start + index * step)
        placed.update(attached)

    positions = {
        node_id: Position(center.x - config.node_width / 2, center.y - config.node_height / 2)
        for node_id, center in centers.items()
    }

    orphans = [
        node
        for node in nodes
        if node.node_id not in positions or not positions[node.node_id].is_finite()
    ]
    if orphans:
        _LOGGER.debug(
            "Placing %d unattached nodes on the fallback grid: %s",
            len(orphans),
            ", ".join(node.node_id for node in orphans),
        )
        grid_origin = Position(
            config.origin.x - config.hub_ring_radius,
            config.origin.y + config.hub_ring_radius + 2 * config.leaf_ring_base,
        )
        for node, position in zip(orphans, _grid_positions(len(orphans), config, grid_origin)):
            positions[node.node_id] = position

    return [replace(node, position=positions[node.node_id]) for node in nodes]


def hierarchical_layout(
    nodes: Sequence[VisualNode],
    edges: Sequence[VisualEdge],
    config: ViewConfig | None = None,
) -> list[VisualNode]:
    """Left-to-right layered layout rooted at the servers.

    Each connected component is ranked by breadth-first distance from its
    servers, or from its first node when it has none. Ranks advance along
    x; the members of a rank are stacked along y in feed order, centred on
    the origin row.
    """

    config = config or ViewConfig()
    if not nodes:
        return []

    order = {node.node_id: index for index, node in enumerate(nodes)}
    graph = nx.Graph()
    graph.add_nodes_from(order)
    graph.add_edges_from(
        (edge.source, edge.target) for edge in edges if edge.source in order and edge.target in order
    )

    servers = {node.node_id for node in nodes if node.device_type == TOP_HUB_TYPE}
    sources: list[str] = []
    components = sorted(
        (sorted(component, key=order.__getitem__) for component in nx.connected_components(graph)),
        key=lambda members: order[members[0]],
    )
    for members in components:
        roots = [node_id for node_id in members if node_id in servers]
        sources.extend(roots or members[:1])

    rank_step = config.node_width + config.rank_spacing
    row_step = config.node_height + config.node_spacing
    positions: dict[str, Position] = {}
    for rank, layer in enumerate(nx.bfs_layers(graph, sources)):
        members = sorted(layer, key=order.__getitem__)
        offset = (len(members) - 1) / 2
        for row, node_id in enumerate(members):
            positions[node_id] = Position(
                config.origin.x + rank * rank_step - config.node_width / 2,
                config.origin.y + (row - offset) * row_step - config.node_height / 2,
            )

    _LOGGER.debug("Hierarchical layout: %d nodes from %d roots", len(positions), len(sources))
    return [replace(node, position=positions[node.node_id]) for node in nodes]


def layout_nodes(
    mode: LayoutMode,
    nodes: Sequence[VisualNode],
    edges: Sequence[VisualEdge],
    config: ViewConfig | None = None,
) -> list[VisualNode]:
    """Dispatch to the layout for ``mode``."""

    if mode == LayoutMode.HIERARCHICAL:
        return hierarchical_layout(nodes, edges, config)
    return radial_layout(nodes, edges, config)


def grid_layout(
    nodes: Sequence[VisualNode],
    config: ViewConfig | None = None,
    top_left: Position | None = None,
) -> list[VisualNode]:
    """Place nodes row-major on a fixed grid."""

    config = config or ViewConfig()
    start = top_left or config.origin
    return [
        replace(node, position=position)
        for node, position in zip(nodes, _grid_positions(len(nodes), config, start))
    ]


def _grid_positions(count: int, config: ViewConfig, start: Position) -> list[Position]:
    columns = max(config.grid_columns, 1)
    return [
        Position(
            start.x + (index % columns) * config.grid_spacing_x,
            start.y + (index // columns) * config.grid_spacing_y,
        )
        for index in range(count)
    ]


def _adjacency(edges: Sequence[VisualEdge]) -> dict[str, list[str]]:
    """Neighbour ids per node, in edge order."""

    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
        adjacency.setdefault(edge.target, []).append(edge.source)
    return adjacency
