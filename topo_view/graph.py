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
"""Graph building from device and cable feeds."""

from __future__ import annotations

from typing import Iterable, Sequence

import networkx as nx

from topo_view.models import (
    EDGE_KIND_CABLE,
    STYLE_BASE,
    Cable,
    Device,
    EdgeKey,
    LinkKey,
    VisualEdge,
    VisualNode,
)


def matches_query(device: Device, query: str) -> bool:
    """Case-insensitive substring match against name or IP."""

    needle = query.strip().lower()
    if not needle:
        return False
    if needle in device.name.lower():
        return True
    return bool(device.ip_address) and needle in device.ip_address.lower()


def build_nodes(
    devices: Sequence[Device],
    search_query: str = "",
    selected_id: str | None = None,
) -> list[VisualNode]:
    """Build one visual node per device at the origin."""

    return [
        VisualNode(
            node_id=device.node_id,
            label=device.name,
            device_type=device.device_type,
            status=device.status,
            ip_address=device.ip_address,
            highlighted=matches_query(device, search_query),
            selected=selected_id == device.node_id,
        )
        for device in devices
    ]


def build_base_edges(cables: Sequence[Cable]) -> list[VisualEdge]:
    """Build one base edge per cable."""

    return [
        VisualEdge(
            key=EdgeKey(EDGE_KIND_CABLE, cable.cable_id),
            source=str(cable.from_device_id),
            target=str(cable.to_device_id),
            style=STYLE_BASE,
            link_key=LinkKey.of(cable.from_device_id, cable.to_device_id),
            label=cable.description or "",
        )
        for cable in cables
    ]


def build_cable_graph(cables: Iterable[Cable]) -> nx.Graph:
    """Build an undirected adjacency graph keyed by node id."""

    graph = nx.Graph()
    for cable in cables:
        graph.add_edge(
            str(cable.from_device_id),
            str(cable.to_device_id),
            cable_id=cable.cable_id,
        )
    return graph


def neighbor_ids(graph: nx.Graph, node_id: str) -> set[str]:
    """Ids cabled directly to ``node_id``; empty when the node is unknown."""

    if node_id not in graph:
        return set()
    return set(graph.neighbors(node_id))


def restrict_edges(edges: Iterable[VisualEdge], node_ids: set[str]) -> list[VisualEdge]:
    """Keep edges whose endpoints are both in ``node_ids``."""

    return [edge for edge in edges if edge.source in node_ids and edge.target in node_ids]
