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
"""Topology view pipeline: build, lay out, align, filter and overlay."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from topo_view.centering import CentroidAligner
from topo_view.config import ViewConfig
from topo_view.filters import apply_context_filters, level_of_detail, smart_reveal
from topo_view.graph import build_base_edges, build_cable_graph, build_nodes, restrict_edges
from topo_view.layout import layout_nodes
from topo_view.models import Cable, Device, LayoutMode, ViewState, VisualEdge, VisualNode
from topo_view.overlay import compose_edges

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewResult:
    """Nodes and edges for the rendering surface."""

    nodes: list[VisualNode]
    edges: list[VisualEdge]

    @property
    def node_ids(self) -> set[str]:
        return {node.node_id for node in self.nodes}


class TopologyView:
    """Recomputes the drawable view from the current feeds and UI state.

    Only the centroid aligner keeps state between calls; every other stage
    is recomputed from its inputs.
    """

    def __init__(
        self,
        devices: Sequence[Device],
        cables: Sequence[Cable],
        config: ViewConfig | None = None,
    ) -> None:
        self._config = config or ViewConfig()
        self.aligner = CentroidAligner(self._config)
        self._layout_mode: LayoutMode | None = None
        self.replace_feeds(devices, cables)

    @property
    def devices(self) -> list[Device]:
        return list(self._devices)

    @property
    def cables(self) -> list[Cable]:
        return list(self._cables)

    def replace_feeds(self, devices: Sequence[Device], cables: Sequence[Cable]) -> None:
        """Swap in new device and cable feeds."""

        self._devices = list(devices)
        self._cables = list(cables)
        self._base_edges = build_base_edges(self._cables)
        self._cable_graph = build_cable_graph(self._cables)
        _LOGGER.debug("Feeds replaced: %d devices, %d cables", len(self._devices), len(self._cables))

    def layout(self, state: ViewState) -> tuple[list[VisualNode], list[VisualEdge]]:
        """Positioned nodes after level-of-detail, with the edges used for layout."""

        nodes = build_nodes(self._devices, state.search_query, state.selected_id)
        detailed = level_of_detail(nodes, state, self._config)
        layout_edges = restrict_edges(self._base_edges, {node.node_id for node in detailed})
        if state.layout_mode != self._layout_mode:
            if self._layout_mode is not None:
                _LOGGER.debug("Layout mode changed to %s, dropping cached centres", state.layout_mode.value)
                self.aligner.invalidate()
            self._layout_mode = state.layout_mode
        positioned = layout_nodes(state.layout_mode, detailed, layout_edges, self._config)
        return self.aligner.align(positioned, layout_edges), layout_edges

    def compute(self, state: ViewState) -> ViewResult:
        """Final node and edge lists for ``state``."""

        laid_out, _ = self.layout(state)
        filtered = apply_context_filters(laid_out, state, self._devices, self._cable_graph)
        final_nodes = smart_reveal(filtered, state, self._cable_graph, self._config)
        final_edges = compose_edges(
            self._base_edges,
            list(state.trace_edges),
            {node.node_id for node in final_nodes},
        )
        _LOGGER.debug("View computed: %d nodes, %d edges", len(final_nodes), len(final_edges))
        return ViewResult(nodes=final_nodes, edges=final_edges)
