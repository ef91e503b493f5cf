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
"""Tests for trace overlay composition."""

from topo_view.graph import build_base_edges
from topo_view.models import Cable, EdgeKey, LinkKey, TraceCable, VisualEdge
from topo_view.overlay import compose_edges, exclude_trace_overlaps, map_trace_cables_to_edges


def test_map_trace_cables_to_edges_salts_keys() -> None:
    cables = [TraceCable("c2", 11, 3, 12, 2), TraceCable("c2", 11, 3, 12, 2)]

    edges = map_trace_cables_to_edges(cables, salt=5)

    assert edges[0].key != edges[1].key
    assert edges[0].key.kind == "trace"
    assert edges[0].style == "trace"
    assert edges[0].link_key == LinkKey.of(2, 3)


def test_exclude_trace_overlaps_matches_reversed_cable() -> None:
    base = build_base_edges([Cable("c1", 1, 2), Cable("c2", 2, 3)])
    trace = map_trace_cables_to_edges([TraceCable("c2", 11, 3, 12, 2)], salt=1)

    kept = exclude_trace_overlaps(base, trace)

    assert [edge.key.ident for edge in kept] == ["c1"]


def test_compose_edges_draws_shared_link_once_as_trace() -> None:
    base = build_base_edges([Cable("c1", 1, 2), Cable("c2", 2, 3)])
    trace = map_trace_cables_to_edges([TraceCable("c2", 11, 3, 12, 2)], salt=1)

    edges = compose_edges(base, trace, {"1", "2", "3"})

    between = [edge for edge in edges if edge.link_key == LinkKey.of(2, 3)]
    assert len(between) == 1
    assert between[0].style == "trace"
    assert len(edges) == 2


def test_compose_edges_restricts_to_visible_nodes() -> None:
    base = build_base_edges([Cable("c1", 1, 2), Cable("c9", 2, 99)])
    trace = map_trace_cables_to_edges([TraceCable("c2", 11, 3, 12, 2)], salt=1)

    edges = compose_edges(base, trace, {"1", "2"})

    assert [edge.key.ident for edge in edges] == ["c1"]


def test_compose_edges_never_repeats_a_key() -> None:
    base = build_base_edges([Cable("c1", 1, 2)])
    foreign = VisualEdge(key=EdgeKey("cable", "c1"), source="1", target="2")

    edges = compose_edges(base, [foreign, foreign], {"1", "2"})

    keys = [edge.key for edge in edges]
    assert len(keys) == len(set(keys))
    assert edges[-1].key == EdgeKey("trace", "c1")
    assert edges[-1].style == "trace"
