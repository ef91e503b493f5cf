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
"""Search and trace orchestration with stale-response suppression."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Sequence

from topo_view.models import TOP_HUB_TYPE, Device, TraceResult, ViewState, VisualEdge
from topo_view.overlay import map_trace_cables_to_edges
from topo_view.trace import TraceFeed, TraceRequestError

_LOGGER = logging.getLogger(__name__)

MSG_DEVICE_NOT_FOUND = "device '{term}' not found"
MSG_TRACE_FAILED = "failed to load trace information"
MSG_TOP_HUB_ORIGIN = "a {device_type} cannot be used as a trace origin"


class TracePhase(str, Enum):
    """Lifecycle of the trace overlay."""

    IDLE = "idle"
    RESOLVING = "resolving"
    SETTLED = "settled"


@dataclass(frozen=True)
class TraceViewState:
    """Published trace overlay state."""

    phase: TracePhase = TracePhase.IDLE
    filter_nodes: frozenset[str] | None = None
    edges: tuple[VisualEdge, ...] = ()
    result: TraceResult | None = None
    error: str | None = None
    origin_id: str | None = None

    def apply(self, state: ViewState) -> ViewState:
        """Merge the overlay into a view state."""

        return replace(state, trace_filter=self.filter_nodes, trace_edges=self.edges)


Listener = Callable[[TraceViewState], None]


class TraceSearchOrchestrator:
    """Resolves devices, requests traces and publishes the latest result.

    Each request takes a token from a monotonic counter. A response may
    only publish when its token is still the latest one issued; anything
    older is dropped without touching the state.
    """

    def __init__(self, feed: TraceFeed, devices: Callable[[], Sequence[Device]]) -> None:
        self._feed = feed
        self._devices = devices
        self._tokens = itertools.count(1)
        self._latest = 0
        self._state = TraceViewState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> TraceViewState:
        return self._state

    @property
    def latest_token(self) -> int:
        return self._latest

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def resolve(self, term: str) -> Device | None:
        """Exact match on name (case-insensitive) or IP address."""

        needle = term.strip()
        if not needle:
            return None
        lowered = needle.lower()
        for device in self._devices():
            if device.name.lower() == lowered:
                return device
            if device.ip_address is not None and device.ip_address.strip() == needle:
                return device
        return None

    async def submit_search(self, query: str) -> TraceViewState:
        """Resolve ``query`` to a device and trace from it."""

        term = query.strip()
        if not term:
            self.clear()
            return self._state

        device = self.resolve(term)
        if device is None:
            self._issue_token()
            _LOGGER.info("Search term %r matched no device", term)
            self._publish(
                TraceViewState(
                    phase=TracePhase.SETTLED,
                    error=MSG_DEVICE_NOT_FOUND.format(term=term),
                )
            )
            return self._state

        return await self._run(device)

    async def trace_device(self, device: Device) -> TraceViewState:
        """Trace from a device picked directly in the diagram."""

        return await self._run(device)

    def clear(self) -> None:
        """Drop the overlay and ignore any request still in flight."""

        self._issue_token()
        self._publish(TraceViewState())

    async def _run(self, device: Device) -> TraceViewState:
        token = self._issue_token()
        if device.device_type == TOP_HUB_TYPE:
            _LOGGER.info("Rejected trace from %s %s", device.device_type, device.name)
            self._publish(
                replace(
                    self._state,
                    phase=TracePhase.SETTLED,
                    error=MSG_TOP_HUB_ORIGIN.format(device_type=device.device_type),
                )
            )
            return self._state

        self._publish(replace(self._state, phase=TracePhase.RESOLVING, origin_id=device.node_id, error=None))

        try:
            result = await self._feed.fetch_trace(device.device_id)
        except TraceRequestError as exc:
            if token != self._latest:
                _LOGGER.debug("Discarding stale trace failure for token %s", token)
                return self._state
            _LOGGER.warning("Trace from device %s failed: %s", device.device_id, exc)
            self._publish(
                TraceViewState(
                    phase=TracePhase.SETTLED,
                    error=f"{MSG_TRACE_FAILED}: {exc}",
                    origin_id=device.node_id,
                )
            )
            return self._state

        if token != self._latest:
            _LOGGER.debug("Discarding stale trace result for token %s", token)
            return self._state

        node_ids = result.device_ids()
        node_ids.add(device.node_id)
        self._publish(
            TraceViewState(
                phase=TracePhase.SETTLED,
                filter_nodes=frozenset(node_ids),
                edges=tuple(map_trace_cables_to_edges(result.cables, token)),
                result=result,
                origin_id=device.node_id,
            )
        )
        _LOGGER.info("Trace from device %s covers %d devices", device.device_id, len(node_ids))
        return self._state

    def _issue_token(self) -> int:
        self._latest = next(self._tokens)
        return self._latest

    def _publish(self, state: TraceViewState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
