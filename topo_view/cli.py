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
"""CLI entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path

import httpx

from topo_view.config import ViewConfig, load_view_config
from topo_view.inventory import fetch_inventory, load_cables, load_devices
from topo_view.mermaid import write_mermaid_diagram
from topo_view.models import LayoutMode, ViewportState, ViewState
from topo_view.output import write_summary, write_summary_json, write_view_json
from topo_view.search import TraceSearchOrchestrator, TraceViewState
from topo_view.trace import HttpTraceFeed, LocalTraceFeed, TraceFeed
from topo_view.view import TopologyView

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""

    parser = argparse.ArgumentParser(description="topo-view")
    parser.add_argument("--devices", help="path to device feed JSON")
    parser.add_argument("--cables", help="path to cable feed JSON")
    parser.add_argument("--api-url", help="fetch device and cable feeds from this API base URL")
    parser.add_argument("--trace-url", help="trace API base URL (default: --api-url, else local trace)")
    parser.add_argument("--out-dir", required=True, help="output directory")
    parser.add_argument("--config", help="path to view configuration JSON")
    parser.add_argument("--zoom", type=float, help="zoom factor (default: viewport zoom or 1.0)")
    parser.add_argument(
        "--viewport",
        help='viewport JSON, e.g. {"x":0,"y":0,"zoom":1.2,"centerX":800,"centerY":500}',
    )
    parser.add_argument("--search", default="", help="search text for highlighting and filtering")
    parser.add_argument("--problem-only", action="store_true", help="show only devices that are not online")
    parser.add_argument("--selected", help="id of the selected device")
    parser.add_argument(
        "--layout",
        default=LayoutMode.RADIAL.value,
        choices=[mode.value for mode in LayoutMode],
        help="diagram layout (default: radial)",
    )
    trace_group = parser.add_mutually_exclusive_group()
    trace_group.add_argument("--trace-device", type=int, help="trace from this device id")
    trace_group.add_argument("--trace-search", help="trace from the device with this exact name or IP")
    parser.add_argument("--timeout", type=float, default=10.0, help="HTTP timeout seconds")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["INFO", "DEBUG", "WARN"],
        help="log level",
    )
    parser.add_argument(
        "--output-format",
        default="json",
        choices=["json", "mermaid", "both"],
        help="output format (default: json)",
    )
    return parser


def configure_logging(level: str) -> None:
    """Configure logging."""

    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s %(message)s")


def main(argv: list[str] | None = None) -> int:
    """Run topo-view."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not args.api_url and not (args.devices and args.cables):
        _LOGGER.error("either --api-url or both --devices and --cables are required")
        return 3

    try:
        config = load_view_config(args.config) if args.config else ViewConfig()
        viewport = ViewportState.from_mapping(json.loads(args.viewport)) if args.viewport else None
    except (OSError, ValueError) as exc:
        _LOGGER.error("Invalid input: %s", exc)
        return 3

    try:
        if args.api_url:
            devices, cables = fetch_inventory(args.api_url, timeout=args.timeout)
        else:
            devices = load_devices(args.devices)
            cables = load_cables(args.cables)
    except (OSError, ValueError, httpx.HTTPError) as exc:
        _LOGGER.error("Invalid input: %s", exc)
        return 3
    _LOGGER.info("Loaded %s devices and %s cables", len(devices), len(cables))

    trace_url = args.trace_url or args.api_url
    feed: TraceFeed
    if trace_url:
        feed = HttpTraceFeed(trace_url, timeout=args.timeout)
    else:
        feed = LocalTraceFeed(devices, cables)
    orchestrator = TraceSearchOrchestrator(feed, lambda: devices)

    if args.trace_search:
        asyncio.run(orchestrator.submit_search(args.trace_search))
    elif args.trace_device is not None:
        device = next((item for item in devices if item.device_id == args.trace_device), None)
        if device is None:
            _LOGGER.error("Invalid input: device %s not found", args.trace_device)
            return 3
        asyncio.run(orchestrator.trace_device(device))
    trace_state: TraceViewState = orchestrator.state
    if trace_state.error:
        _LOGGER.warning("Trace: %s", trace_state.error)

    if args.zoom is not None and viewport is not None:
        viewport = replace(viewport, zoom=args.zoom)
    zoom = args.zoom if args.zoom is not None else (viewport.zoom if viewport else 1.0)
    state = trace_state.apply(
        ViewState(
            search_query=args.search,
            problem_only=args.problem_only,
            zoom=zoom,
            selected_id=args.selected,
            viewport=viewport,
            layout_mode=LayoutMode(args.layout),
        )
    )
    result = TopologyView(devices, cables, config).compute(state)
    _LOGGER.info("Visible: %s nodes, %s edges", len(result.nodes), len(result.edges))

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    if args.output_format in ("json", "both"):
        write_view_json(out_dir / "view.json", result)
        write_summary_json(out_dir / "summary.json", result, trace_state)

    if args.output_format in ("mermaid", "both"):
        write_mermaid_diagram(out_dir / "topology.mmd", result)
        write_summary(out_dir / "summary.txt", result, trace_state)

    if trace_state.error:
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
