#!/usr/bin/env python3
"""Run the SimVar state engine and dump what the panel would display.

Loads the variable configuration (remote, local or built-in), advances the
engine, and prints the raw store values next to the rounded gauge readout.

Usage
-----
::

    export SIMVAR_CONFIG="http://localhost:5173/_public/simvars.json"
    python scripts/dump_simvars.py --ticks 100

Options::

    --config SOURCE     URL or path of simvars.json (default: $SIMVAR_CONFIG)
    --ticks N           Advance N ticks manually before dumping (default: 10)
    --realtime          Run the tick and render clocks instead of manual ticks
    --seconds S         How long to run with --realtime (default: 5)
    --seed N            Seed the random source for reproducible output
    --json              Output as machine-readable JSON
    --output FILE       Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pysimvar import EngineSettings, EventBus, PanelInstrument, PanelView, StateEngine  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_store(engine: StateEngine, out: list[str]) -> None:
    out.append(_section("STORE"))
    width = max((len(name) for name in engine.order), default=0)
    store = engine.store
    for name in engine.order:
        unit = store.unit(name)
        out.append(f"  {name:<{width}} : {store.get(name):>12.4f} {unit}".rstrip())


def _format_readout(view: PanelView, out: list[str]) -> None:
    out.append(_section("PANEL"))
    for topic, value in view.readout().items():
        out.append(f"  {topic:<20} : {value:g}")
    out.append(f"  {'fuel_fraction':<20} : {view.fuel_fraction:.3f} ({view.fuel_color})")


async def _run_realtime(engine: StateEngine, instrument: PanelInstrument, seconds: float) -> None:
    async with engine:
        instrument.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            instrument.stop()


# ── main ─────────────────────────────────────────────────────


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump SimVar engine state and the panel readout for debugging / development.",
    )
    parser.add_argument("--config", help="URL or path of simvars.json (default: $SIMVAR_CONFIG)")
    parser.add_argument("--ticks", type=int, default=10, help="Manual ticks to advance (default: 10)")
    parser.add_argument("--realtime", action="store_true", help="Run the real tick and render clocks")
    parser.add_argument("--seconds", type=float, default=5.0, help="Duration for --realtime (default: 5)")
    parser.add_argument("--seed", type=int, help="Seed for the random source")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.config:
        overrides["config_source"] = args.config
    if args.seed is not None:
        overrides["seed"] = args.seed
    settings = EngineSettings.from_env(**overrides)

    engine = await StateEngine.from_settings(settings)
    bus = EventBus()
    instrument = PanelInstrument(engine, bus, render_hz=settings.render_hz)
    view = PanelView(bus)

    if args.realtime:
        await _run_realtime(engine, instrument, args.seconds)
    else:
        for _ in range(args.ticks):
            engine.tick()
            instrument.update()

    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "source": settings.config_source or "built-in",
        "interval_ms": engine.interval_ms,
        "ticks": engine.tick_count,
        "frames": instrument.frames,
        "store": engine.dump(),
        "panel": view.readout(),
        "fuel_color": view.fuel_color,
    }

    if args.json_mode:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    else:
        out: list[str] = [_section("pysimvar dump_simvars")]
        out.append(f"  time      : {result['timestamp']}")
        out.append(f"  source    : {result['source']}")
        out.append(f"  interval  : {engine.interval_ms:g} ms")
        out.append(f"  ticks     : {engine.tick_count} (frames {instrument.frames})")
        _format_store(engine, out)
        _format_readout(view, out)
        payload = "\n".join(out)

    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Output written to {args.output}", file=sys.stderr)
    else:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
