#!/usr/bin/env python3
"""Dump the derived dashboard views of a Home Assistant instance.

Connects, loads entities, registry and synced customizations, then prints
the area view (what the dashboard would show) and optionally the related
entities of one entity.

Usage
-----
Set environment variables and run::

    export HA_URL="http://homeassistant.local:8123"
    export HA_TOKEN="long-lived-access-token"
    python scripts/dump_views.py

Options::

    --edit-mode          Include hidden entities/rooms and filtered sensors
    --related ENTITY_ID  Also list entities on the same device
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --no-sync            Do not create or read the synced settings records
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

from pyhadash import AreaView, DashboardClient, HaConfig  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _view_to_dict(client: DashboardClient, view: AreaView) -> dict[str, Any]:
    climate = client.area_climate(view)
    return {
        "area_id": view.area_id,
        "name": client.display_name(view.area_id, view.name) if view.area_id else view.name,
        "temperature": climate.temperature,
        "humidity": climate.humidity,
        "filtered": dict(view.filtered_counts),
        "entities": {
            domain: [
                {
                    "entity_id": entity.entity_id,
                    "name": client.display_name(entity.entity_id, entity.default_name),
                    "state": entity.state,
                }
                for entity in entities
            ]
            for domain, entities in view.entities.items()
            if entities
        },
    }


def _print_view(data: dict[str, Any], out: list[str]) -> None:
    header = data["name"]
    climate = " ".join(part for part in (data["temperature"], data["humidity"]) if part)
    if climate:
        header = f"{header}  ({climate})"
    out.append(_section(header))
    for domain, entities in data["entities"].items():
        out.append(f"  {domain}:")
        for entity in entities:
            out.append(f"    {entity['name']:<40} {entity['state']:<14} [{entity['entity_id']}]")
    for domain, count in data["filtered"].items():
        if count:
            out.append(f"  +{count} more {domain}")


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump the area view pyhadash derives from Home Assistant.",
    )
    parser.add_argument("--edit-mode", action="store_true", help="Show hidden and filtered entities too")
    parser.add_argument("--related", metavar="ENTITY_ID", help="List entities on the same device")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--no-sync", action="store_true", help="Do not create or read the synced settings records")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = HaConfig.from_env()
    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "base_url": config.api_root,
        "areas": [],
    }
    out: list[str] = [_section("pyhadash dump_views")]
    out.append(f"  time      : {result['timestamp']}")
    out.append(f"  instance  : {config.api_root}")

    # Without --no-sync, missing settings records get created; nothing else is written.
    async with DashboardClient(config, flush_on_close=False) as client:
        if not await client.connect(load_settings=not args.no_sync):
            print(f"Connection failed: {client.state.error}", file=sys.stderr)
            raise SystemExit(1)
        if not args.no_sync:
            await client.wait_settings_loaded()
            status = client.sync_status
            result["sync"] = status.model_dump(mode="json")
            out.append(f"  sync      : {'available' if status.available else 'unavailable'}")
            if status.error:
                out.append(f"  sync error: {status.error}")

        for view in client.area_view(edit_mode=args.edit_mode):
            data = _view_to_dict(client, view)
            result["areas"].append(data)
            _print_view(data, out)

        if args.related:
            related = client.related_entities(args.related)
            device = client.device_name(args.related) or "unknown device"
            result["related"] = {
                "device": device,
                "entities": [
                    {"entity_id": item.entity.entity_id, "type": item.entity_type.value, "state": item.entity.state}
                    for item in related
                ],
            }
            out.append(_section(f"RELATED to {args.related} ({device})"))
            for item in related:
                out.append(f"  {item.entity_type.value:<14} {item.entity.entity_id:<40} {item.entity.state}")

        await client.disconnect()

    # ── Output ──
    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload if args.json_mode else "\n".join(out) + "\n", encoding="utf-8")
        print(f"Output written to {args.output}", file=sys.stderr)
    elif args.json_mode:
        print(payload)
    else:
        print("\n".join(out))


if __name__ == "__main__":
    asyncio.run(main())
