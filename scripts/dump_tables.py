#!/usr/bin/env python3
"""Dump every table the jmsfleet library syncs.

Loads each table, printing both the mapped view model fields **and** the
raw row so you can spot columns that aren't mapped yet.

Usage
-----
Set environment variables and run::

    export JMS_SUPABASE_URL="https://xyzcompany.supabase.co"
    export JMS_SUPABASE_KEY="service-key"
    python scripts/dump_tables.py

Options::

    --table rentals      Only dump this table (repeatable)
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --skip-raw           Leave the raw rows out
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

from jmsfleet import EntityKind, JmsClient, JmsConfig, JmsError  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    bar = "=" * 60
    return f"\n{bar}\n  {title}\n{bar}"


def _format_field(key: str, value: Any, indent: int = 2) -> str:
    pad = " " * indent
    if isinstance(value, (dict, list)):
        return f"{pad}{key}: {json.dumps(value, ensure_ascii=False, default=str)}"
    return f"{pad}{key}: {value!r}"


def _print_model(index: int, model: Any, out: list[str], *, skip_raw: bool) -> dict[str, Any]:
    view = model.to_view()
    out.append(f"  [{index}]")
    for key, value in view.items():
        out.append(_format_field(key, value, indent=4))
    entry: dict[str, Any] = {"view": view}
    if not skip_raw:
        raw = getattr(model, "raw", {}) or {}
        unmapped = sorted(set(raw) - set(model.to_record()))
        if unmapped:
            out.append(f"    (unmapped columns: {', '.join(unmapped)})")
        entry["raw"] = raw
    return entry


async def dump_table(client: JmsClient, kind: EntityKind, *, skip_raw: bool) -> tuple[list[str], list[Any]]:
    out = [_section(f"{kind.value}")]
    try:
        models = await client.load(kind)
    except JmsError as exc:
        out.append(f"  ERROR: {type(exc).__name__}: {exc}")
        return out, []
    if not models:
        out.append("  (empty)")
    entries = [_print_model(index, model, out, skip_raw=skip_raw) for index, model in enumerate(models)]
    return out, entries


# ── main ─────────────────────────────────────────────────────


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump all tables the jmsfleet library can load",
    )
    parser.add_argument(
        "--table",
        action="append",
        choices=[kind.value for kind in EntityKind],
        help="Only dump this table (default: all tables)",
    )
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--skip-raw", action="store_true", help="Leave the raw rows out")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = JmsConfig.from_env(api_trace_enabled=args.verbose)
    except JmsError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    kinds = [EntityKind(name) for name in args.table] if args.table else list(EntityKind)
    result: dict[str, Any] = {"dumped_at": datetime.now(UTC).isoformat(), "tables": {}}
    lines: list[str] = []

    async with JmsClient(config) as client:
        for kind in kinds:
            out, entries = await dump_table(client, kind, skip_raw=args.skip_raw)
            lines.extend(out)
            result["tables"][kind.value] = entries
        await client.load_all()
        profile = client.store.company_profile
        prices = client.store.price_table
        result["company_profile"] = profile.to_view() if profile is not None else None
        result["price_table"] = prices.to_view() if prices is not None else None
        lines.append(_section("settings"))
        lines.append(_format_field("company_profile", result["company_profile"]))
        lines.append(_format_field("price_table", result["price_table"]))

    payload = json.dumps(result, indent=2, ensure_ascii=False, default=str) if args.json_mode else "\n".join(lines)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Output written to {args.output}", file=sys.stderr)
    else:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
