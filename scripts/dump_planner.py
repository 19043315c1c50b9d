#!/usr/bin/env python3
"""Dump everything the lifeplanner store loads for one account.

Signs in, waits for the bulk load and prints every collection plus the
dashboard summaries, so you can compare what the store parsed against
what the backend holds.

Usage
-----
Set environment variables and run::

    export LIFEPLANNER_URL="https://abc.example.co"
    export LIFEPLANNER_ANON_KEY="public-anon-key"
    export LIFEPLANNER_EMAIL="you@example.com"
    export LIFEPLANNER_PASSWORD="your-password"
    python scripts/dump_planner.py

Options::

    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --only NAME          Only dump this collection (repeatable)
    --verbose            Enable debug logging (secrets are redacted)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from lifeplanner import LifePlannerClient, LifePlannerConfig, PlannerStore, insights  # noqa: E402
from lifeplanner.state.collections import Collection  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _records(store: PlannerStore, name: Collection) -> list[Any]:
    return {
        Collection.TASKS: store.tasks,
        Collection.HABITS: store.habits,
        Collection.GOALS: store.goals,
        Collection.GOAL_STEPS: store.goal_steps,
        Collection.VISION_ITEMS: store.vision_items,
    }[name]


def _summary(store: PlannerStore) -> dict[str, Any]:
    today = datetime.now(UTC).date()
    return {
        "tasks_due_today": len(insights.tasks_due_on(store.tasks, today)),
        "tasks_completed": len(insights.completed_tasks(store.tasks)),
        "tasks_overdue": len(insights.overdue_tasks(store.tasks, today)),
        "total_streak": insights.total_streak(store.habits),
        "best_streak": insights.best_streak(store.habits),
        "average_goal_progress": round(insights.average_goal_progress(store.goals), 1),
        "goals_achieved": len(insights.achieved_goals(store.goals)),
    }


# ── main ─────────────────────────────────────────────────────


async def main() -> int:
    parser = argparse.ArgumentParser(
        description="Dump everything lifeplanner loads for one account.",
    )
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument(
        "--only",
        action="append",
        choices=[str(name) for name in Collection],
        help="Only dump this collection (repeatable)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    email = os.environ.get("LIFEPLANNER_EMAIL")
    password = os.environ.get("LIFEPLANNER_PASSWORD")
    if not email or not password:
        print("Set LIFEPLANNER_EMAIL and LIFEPLANNER_PASSWORD", file=sys.stderr)
        return 2

    selected = [Collection(name) for name in args.only] if args.only else list(Collection)
    config = LifePlannerConfig.from_env(persist_session=False)
    result: dict[str, Any] = {"timestamp": datetime.now(UTC).isoformat(), "collections": {}}

    async with LifePlannerClient(config) as client:
        async with PlannerStore(client) as store:
            signed_in = await store.sign_in(email, password)
            if not signed_in.ok:
                print(f"Sign-in failed: {signed_in.error}", file=sys.stderr)
                return 1

            identity = signed_in.value
            result["user"] = identity.model_dump(mode="json") if identity is not None else None
            for name in selected:
                result["collections"][str(name)] = [
                    record.model_dump(mode="json") for record in _records(store, name)
                ]
            result["summary"] = _summary(store)
            await store.sign_out()

    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
        return 0
    if args.json_mode:
        print(payload)
        return 0

    out: list[str] = [_section("lifeplanner dump_planner")]
    out.append(f"  time  : {result['timestamp']}")
    out.append(f"  user  : {result['user']}")
    for name, rows in result["collections"].items():
        out.append(_section(f"{name.upper()}  ({len(rows)})"))
        for row in rows:
            out.append(json.dumps(row, default=str, ensure_ascii=False))
    out.append(_section("SUMMARY"))
    for key, value in result["summary"].items():
        out.append(f"  {key:<24}: {value}")
    print("\n".join(out))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
