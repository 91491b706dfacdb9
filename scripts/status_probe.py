#!/usr/bin/env python3
"""Passive probe for the FSP simulator status feed.

Connects through fsplink, prints every state change and connection
transition, optionally sends one command once connected, and prints a
summary on exit.

Use this to check that the simulator is reachable and how often its
state actually changes.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fsplink import ConnectionState, FspClient, FspConfig, FspError  # noqa: E402

_LOG = logging.getLogger("status_probe")


@dataclass
class ProbeStats:
    started_at: float
    changes: int = 0
    last_change_at: float | None = None
    states_seen: dict[str, int] = field(default_factory=dict)

    def on_state(self, state: str, now: float) -> float | None:
        previous = self.last_change_at
        self.changes += 1
        self.last_change_at = now
        self.states_seen[state] = self.states_seen.get(state, 0) + 1
        return None if previous is None else now - previous


class PrintingSubscriber:
    def __init__(self, stats: ProbeStats) -> None:
        self._stats = stats

    def notify(self, state: str) -> None:
        now = time.time()
        delta = self._stats.on_state(state, now)
        ts_text = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(now))
        gap_text = "first" if delta is None else f"{delta:.2f}s"
        print(f"[probe] state#{self._stats.changes} at {ts_text} gap={gap_text} state={state}")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Passive probe for the FSP simulator status feed.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="WebSocket URL (default: FSP_URL or ws://127.0.0.1:8765).",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--command",
        default=None,
        help="Send this command once, as soon as the link is up (e.g. restart).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_summary(stats: ProbeStats) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s : {runtime:.1f}")
    print(f"[probe]   changes   : {stats.changes}")
    for state, count in sorted(stats.states_seen.items()):
        print(f"[probe]   {state:<9} : {count}")


async def _run(args: argparse.Namespace, stats: ProbeStats) -> None:
    overrides = {"url": args.url} if args.url else {}
    config = FspConfig.from_env(**overrides)
    print(f"[probe] Connecting to {config.url}")

    async with FspClient(config) as client:
        await client.subscribe(PrintingSubscriber(stats))
        client.connect()

        pending_command = args.command
        last_connection = client.connection_state
        while args.duration <= 0 or (time.time() - stats.started_at) < args.duration:
            current = client.connection_state
            if current != last_connection:
                print(f"[probe] connection {last_connection} -> {current}")
                last_connection = current
            if pending_command and current is ConnectionState.CONNECTED:
                try:
                    await client.send_command(pending_command)
                    print(f"[probe] sent command {pending_command!r}")
                    pending_command = None
                except FspError as exc:
                    print(f"[probe] command failed: {exc}", file=sys.stderr)
            await asyncio.sleep(0.2)
        print(f"[probe] Reached --duration={args.duration}s, stopping.")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stats = ProbeStats(started_at=time.time())
    try:
        asyncio.run(_run(args, stats))
    except KeyboardInterrupt:
        pass
    except FspError as exc:
        print(f"[probe] {exc}", file=sys.stderr)
        return 2

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
