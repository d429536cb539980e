#!/usr/bin/env python3
"""
Ranking Smoke Script

Drives a running ranking endpoint (`vercel dev` or a deployment) from a
single machine.

HOW THE RANKING WORKS:
======================

1. SUBMISSIONS:
   - Each mode (flick, tracking, grid) keeps one best entry per player
   - A submission is stored only if its efficiency beats the player's best
   - The board keeps the top 50 by efficiency; rank 51 means "off the board"

2. CONSISTENCY:
   - A submission is several store calls with no transaction around them
   - Concurrent submissions for the same player can leave duplicate entries
     (the `race` command shows this)

USAGE:
======
# Show the flick board
python ranking_smoke.py fetch --mode flick

# Submit one score
python ranking_smoke.py submit --name Alice --efficiency 80

# Fill a mode with simulated players (submissions are rate limited to
# 10/minute per IP, so pace them against a deployment)
python ranking_smoke.py fill --mode tracking --players 51 --delay 6

# Fire concurrent submissions for one player
python ranking_smoke.py race --name Racer --requests 5
"""

import argparse
import asyncio
import json
import random
from typing import Any, Dict, Optional

import aiohttp


# Default API base - `vercel dev` serves on port 3000
DEFAULT_API_BASE = "http://localhost:3000"
RANKING_ENDPOINT = "/api/ranking"


async def api_call(
    session: aiohttp.ClientSession,
    api_base: str,
    method: str = "GET",
    params: Optional[Dict[str, str]] = None,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Make an API call."""
    url = f"{api_base}{RANKING_ENDPOINT}"

    try:
        async with session.request(method, url, params=params, json=data) as resp:
            return await resp.json()
    except aiohttp.ClientError as e:
        return {"error": str(e)}
    except json.JSONDecodeError:
        return {"error": "Invalid JSON response"}


async def fetch_rankings(session: aiohttp.ClientSession, api_base: str, mode: str) -> list:
    result = await api_call(session, api_base, params={"mode": mode})
    if "error" in result:
        print(f"  ✗ fetch failed: {result}")
        return []
    return result.get("rankings", [])


async def submit_score(
    session: aiohttp.ClientSession,
    api_base: str,
    mode: str,
    name: str,
    efficiency: int,
) -> Dict[str, Any]:
    return await api_call(session, api_base, "POST", data={
        "mode": mode,
        "name": name,
        "score": efficiency * 10,
        "accuracy": f"{random.uniform(60, 100):.1f}%",
        "efficiency": efficiency,
    })


def print_board(mode: str, rankings: list):
    print(f"\n{'='*60}")
    print(f"RANKING: {mode.upper()} ({len(rankings)} entries)")
    print(f"{'='*60}")
    for position, entry in enumerate(rankings, start=1):
        accuracy = entry.get("accuracy")
        accuracy_str = f"{accuracy}%" if accuracy is not None else "-"
        print(f"  {position:2d}. {entry.get('name', '?'):<20} eff={entry.get('efficiency'):>6} "
              f"acc={accuracy_str:>7} {entry.get('date') or ''}")


async def show_board(api_base: str, mode: str):
    async with aiohttp.ClientSession() as session:
        print_board(mode, await fetch_rankings(session, api_base, mode))


async def submit_once(api_base: str, mode: str, name: str, efficiency: int):
    async with aiohttp.ClientSession() as session:
        result = await submit_score(session, api_base, mode, name, efficiency)
        if result.get("updated"):
            print(f"  ✓ {name} saved at rank {result.get('rank')}")
        else:
            print(f"  - {name} not updated: {result}")


async def fill_board(api_base: str, mode: str, num_players: int, delay: float = 0):
    """Submit strictly increasing efficiencies for N players, then check the trim."""
    async with aiohttp.ClientSession() as session:
        for i in range(1, num_players + 1):
            result = await submit_score(session, api_base, mode, f"SmokePlayer{i:03d}", i)
            print(f"  SmokePlayer{i:03d} eff={i:3d} -> {result.get('rank', result)}")
            if delay:
                await asyncio.sleep(delay)

        rankings = await fetch_rankings(session, api_base, mode)
        print(f"\nBoard size: {len(rankings)} (expected at most 50)")
        if num_players > 50:
            names = {entry.get("name") for entry in rankings}
            evicted = "SmokePlayer001" not in names
            print(f"Lowest player evicted: {'yes' if evicted else 'NO'}")


async def race_submissions(api_base: str, mode: str, name: str, num_requests: int):
    """Fire concurrent improving submissions for one player and count their entries."""
    base = random.randint(1000, 5000)
    async with aiohttp.ClientSession() as session:
        tasks = [
            submit_score(session, api_base, mode, name, base + i)
            for i in range(num_requests)
        ]
        results = await asyncio.gather(*tasks)
        accepted = sum(1 for r in results if r.get("updated"))
        print(f"Accepted {accepted}/{num_requests} concurrent submissions")

        rankings = await fetch_rankings(session, api_base, mode)
        entries = [entry for entry in rankings if entry.get("name") == name]
        print(f"Entries on the board for {name}: {len(entries)}")
        if len(entries) > 1:
            print("  ⚠ lost update: more than one entry for the same player")


def main():
    parser = argparse.ArgumentParser(
        description="Smoke-test the ranking endpoint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--api", type=str, default=DEFAULT_API_BASE, help="API base URL")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    fetch_parser = subparsers.add_parser("fetch", help="Print a mode's board")
    fetch_parser.add_argument("--mode", "-m", default="flick")

    submit_parser = subparsers.add_parser("submit", help="Submit a single score")
    submit_parser.add_argument("--mode", "-m", default="flick")
    submit_parser.add_argument("--name", "-n", required=True)
    submit_parser.add_argument("--efficiency", "-e", type=int, required=True)

    fill_parser = subparsers.add_parser("fill", help="Fill a board with simulated players")
    fill_parser.add_argument("--mode", "-m", default="tracking")
    fill_parser.add_argument("--players", "-p", type=int, default=51)
    fill_parser.add_argument("--delay", "-d", type=float, default=0, help="Seconds between submissions")

    race_parser = subparsers.add_parser("race", help="Concurrent submissions for one player")
    race_parser.add_argument("--mode", "-m", default="flick")
    race_parser.add_argument("--name", "-n", default="SmokeRacer")
    race_parser.add_argument("--requests", "-r", type=int, default=5)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "fetch":
        asyncio.run(show_board(args.api, args.mode))

    elif args.command == "submit":
        asyncio.run(submit_once(args.api, args.mode, args.name, args.efficiency))

    elif args.command == "fill":
        asyncio.run(fill_board(args.api, args.mode, args.players, args.delay))

    elif args.command == "race":
        asyncio.run(race_submissions(args.api, args.mode, args.name, args.requests))


if __name__ == "__main__":
    main()
