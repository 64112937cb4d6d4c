"""
Load simulation script for the Game Progress API.

Creates a pool of players, then continuously submits growing (and
occasionally stale) progress, reads the leaderboard and uploads saves to
simulate real clients under load.

Usage:
    python simulate_load.py
"""

import random
import time

import requests

API_BASE_URL = "http://localhost:3080/api"
POOL_SIZE = 20


def create_player(name: str):
    """POST a new anonymous player and return (token, progress dict)."""
    try:
        resp = requests.post(f"{API_BASE_URL}/players", json={"display_name": name}, timeout=10)
        resp.raise_for_status()
        print(f"  + player  name={name}  status={resp.status_code}")
        return resp.json()["token"], {
            "total_money_earned": 0.0,
            "reputation": 0.0,
            "skill_levels_sum": 0,
            "consultants_count": 0,
            "ai_tool_tiers_sum": 0,
            "manual_tasks_completed": 0,
        }
    except requests.RequestException as e:
        print(f"  ✗ create failed: {e}")
        return None


def submit_scores(token: str, progress: dict):
    """Advance the local progress and PUT it; sometimes replay a stale copy."""
    stale = dict(progress)
    progress["total_money_earned"] += random.uniform(10, 5000)
    progress["reputation"] += random.uniform(0, 0.2)
    progress["skill_levels_sum"] += random.randint(0, 2)
    progress["manual_tasks_completed"] += random.randint(0, 10)
    body = stale if random.random() < 0.2 else progress
    try:
        resp = requests.put(
            f"{API_BASE_URL}/scores",
            json=body,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10,
        )
        label = "stale" if body is stale else "fresh"
        print(f"  ↑ scores  {label}  status={resp.status_code}")
    except requests.RequestException as e:
        print(f"  ✗ submit failed: {e}")


def get_leaderboard(token: str):
    """GET the leaderboard with the caller's own standing."""
    try:
        resp = requests.get(
            f"{API_BASE_URL}/leaderboard",
            headers={"Authorization": f"Bearer {token}"},
            timeout=10,
        )
        data = resp.json()
        print(f"  ↓ board   entries={len(data.get('entries', []))}  own_rank={data.get('player_rank', '?')}")
        return data
    except requests.RequestException as e:
        print(f"  ✗ leaderboard failed: {e}")
        return {}


def upload_save(token: str, progress: dict, version: int):
    try:
        resp = requests.put(
            f"{API_BASE_URL}/saves",
            json={"save_data": {"progress": progress}, "version": version},
            headers={"Authorization": f"Bearer {token}"},
            timeout=10,
        )
        print(f"  ↑ save    v{version}  status={resp.status_code}")
    except requests.RequestException as e:
        print(f"  ✗ save failed: {e}")


if __name__ == "__main__":
    print("🚀 Load simulation started — press Ctrl+C to stop\n")
    pool = [p for p in (create_player(f"Sim {i}") for i in range(POOL_SIZE)) if p]
    if not pool:
        raise SystemExit("No players could be created; is the server running?")

    cycle = 0
    try:
        while True:
            cycle += 1
            token, progress = random.choice(pool)
            print(f"── Cycle {cycle} ──")
            submit_scores(token, progress)
            get_leaderboard(token)
            if cycle % 5 == 0:
                upload_save(token, progress, cycle)
            delay = random.uniform(0.5, 2)
            time.sleep(delay)
    except KeyboardInterrupt:
        print("\n⏹ Simulation stopped")
