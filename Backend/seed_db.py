"""
Database seeding script for the Game Progress API.

Populates the database with demo players, each with random progress
merged through the score ledger.

Usage:
    python seed_db.py [player_count]
"""

import random
import sys
import time

import players
import scores
from database import SessionLocal, engine, init_db

DEMO_NAMES = ["Ada", "Brook", "Cato", "Dana", "Ezra", "Fern", "Gus", "Hale", "Iris", "Juno"]


def random_progress() -> scores.ScoreComponents:
    return scores.ScoreComponents(
        total_money_earned=round(random.uniform(0, 250_000), 2),
        reputation=round(random.uniform(0, 5), 2),
        skill_levels_sum=random.randint(0, 60),
        consultants_count=random.randint(0, 12),
        ai_tool_tiers_sum=random.randint(0, 30),
        manual_tasks_completed=random.randint(0, 500),
    )


def seed(count: int):
    """Create ``count`` players with random scores."""
    init_db(engine)
    db = SessionLocal()
    try:
        print(f"⏳ Creating {count} players …")
        start = time.time()
        hidden = 0
        for i in range(count):
            name = f"{random.choice(DEMO_NAMES)} #{i + 1}"
            player_id, _ = players.create_player(db, name)
            scores.merge(db, player_id, random_progress())
            # Roughly one in ten opts out of the leaderboard
            if random.random() < 0.1:
                players.update_profile(db, player_id, show_on_leaderboard=False)
                hidden += 1
        print(f"   ✓ {count} players created in {time.time() - start:.1f}s ({hidden} hidden)")
    finally:
        db.close()

    print("\n🎉 Database seeding complete!")


if __name__ == "__main__":
    seed(int(sys.argv[1]) if len(sys.argv) > 1 else 200)
