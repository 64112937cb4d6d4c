import random
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

import players
import scores
from database import build_engine, init_db
from errors import StorageError
from scores import ScoreComponents


def test_merge_never_lowers_a_field(db):
    player_id, _ = players.create_player(db, 'Alice')

    scores.merge(db, player_id, ScoreComponents(total_money_earned=1000.0, reputation=2.5, skill_levels_sum=10))
    scores.merge(db, player_id, ScoreComponents(total_money_earned=500.0, reputation=3.0, consultants_count=2))

    assert scores.get_components(db, player_id) == ScoreComponents(
        total_money_earned=1000.0,
        reputation=3.0,
        skill_levels_sum=10,
        consultants_count=2,
    )


def test_merge_result_is_fieldwise_maximum_in_any_order(db):
    rng = random.Random(7)
    submissions = [
        ScoreComponents(
            total_money_earned=rng.uniform(0, 10_000),
            reputation=rng.uniform(0, 5),
            skill_levels_sum=rng.randint(0, 50),
            consultants_count=rng.randint(0, 10),
            ai_tool_tiers_sum=rng.randint(0, 20),
            manual_tasks_completed=rng.randint(0, 300),
        )
        for _ in range(12)
    ]
    expected = ScoreComponents(**{
        name: max(getattr(s, name) for s in submissions) for name in scores.SCORE_FIELDS
    })

    forward, _ = players.create_player(db, 'Forward')
    backward, _ = players.create_player(db, 'Backward')
    for submission in submissions:
        scores.merge(db, forward, submission)
    for submission in reversed(submissions):
        scores.merge(db, backward, submission)

    assert scores.get_components(db, forward) == expected
    assert scores.get_components(db, backward) == expected


def test_merge_creates_missing_row(db):
    player_id, _ = players.create_player(db, 'Alice')
    db.execute(text('DELETE FROM score_components WHERE player_id = :pid'), {'pid': player_id})
    db.commit()

    scores.merge(db, player_id, ScoreComponents(manual_tasks_completed=4))
    assert scores.get_components(db, player_id) == ScoreComponents(manual_tasks_completed=4)


def test_concurrent_disjoint_raises_both_land(tmp_path):
    file_engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    init_db(file_engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)

    setup = Session()
    player_id, _ = players.create_player(setup, 'Racer')
    setup.close()

    def submit(components):
        session = Session()
        try:
            scores.merge(session, player_id, components)
        finally:
            session.close()

    submissions = []
    for step in range(1, 21):
        submissions.append(ScoreComponents(reputation=float(step)))
        submissions.append(ScoreComponents(skill_levels_sum=step))

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(submit, submissions))

    check = Session()
    try:
        final = scores.get_components(check, player_id)
    finally:
        check.close()
        file_engine.dispose()

    assert final.reputation == 20.0
    assert final.skill_levels_sum == 20


def test_merge_out_of_range_value_is_storage_error(db):
    player_id, _ = players.create_player(db, 'Alice')

    with pytest.raises(StorageError):
        scores.merge(db, player_id, ScoreComponents(skill_levels_sum=2**63))

    # Session is usable again and nothing changed
    assert scores.get_components(db, player_id) == ScoreComponents()
