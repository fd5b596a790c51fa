from breachpath.db import make_session_factory
from breachpath.services.jobs import list_solve_jobs, record_solve_job


def test_jobs_listed_newest_first(settings) -> None:
    session_factory = make_session_factory(settings.database_url)
    db = session_factory()
    try:
        record_solve_job(db, file_name="a.txt", status="failed", total_rewards=8)
        record_solve_job(
            db,
            file_name="b.txt",
            status="solved",
            total_rewards=8,
            outcome="partial",
            max_reward=5,
            execution_time_ms=3.2,
        )

        jobs = list_solve_jobs(db)
    finally:
        db.close()

    assert [job["file_name"] for job in jobs] == ["b.txt", "a.txt"]
    assert jobs[0]["outcome"] == "partial"
    assert jobs[0]["created_at"]
    assert jobs[1]["max_reward"] is None
