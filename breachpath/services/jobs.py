from sqlalchemy.orm import Session

from ..db import SolveJob


def record_solve_job(
    db: Session,
    *,
    file_name: str | None,
    status: str,
    total_rewards: float,
    outcome: str | None = None,
    max_reward: float | None = None,
    execution_time_ms: float | None = None,
) -> SolveJob:
    row = SolveJob(
        file_name=file_name,
        status=status,
        outcome=outcome,
        max_reward=max_reward,
        total_rewards=total_rewards,
        execution_time_ms=execution_time_ms,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_solve_jobs(db: Session) -> list[dict]:
    rows = db.query(SolveJob).order_by(SolveJob.id.desc()).all()
    return [
        {
            "id": row.id,
            "file_name": row.file_name,
            "status": row.status,
            "outcome": row.outcome,
            "max_reward": row.max_reward,
            "total_rewards": row.total_rewards,
            "execution_time_ms": row.execution_time_ms,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]
