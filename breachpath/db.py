from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, DateTime, Float, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SolveJob(Base):
    __tablename__ = "solve_jobs"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="solved")
    outcome = Column(String, nullable=True)
    max_reward = Column(Float, nullable=True)
    total_rewards = Column(Float, nullable=False, default=0)
    execution_time_ms = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


def make_session_factory(database_url: str) -> sessionmaker:
    connect_args = {}
    if database_url.startswith("sqlite:///"):
        # The history file lives next to the client; make sure its folder exists.
        db_path = database_url.removeprefix("sqlite:///")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
