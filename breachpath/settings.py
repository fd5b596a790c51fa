from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    solver_url: str = "http://localhost:5000"
    upload_timeout_seconds: float = 30.0
    solve_timeout_seconds: float = 60.0
    database_url: str = "sqlite:///./data/breachpath.db"
    export_dir: str = "./exports"
    log_level: str = "INFO"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse KEY=VALUE lines; blank lines and # comments are skipped."""
    if not path.is_file():
        return {}
    values = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        values[key.strip()] = value.strip().strip("\"'")
    return values


def load_settings(env_file: Path = Path(".env")) -> Settings:
    # Exported variables win over the file.
    env = {**read_env_file(env_file), **os.environ}
    return Settings(
        solver_url=env.get("SOLVER_URL", Settings.solver_url).rstrip("/"),
        upload_timeout_seconds=float(env.get("UPLOAD_TIMEOUT_SECONDS", Settings.upload_timeout_seconds)),
        solve_timeout_seconds=float(env.get("SOLVE_TIMEOUT_SECONDS", Settings.solve_timeout_seconds)),
        database_url=env.get("DATABASE_URL", Settings.database_url),
        export_dir=env.get("EXPORT_DIR", Settings.export_dir),
        log_level=env.get("LOG_LEVEL", Settings.log_level).upper(),
    )
