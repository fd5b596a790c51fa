from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TokenSequence(BaseModel):
    tokens: list[str] = Field(default_factory=list)
    reward: float = Field(0, ge=0)


class ProblemInput(BaseModel):
    """Parsed grid/sequence data as returned by the remote `/upload` endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    buffer_size: int = Field(0, ge=0, alias="bufferSize")
    matrix: list[list[str]] = Field(default_factory=list)
    sequences: list[TokenSequence] = Field(default_factory=list)

    @field_validator("matrix")
    @classmethod
    def _rows_share_one_length(cls, matrix: list[list[str]]) -> list[list[str]]:
        widths = {len(row) for row in matrix}
        if len(widths) > 1:
            raise ValueError(f"Matrix rows must share one length, got widths {sorted(widths)}.")
        return matrix

    def is_empty(self) -> bool:
        return not self.matrix or not self.sequences

    def total_rewards(self) -> float:
        return sum(seq.reward for seq in self.sequences)

    def to_solve_payload(self) -> dict:
        return {
            "matrix": self.matrix,
            "sequences": [{"tokens": seq.tokens, "reward": seq.reward} for seq in self.sequences],
            "bufferSize": self.buffer_size,
        }


class SolveResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    maxReward: float
    optimalPath: list[str] = Field(default_factory=list)
    coordinates: list[tuple[int, int]] = Field(default_factory=list)
    executionTime: float = 0


class SolveResult(BaseModel):
    max_reward: float = 0
    sequences_result: list[str] = Field(default_factory=list)
    coordinates: list[tuple[int, int]] = Field(default_factory=list)
    found: bool = False
    execution_time: float = 0

    @classmethod
    def from_response(cls, response: SolveResponse) -> "SolveResult":
        return cls(
            max_reward=response.maxReward,
            sequences_result=response.optimalPath,
            coordinates=response.coordinates,
            found=True,
            execution_time=response.executionTime,
        )
