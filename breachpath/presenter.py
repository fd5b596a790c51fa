from __future__ import annotations

from enum import Enum
from typing import Any

from .models import ProblemInput, SolveResult


class Outcome(str, Enum):
    NO_SEQUENCES = "no_sequences"
    FULL = "full"
    PARTIAL = "partial"


HEADINGS = {
    Outcome.NO_SEQUENCES: "There are no sequences.",
    Outcome.FULL: "Full Solution Found!",
    Outcome.PARTIAL: "Partial Solution Found!",
}


def classify(result: SolveResult, total_rewards: float) -> Outcome:
    # Order matters: an empty problem has total_rewards == 0 == max_reward.
    if result.max_reward == 0:
        return Outcome.NO_SEQUENCES
    if result.max_reward == total_rewards:
        return Outcome.FULL
    return Outcome.PARTIAL


def format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_problem(problem: ProblemInput) -> dict[str, Any]:
    return {
        "buffer_size": problem.buffer_size,
        "matrix": [list(row) for row in problem.matrix],
        "sequences": [
            {"tokens": " - ".join(seq.tokens), "reward": f"Reward: {format_number(seq.reward)}"}
            for seq in problem.sequences
        ],
    }


def render_result(result: SolveResult, total_rewards: float) -> dict[str, Any]:
    outcome = classify(result, total_rewards)
    view: dict[str, Any] = {"outcome": outcome.value, "heading": HEADINGS[outcome], "lines": []}
    if outcome is Outcome.NO_SEQUENCES:
        return view
    coordinates = " -> ".join(f"({row}, {col})" for row, col in result.coordinates)
    view["lines"] = [
        f"Max Reward : {format_number(result.max_reward)}",
        f"Best Path : {' -> '.join(result.sequences_result)}",
        f"Best Path Coordinates : {coordinates}",
        f"Execution Time : {result.execution_time:.2f} ms",
    ]
    return view


class ResultPresenter:
    """Tracks the result modal; it starts closed and only opens on a found result.

    While a solve is in flight the previous result is hidden: the modal stays
    closed and the view offers neither viewing nor downloading it.
    """

    def __init__(self) -> None:
        self.modal_open = False

    def open(self, result: SolveResult, solving: bool = False) -> bool:
        if result.found and not solving:
            self.modal_open = True
        return self.modal_open

    def close(self) -> None:
        self.modal_open = False

    def toggle(self, result: SolveResult, solving: bool = False) -> bool:
        if self.modal_open:
            self.close()
            return False
        return self.open(result, solving=solving)

    def view(
        self,
        problem: ProblemInput,
        result: SolveResult,
        total_rewards: float,
        solving: bool = False,
    ) -> dict[str, Any]:
        showable = result.found and not solving
        return {
            "problem": None if problem.is_empty() else render_problem(problem),
            "can_view_result": showable,
            "can_download": showable and result.max_reward != 0,
            "modal_open": self.modal_open and showable,
            "result": render_result(result, total_rewards) if self.modal_open and showable else None,
        }
