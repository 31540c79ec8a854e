"""Local JSON file store for calorie goals."""

import json
from dataclasses import dataclass
from pathlib import Path

from calorie_tracker.domain.goals import CalorieGoal, goal_from_row, goal_to_row
from calorie_tracker.services.goals import LocalGoalStore

GOALS_SLOT = "calorie_goals"


@dataclass
class JsonFileGoalStore(LocalGoalStore):
    """Keeps goals in a single named slot of a JSON document."""

    path: Path
    slot: str = GOALS_SLOT

    def load(self) -> list[CalorieGoal]:
        """Return the stored goals, or an empty list if the file is missing."""
        if not self.path.exists():
            return []
        document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        rows = document.get(self.slot, []) if isinstance(document, dict) else []
        return [goal_from_row(row) for row in rows if isinstance(row, dict)]

    def store(self, goals: list[CalorieGoal]) -> None:
        """Rewrite the slot with the given goals, keeping other slots intact."""
        document: dict[str, object] = {}
        if self.path.exists():
            existing = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            if isinstance(existing, dict):
                document = existing
        document[self.slot] = [goal_to_row(goal) for goal in goals]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
