"""Task, condition and task-result records for the interactive battery."""
from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class Condition:
    interface_mode: str
    room_condition: str
    label: str

    def as_dict(self) -> dict:
        return {"interface_mode": self.interface_mode, "room_condition": self.room_condition, "label": self.label}

    @classmethod
    def from_dict(cls, data: dict) -> Condition:
        return cls(**data)


@dataclass(frozen=True)
class Task:
    id: str
    type: str
    instruction: str
    target_value: str | None = None

    def as_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "instruction": self.instruction, "target_value": self.target_value}

    @classmethod
    def from_dict(cls, data: dict) -> Task:
        return cls(**data)


# Raw metrics every task widget reports.
REQUIRED_METRIC_FIELDS = frozenset(
    {"completion_time_ms", "total_clicks", "incorrect_clicks", "success"}
)

# Task-specific geometry / load fields a widget may also report.
OPTIONAL_METRIC_FIELDS = (
    "target_distance_px",
    "target_width_px",
    "acquire_distance_px",
    "acquire_width_px",
    "drag_distance_px",
    "drop_width_px",
    "num_choices",
    "character_count",
    "target_text",
    "distractor_count",
)


@dataclass(frozen=True)
class TaskResult:
    participant_id: str
    task_id: str
    task_type: str
    condition_label: str
    interface_mode: str
    room_condition: str
    completion_time_ms: float
    total_clicks: int
    incorrect_clicks: int
    cursor_distance_px: float
    success: bool
    timestamp: str
    target_distance_px: float | None = None
    target_width_px: float | None = None
    acquire_distance_px: float | None = None
    acquire_width_px: float | None = None
    drag_distance_px: float | None = None
    drop_width_px: float | None = None
    num_choices: int | None = None
    character_count: int | None = None
    target_text: str | None = None
    distractor_count: int | None = None
    predicted_time_ms: float | None = None
    efficiency: float | None = None

    def as_dict(self) -> dict:
        """Field order follows the declaration; unset optional fields are omitted."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.default is None:
                continue
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> TaskResult:
        return cls(**data)
