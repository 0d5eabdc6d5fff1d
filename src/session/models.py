"""
Session records.

ExamSession is the persisted unit of progress. It serialises with camelCase
keys so records written by earlier versions of the app load unchanged.
LegacySession is the pre-history single-session record, read only for
migration.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.modes import ExamMode, ExamType, parse_exam_mode

SESSION_VERSION = 2


class SubmitReason(str, Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ExamSession(_CamelModel):
    """One exam attempt: its question list, progress and timing."""

    version: int = SESSION_VERSION
    id: str
    exam_type: ExamType
    mode: ExamMode = ExamMode.REAL_EXAM
    created_at: datetime
    started_at: Optional[datetime] = None
    time_limit_seconds: int = Field(ge=0)
    locked: bool = False
    set_id: str

    # Fixed once generated
    question_ids: list[str]
    seed: Optional[int] = None
    shuffle: Optional[bool] = None

    # Progress (raw answer values, see session.answers for shapes)
    answers: dict[str, Any] = Field(default_factory=dict)
    flags: list[str] = Field(default_factory=list)
    current_index: int = 0

    submitted_at: Optional[datetime] = None
    submit_reason: Optional[SubmitReason] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> ExamMode:
        return parse_exam_mode(value)

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    @property
    def current_question_id(self) -> Optional[str]:
        if 0 <= self.current_index < len(self.question_ids):
            return self.question_ids[self.current_index]
        return None

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LegacySession(_CamelModel):
    """Single-session record written before session history existed."""

    set_id: str
    question_ids: list[str] = Field(default_factory=list)
    answers: dict[str, Any] = Field(default_factory=dict)
    flags: list[str] = Field(default_factory=list)
    started_at: datetime
    submitted_at: Optional[datetime] = None
    duration_minutes: int = 50
    current_index: int = 0
