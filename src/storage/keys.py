"""Persistent record names (kept compatible with existing saved data)."""

LEGACY_SESSION_KEY = "examSessionV1"
SESSIONS_KEY = "examSessionsV1"
ACTIVE_SESSION_KEY = "activeSessionIdV1"
SPACED_REPETITION_KEY = "examSpacedRepetitionV1"
MISTAKES_KEY = "examMistakesV1"
SELF_MARKS_KEY = "examSelfMarksV1"
EXAM_MODE_KEY = "examModeV1"
