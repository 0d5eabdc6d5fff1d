"""
Shared primitives.

- rng: seeded mulberry32 generator, string seed hashing, Fisher-Yates shuffle
- modes: ExamMode / ExamType enums
- rounding: half-up decimal rounding for scores and generated figures
"""
