"""Internal constants shared across the library."""

from enum import StrEnum

USER_AGENT = "lifeplanner-python"

# ------------------------------------------------------------------
# Backend tables
# ------------------------------------------------------------------


class Table(StrEnum):
    TASKS = "tasks"
    HABITS = "habits"
    GOALS = "goals"
    GOAL_STEPS = "goal_steps"
    VISION_BOARD = "vision_board"
    PROFILES = "profiles"


#: PostgREST code for an expired/invalid JWT.
JWT_EXPIRED_CODES: frozenset[str] = frozenset({"PGRST301", "PGRST303"})

#: Postgres ``insufficient_privilege`` (row-level security denial).
PERMISSION_DENIED_CODES: frozenset[str] = frozenset({"42501"})

# ------------------------------------------------------------------
# Pomodoro durations (seconds)
# ------------------------------------------------------------------

WORK_SECONDS = 25 * 60
BREAK_SECONDS = 5 * 60

# ------------------------------------------------------------------
# Habit streak tiers (lower bounds, days)
# ------------------------------------------------------------------

STREAK_TIER_MOMENTUM = 7
STREAK_TIER_AMAZING = 14
STREAK_TIER_INCREDIBLE = 30

MOTIVATIONAL_QUOTES: tuple[str, ...] = (
    "The only way to do great work is to love what you do. - Steve Jobs",
    "Life is what happens to you while you're busy making other plans. - John Lennon",
    "The future belongs to those who believe in the beauty of their dreams. - Eleanor Roosevelt",
    "It is during our darkest moments that we must focus to see the light. - Aristotle",
    "The way to get started is to quit talking and begin doing. - Walt Disney",
    "Your limitation, it's only your imagination.",
    "Push yourself, because no one else is going to do it for you.",
    "Great things never come from comfort zones.",
    "Dream it. Wish it. Do it.",
    "Success doesn't just find you. You have to go out and get it.",
)
