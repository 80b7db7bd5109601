"""
Badges and watering milestones.

Badges are derived from ledger state on read and never stored:

| Badge           | Earned when                  |
|-----------------|------------------------------|
| First Steps     | always (joined)              |
| Quiz Master     | 3 or more quiz attempts      |
| Green Thumb     | watering streak >= 7         |
| Point Collector | points >= 100                |
| Eco Warrior     | points >= 500                |
| Plant Master    | watering streak >= 30        |
"""
from typing import Any, Dict, List, NamedTuple


class Badge(NamedTuple):
    name: str
    requirement: str
    metric: str  # "points", "streak" or "quiz_attempts"
    threshold: int


BADGES = (
    Badge("First Steps", "Join EcoPlay", "points", 0),
    Badge("Quiz Master", "Complete 3 quizzes", "quiz_attempts", 3),
    Badge("Green Thumb", "7-day watering streak", "streak", 7),
    Badge("Point Collector", "Earn 100 points", "points", 100),
    Badge("Eco Warrior", "Earn 500 points", "points", 500),
    Badge("Plant Master", "30-day watering streak", "streak", 30),
)

STREAK_MILESTONES = (
    (3, "Seedling Caretaker"),
    (7, "Green Thumb"),
    (30, "Plant Master"),
)


def earned_badges(points: int, streak: int, quiz_attempts: int) -> List[str]:
    """Names of the badges earned, in display order."""
    metrics = {
        "points": max(points or 0, 0),
        "streak": streak or 0,
        "quiz_attempts": quiz_attempts or 0,
    }
    return [b.name for b in BADGES if metrics[b.metric] >= b.threshold]


def streak_milestones(streak: int) -> List[Dict[str, Any]]:
    streak = streak or 0
    return [
        {
            "name": name,
            "days": days,
            "unlocked": streak >= days,
            "days_to_go": max(0, days - streak),
        }
        for days, name in STREAK_MILESTONES
    ]
