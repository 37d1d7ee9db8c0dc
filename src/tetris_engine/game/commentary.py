"""End-of-game remarks picked by final score."""

from __future__ import annotations

import random
from typing import Optional


LOW_SCORE_LIMIT = 1000
MEDIUM_SCORE_LIMIT = 5000

COMMENTS = {
    "low": (
        "Was that a practice round? Play again and show what you've got!",
        "Only just warmed up? The real skill hasn't shown up yet.",
        "Don't give up, every block master started as a beginner.",
        "Pretty sure the keyboard was the problem there.",
        "Failure is the mother of success. Keep going!",
    ),
    "medium": (
        "Not bad at all, there's real skill here. Keep it up!",
        "A solid run, but you can do even better.",
        "You've already beaten most players. Stay on it!",
        "Steady and careful. Aim higher next time!",
        "Getting better! Just a little further to expert level.",
    ),
    "high": (
        "Incredible! A legend of the falling blocks!",
        "That awareness, those moves, simply unreal.",
        "Suspiciously good. No proof, though.",
        "Bowing down to the master.",
        "That score belongs on a leaderboard!",
    ),
}


def bucket_for(score: int) -> str:
    if score < LOW_SCORE_LIMIT:
        return "low"
    if score < MEDIUM_SCORE_LIMIT:
        return "medium"
    return "high"


def comment_for(score: int, rng: Optional[random.Random] = None) -> str:
    chooser = rng if rng is not None else random
    return chooser.choice(COMMENTS[bucket_for(score)])
