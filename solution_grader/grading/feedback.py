"""
Feedback synthesis.

Maps a score to one of four coarse feedback bands. The message depends
on the score alone, not on which checks failed.
"""

from solution_grader.models import FeedbackTier

# Lower bound (inclusive) of each band, highest first; anything lower is encouraging
_BANDS: tuple[tuple[int, FeedbackTier], ...] = (
    (90, FeedbackTier.CELEBRATORY),
    (70, FeedbackTier.POSITIVE),
    (50, FeedbackTier.CONSTRUCTIVE),
)

MESSAGES: dict[FeedbackTier, str] = {
    FeedbackTier.CELEBRATORY: (
        "Excellent work! Your solution passes all tests with flying colors. 🎉"
    ),
    FeedbackTier.POSITIVE: (
        "Good job! Your solution works but could be improved. Review the failed tests."
    ),
    FeedbackTier.CONSTRUCTIVE: (
        "Your solution needs work. Focus on the failed test cases and try again."
    ),
    FeedbackTier.ENCOURAGING: (
        "Keep trying! Review the requirements and test your code thoroughly."
    ),
}


def feedback_tier(score: int) -> FeedbackTier:
    """
    Return the feedback band for a score.

    Raises:
        ValueError: If the score is outside 0-100.
    """
    if not 0 <= score <= 100:
        raise ValueError(f"Score must be between 0 and 100, got {score}")
    for lower_bound, tier in _BANDS:
        if score >= lower_bound:
            return tier
    return FeedbackTier.ENCOURAGING


def feedback(score: int) -> str:
    """Return the feedback message for a score."""
    return MESSAGES[feedback_tier(score)]
