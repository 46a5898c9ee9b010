"""Urgency heuristic for new intakes.

A deterministic keyword-count classifier, not a model call: the lower-cased
intake text is scanned for a fixed list of urgent keywords and the number of
occurrences is mapped to a risk level through a threshold table.
"""

from dataclasses import dataclass, field

from ..core.config import Settings, get_settings
from ..schemas import RiskLevel, UrgencyLevel


@dataclass
class UrgencyAssessment:
    """Result of classifying one piece of text."""

    risk: RiskLevel
    score: int
    matched_keywords: list[str] = field(default_factory=list)

    @property
    def urgency(self) -> UrgencyLevel:
        return self.risk.urgency


class UrgencyClassifier:
    """Keyword-count classifier with a configurable threshold table.

    >= high_threshold matches -> High, >= medium_threshold -> Medium, else Low.
    With the defaults (3 and 2) that is: 3+ High, exactly 2 Medium, 0-1 Low.

    Every occurrence counts, so a repeated keyword scores more than once:
    "court ... court" is Medium, not Low. Records scored by presence only
    (one point per distinct keyword) can rank lower than a rescore here.
    """

    def __init__(
        self,
        keywords: list[str],
        high_threshold: int = 3,
        medium_threshold: int = 2,
    ):
        if medium_threshold > high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")
        self.keywords = [k.lower() for k in keywords if k]
        self.high_threshold = high_threshold
        self.medium_threshold = medium_threshold

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UrgencyClassifier":
        settings = settings or get_settings()
        return cls(
            keywords=settings.urgency_keywords,
            high_threshold=settings.urgency_high_threshold,
            medium_threshold=settings.urgency_medium_threshold,
        )

    def risk_for_score(self, score: int) -> RiskLevel:
        if score >= self.high_threshold:
            return RiskLevel.HIGH
        if score >= self.medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def classify(self, text: str | None) -> UrgencyAssessment:
        """Count keyword occurrences (substring matches) in ``text``."""
        text = (text or "").lower()
        score = 0
        matched = []
        for keyword in self.keywords:
            occurrences = text.count(keyword)
            if occurrences:
                score += occurrences
                matched.append(keyword)
        return UrgencyAssessment(
            risk=self.risk_for_score(score),
            score=score,
            matched_keywords=matched,
        )
