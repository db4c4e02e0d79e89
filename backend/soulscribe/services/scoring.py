"""Heuristic content scoring.

The numeric scores are random stand-ins for a real quality model. Anything
with a ``score(text) -> Scorecard`` method can replace :class:`HeuristicScorer`
without touching the moderation workflow.
"""
from __future__ import annotations

import random
import re
from dataclasses import asdict, dataclass
from typing import Literal, Protocol

Rating = Literal["Low", "Medium", "High"]
Engagement = Literal["Below Average", "Average", "Above Average"]

GRAMMAR_THRESHOLD = 85.0
ORIGINALITY_THRESHOLD = 80.0
AI_PROBABILITY_THRESHOLD = 20.0  # percent

GRAMMAR_BASE, GRAMMAR_SPAN = 70.0, 30.0
ORIGINALITY_BASE, ORIGINALITY_SPAN = 60.0, 40.0
READABILITY_BASE, READABILITY_SPAN = 75.0, 25.0
AI_PROBABILITY_SPAN = 30.0  # percent

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

_CAMEL = {
    "ai_generated_probability": "aiGeneratedProbability",
    "keyword_strength": "keywordStrength",
    "topic_relevance": "topicRelevance",
    "predicted_engagement": "predictedEngagement",
}


@dataclass(frozen=True)
class ApprovalThresholds:
    grammar: float = GRAMMAR_THRESHOLD
    originality: float = ORIGINALITY_THRESHOLD
    ai_probability: float = AI_PROBABILITY_THRESHOLD


@dataclass(frozen=True)
class Scorecard:
    grammar: float
    originality: float
    readability: float
    ai_generated_probability: float
    keyword_strength: Rating
    topic_relevance: Rating
    predicted_engagement: Engagement
    approved: bool

    def to_dict(self) -> dict:
        """JSON shape stored on content rows and returned to clients."""
        return {_CAMEL.get(k, k): v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> "Scorecard":
        back = {v: k for k, v in _CAMEL.items()}
        return cls(**{back.get(k, k): v for k, v in data.items()})


class ScoringStrategy(Protocol):
    def score(self, text: str) -> Scorecard: ...


class RandomSource(Protocol):
    def random(self) -> float: ...


def word_count(text: str) -> int:
    return len(text.split())


def sentence_count(text: str) -> int:
    return sum(1 for part in _SENTENCE_SPLIT.split(text) if part.strip())


def keyword_strength(words: int) -> Rating:
    if words > 100:
        return "High"
    if words > 50:
        return "Medium"
    return "Low"


def topic_relevance(length: int) -> Rating:
    if length > 200:
        return "High"
    if length > 100:
        return "Medium"
    return "Low"


def predicted_engagement(words: int, sentences: int) -> Engagement:
    # Bands overlap; the narrower one wins.
    avg = words / max(1, sentences)
    if 15 < avg < 25:
        return "Above Average"
    if 10 < avg < 30:
        return "Average"
    return "Below Average"


def is_approvable(grammar: float, originality: float, ai_probability: float,
                  thresholds: ApprovalThresholds = ApprovalThresholds()) -> bool:
    return (
        grammar > thresholds.grammar
        and originality > thresholds.originality
        and ai_probability < thresholds.ai_probability
    )


class HeuristicScorer:
    def __init__(self, rng: RandomSource | None = None,
                 thresholds: ApprovalThresholds = ApprovalThresholds()) -> None:
        self.rng = rng or random.Random()
        self.thresholds = thresholds

    def score(self, text: str) -> Scorecard:
        words = word_count(text)
        sentences = sentence_count(text)

        grammar = min(100.0, GRAMMAR_BASE + self.rng.random() * GRAMMAR_SPAN)
        originality = min(100.0, ORIGINALITY_BASE + self.rng.random() * ORIGINALITY_SPAN)
        readability = min(100.0, READABILITY_BASE + self.rng.random() * READABILITY_SPAN)
        ai_probability = self.rng.random() * AI_PROBABILITY_SPAN

        return Scorecard(
            grammar=grammar,
            originality=originality,
            readability=readability,
            ai_generated_probability=ai_probability,
            keyword_strength=keyword_strength(words),
            topic_relevance=topic_relevance(len(text)),
            predicted_engagement=predicted_engagement(words, sentences),
            approved=is_approvable(grammar, originality, ai_probability, self.thresholds),
        )


_default_scorer = HeuristicScorer()


def analyze_content(text: str) -> Scorecard:
    return _default_scorer.score(text)
