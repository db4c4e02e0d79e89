from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from soulscribe.models import Content

AVATAR_URL = "https://source.boringavatars.com/beam/120/{type}?colors=5F4B8B,00C2CB,FF7E5F,121212,F8F9FA"


@dataclass(frozen=True)
class TokenProfile:
    type: str
    name: str
    description: str


# Order matters: the first category present wins.
CATEGORY_TOKEN_PROFILES: tuple[tuple[str, TokenProfile], ...] = (
    ("tutorial", TokenProfile("Tutorial Master", "Knowledge Sharing", "Awarded for creating educational content")),
    ("review", TokenProfile("Insight Provider", "Critical Analysis", "Awarded for thoughtful reviews")),
    ("analysis", TokenProfile("Analysis Expert", "Deep Insights", "Awarded for detailed analytical content")),
    ("news", TokenProfile("News Reporter", "Breaking Updates", "Awarded for sharing timely information")),
)
DEFAULT_TOKEN_PROFILE = TokenProfile("Content Creator", "Content Contribution", "Awarded for submitting quality content")


def token_profile_for(categories: Iterable[str]) -> TokenProfile:
    present = set(categories or ())
    for category, profile in CATEGORY_TOKEN_PROFILES:
        if category in present:
            return profile
    return DEFAULT_TOKEN_PROFILE


def build_token_metadata(content: Content, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Metadata recorded on the token row and sent to the ledger.

    Admin supplied ``extra`` keys are kept, but cannot override the derived
    fields.
    """
    profile = token_profile_for(content.categories)
    meta: dict[str, Any] = dict(extra or {})
    meta.update(
        type=profile.type,
        name=profile.name,
        description=profile.description,
        createdAt=datetime.now(timezone.utc).isoformat(),
        contentId=content.id,
        categories=list(content.categories or []),
        imageUrl=AVATAR_URL.format(type=profile.type.replace(" ", "%20")),
    )
    return meta
