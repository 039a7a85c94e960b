"""Knowledge base that tells the photo verifier what to look for."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class KnowledgeRule:
    id: str
    tags: tuple[str, ...]
    prompt: str


DEFAULT_RULE_ID = "default"

KNOWLEDGE_BASE: tuple[KnowledgeRule, ...] = (
    KnowledgeRule(
        id="outdoor_generic",
        tags=("outdoor", "outside", "explore", "park", "nature"),
        prompt=(
            "The user should clearly be outside. Look for sky, trees, streets, grass, or buildings in the "
            "background. Indoor backgrounds, for example walls, beds, desks or kitchens, should not count."
        ),
    ),
    KnowledgeRule(
        id="social_selfie",
        tags=("friends", "social", "party", "group"),
        prompt=(
            "The user should be in the photo with at least one other person. A selfie with only one face "
            "does not count as a social challenge."
        ),
    ),
    KnowledgeRule(
        id="exercise_generic",
        tags=("run", "jog", "exercise", "gym", "workout", "fitness"),
        prompt=(
            "The user should appear to be exercising, for example running, using gym equipment, stretching "
            "on a mat, or on a sports field. A random selfie at a desk or in bed should not count."
        ),
    ),
    KnowledgeRule(
        id=DEFAULT_RULE_ID,
        tags=(),
        prompt=(
            "The image should show strong visual evidence that the user really did what the challenge "
            "description says. If the image is vague or unrelated, mark it as not completed."
        ),
    ),
)


def challenge_field(challenge: Any, name: str) -> str:
    """Read a text field from a catalog row, a cached summary or a plain dict."""
    if isinstance(challenge, dict):
        value = challenge.get(name)
    else:
        value = getattr(challenge, name, None)
    return str(value or "")


def select_context(challenge: Any) -> KnowledgeRule:
    """Return the first tagged rule matching the challenge text, else the default rule."""
    text = " ".join(challenge_field(challenge, name) for name in ("title", "description", "category")).lower()

    for rule in KNOWLEDGE_BASE:
        if rule.id == DEFAULT_RULE_ID:
            continue
        if any(tag in text for tag in rule.tags):
            return rule

    return next(rule for rule in KNOWLEDGE_BASE if rule.id == DEFAULT_RULE_ID)
