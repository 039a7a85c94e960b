"""Photo verification against a vision model.

The verifier never raises for oracle trouble. A missing photo, a missing API
key, a failed download, a timeout or an unreadable reply all come back as a
not-verified result with zero confidence and a diagnostic ``reasoning``.
"""

import json
import logging
import math
import mimetypes
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import google.generativeai as genai
import requests

from sponta.config import settings
from sponta.services.verification_context import KnowledgeRule, challenge_field, select_context

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an assistant that verifies whether a selfie or photo is strong visual evidence that a user "
    "completed a challenge in a mobile app. False positives are much worse than false negatives."
)

RESPONSE_SHAPE = """Return ONLY a single JSON object with this exact shape:

{
  "verified": true or false,
  "confidence": number between 0 and 1,
  "reasoning": "short explanation for the app logs"
}"""

DEFAULT_MIME_TYPE = "image/jpeg"
PHOTO_CHUNK_BYTES = 64 * 1024


class Verdict(str, Enum):
    VERIFIED = "verified"
    NOT_VERIFIED = "not_verified"
    # Oracle answered with something other than a strict boolean.
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class VerificationResult:
    outcome: Verdict
    confidence: float
    reasoning: str

    @property
    def verified(self) -> bool:
        return self.outcome is Verdict.VERIFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "verified": self.verified,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "outcome": self.outcome.value,
        }


def fail_closed(reasoning: str) -> VerificationResult:
    return VerificationResult(outcome=Verdict.NOT_VERIFIED, confidence=0.0, reasoning=reasoning)


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """Return the first well-formed JSON object embedded in ``text``.

    Replies often wrap the object in markdown fences or commentary, so every
    ``{`` is tried as a starting point until one decodes to a dict.
    """
    if not text:
        return None

    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def coerce_verdict(value: Any) -> Verdict:
    if value is True or value == "true":
        return Verdict.VERIFIED
    if value is False or value == "false":
        return Verdict.NOT_VERIFIED
    return Verdict.INDETERMINATE


def clamp_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


def parse_verification_reply(text: str) -> VerificationResult:
    parsed = extract_json_object(text)
    if parsed is None:
        logger.error("Could not parse verification reply: %r", (text or "")[:500])
        return fail_closed("AI returned an unexpected format while verifying the photo.")

    raw_verdict = parsed.get("verified")
    outcome = coerce_verdict(raw_verdict)
    confidence = clamp_confidence(parsed.get("confidence"))
    reasoning = str(parsed.get("reasoning") or "No reasoning provided by AI.")

    if outcome is Verdict.INDETERMINATE:
        logger.warning(
            "Verification reply carried a non-boolean verdict %r (loosely %s); treating as not verified",
            raw_verdict,
            "truthy" if raw_verdict else "falsy",
        )
        reasoning = f"{reasoning} [verdict {raw_verdict!r} is not a strict boolean; treated as not verified]"

    return VerificationResult(outcome=outcome, confidence=confidence, reasoning=reasoning)


def build_prompt(challenge: Any, rule: KnowledgeRule, location: Any = None) -> str:
    challenge_text = " – ".join(
        part for part in (challenge_field(challenge, "title"), challenge_field(challenge, "description")) if part
    )
    if location:
        location_hint = (
            "The app also recorded this approximate location data (may be noisy): "
            f"{json.dumps(location, default=str, ensure_ascii=False)}."
        )
    else:
        location_hint = "There is no additional location information."

    return f"""
CHALLENGE TASK (from the app):
"{challenge_text}"

CONTEXT (what to look for in the image):
{rule.prompt}

Extra context:
{location_hint}

Look at the attached image and decide if it is strong evidence that the user completed this challenge.

{RESPONSE_SHAPE}
"""


class PhotoVerifier:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: Optional[str] = None,
        timeout: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
        max_photo_bytes: Optional[int] = None,
        model: Any = None,
    ):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model_id = model_id or settings.GEMINI_MODEL_ID
        self.timeout = timeout or settings.VERIFICATION_TIMEOUT_SECONDS
        self.fetch_timeout = fetch_timeout or settings.PHOTO_FETCH_TIMEOUT_SECONDS
        self.max_photo_bytes = max_photo_bytes or settings.MAX_PHOTO_BYTES
        self._model = model

    @property
    def configured(self) -> bool:
        return bool(self._model is not None or self.api_key)

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_id,
                system_instruction=SYSTEM_PROMPT,
                generation_config={"temperature": 0.1, "max_output_tokens": 300},
            )
        return self._model

    def fetch_photo(self, photo_url: str) -> tuple[bytes, str]:
        resp = requests.get(photo_url, timeout=self.fetch_timeout, stream=True)
        try:
            resp.raise_for_status()
            declared = resp.headers.get("Content-Length") or ""
            if declared.isdigit() and int(declared) > self.max_photo_bytes:
                raise ValueError(f"photo is larger than {self.max_photo_bytes} bytes")

            chunks = []
            size = 0
            for chunk in resp.iter_content(chunk_size=PHOTO_CHUNK_BYTES):
                size += len(chunk)
                if size > self.max_photo_bytes:
                    raise ValueError(f"photo is larger than {self.max_photo_bytes} bytes")
                chunks.append(chunk)
        finally:
            resp.close()
        content = b"".join(chunks)

        mime_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        if not mime_type.startswith("image/"):
            mime_type = mimetypes.guess_type(photo_url)[0] or DEFAULT_MIME_TYPE
        return content, mime_type

    def verify(self, challenge: Any, photo_url: Optional[str], location: Any = None) -> VerificationResult:
        if not photo_url:
            return fail_closed("No photo URL was provided.")
        if not self.configured:
            logger.warning("GEMINI_API_KEY is not set, skipping AI verification.")
            return fail_closed("AI verification not run because API key is missing.")

        rule = select_context(challenge)
        prompt = build_prompt(challenge, rule, location)

        try:
            image_bytes, mime_type = self.fetch_photo(photo_url)
        except Exception as exc:
            logger.warning("Could not download photo %s: %s", photo_url, exc)
            return fail_closed(f"AI verification failed: could not download photo ({exc}).")

        try:
            response = self._get_model().generate_content(
                [prompt, {"mime_type": mime_type, "data": image_bytes}],
                request_options={"timeout": self.timeout},
            )
            text = response.text
        except Exception as exc:
            logger.exception("Verification call failed for rule %s", rule.id)
            return fail_closed(f"AI verification failed due to an API error: {exc}")

        result = parse_verification_reply(text)
        logger.info(
            "Verification rule=%s outcome=%s confidence=%.2f",
            rule.id,
            result.outcome.value,
            result.confidence,
        )
        return result


_default_verifier: Optional[PhotoVerifier] = None


def get_verifier() -> PhotoVerifier:
    global _default_verifier
    if _default_verifier is None:
        _default_verifier = PhotoVerifier()
    return _default_verifier
