"""Tests for sponta/services/verification.py

The verifier must fail closed: no exception ever reaches the caller, and
anything short of a strict boolean ``true`` is not a verification.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from sponta.services.verification import (
    PhotoVerifier,
    Verdict,
    build_prompt,
    clamp_confidence,
    coerce_verdict,
    extract_json_object,
    parse_verification_reply,
)
from sponta.services.verification_context import select_context


CHALLENGE = {"title": "Go for a 10-minute run", "description": "Around the block", "category": "fitness"}


def _photo_response(content=b"\xff\xd8jpeg", content_type="image/png", content_length=None):
    resp = MagicMock()
    resp.iter_content.return_value = iter([content[:3], content[3:]])
    resp.headers = {"Content-Type": content_type}
    if content_length is not None:
        resp.headers["Content-Length"] = str(content_length)
    resp.raise_for_status.return_value = None
    return resp


def _model_replying(text):
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text=text)
    return model


# ─────────────────────────────────────────────────────────────────────────────
# Reply Parsing
# ─────────────────────────────────────────────────────────────────────────────


class TestReplyParsing:
    def test_parses_json_wrapped_in_markdown_and_commentary(self):
        reply = 'Sure! ```json\n{"verified":true,"confidence":0.9,"reasoning":"ok"}\n```'

        result = parse_verification_reply(reply)

        assert result.verified is True
        assert result.confidence == 0.9
        assert result.reasoning == "ok"

    def test_extracts_first_object_after_stray_braces(self):
        text = 'Note {not json} then {"verified": false, "confidence": 0.4, "reasoning": "blurry"} and {"x": 1}'

        assert extract_json_object(text) == {"verified": False, "confidence": 0.4, "reasoning": "blurry"}

    def test_no_object_fails_closed(self):
        result = parse_verification_reply("I cannot tell from this image.")

        assert result.verified is False
        assert result.confidence == 0.0
        assert "unexpected format" in result.reasoning

    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, Verdict.VERIFIED),
            ("true", Verdict.VERIFIED),
            (False, Verdict.NOT_VERIFIED),
            ("false", Verdict.NOT_VERIFIED),
            ("yes", Verdict.INDETERMINATE),
            (1, Verdict.INDETERMINATE),
            (None, Verdict.INDETERMINATE),
            ("True", Verdict.INDETERMINATE),
        ],
    )
    def test_verdict_coercion_is_strict(self, value, expected):
        assert coerce_verdict(value) is expected

    def test_loose_truthy_verdict_is_logged_and_not_trusted(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sponta.services.verification"):
            result = parse_verification_reply('{"verified": "yes", "confidence": 0.95, "reasoning": "fine"}')

        assert result.outcome is Verdict.INDETERMINATE
        assert result.verified is False
        assert "not a strict boolean" in result.reasoning
        assert any("non-boolean verdict" in rec.getMessage() for rec in caplog.records)

    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 0.5), (1.7, 1.0), (-3, 0.0), ("0.9", 0.0), (None, 0.0), (True, 0.0), (float("nan"), 0.0)],
    )
    def test_confidence_is_clamped(self, value, expected):
        assert clamp_confidence(value) == expected

    def test_missing_reasoning_gets_placeholder(self):
        result = parse_verification_reply('{"verified": false}')

        assert result.confidence == 0.0
        assert result.reasoning == "No reasoning provided by AI."


# ─────────────────────────────────────────────────────────────────────────────
# Prompt
# ─────────────────────────────────────────────────────────────────────────────


class TestBuildPrompt:
    def test_includes_challenge_text_rule_and_location(self):
        rule = select_context(CHALLENGE)

        prompt = build_prompt(CHALLENGE, rule, {"latitude": 40.7, "longitude": -74.0})

        assert "Go for a 10-minute run – Around the block" in prompt
        assert rule.prompt in prompt
        assert "may be noisy" in prompt
        assert '"latitude": 40.7' in prompt

    def test_without_location(self):
        prompt = build_prompt(CHALLENGE, select_context(CHALLENGE), None)

        assert "There is no additional location information." in prompt


# ─────────────────────────────────────────────────────────────────────────────
# Verify
# ─────────────────────────────────────────────────────────────────────────────


class TestVerify:
    def test_missing_photo_fails_closed_without_calling_model(self):
        model = _model_replying('{"verified": true}')
        verifier = PhotoVerifier(api_key="key", model=model)

        result = verifier.verify(CHALLENGE, None)

        assert result.verified is False
        assert result.confidence == 0.0
        assert result.reasoning == "No photo URL was provided."
        model.generate_content.assert_not_called()

    def test_unconfigured_verifier_fails_closed(self):
        verifier = PhotoVerifier(api_key="")

        result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert "API key is missing" in result.reasoning

    def test_successful_verification(self):
        model = _model_replying('```json\n{"verified": true, "confidence": 0.82, "reasoning": "running outside"}\n```')
        verifier = PhotoVerifier(api_key="key", model=model, timeout=12)

        with patch("sponta.services.verification.requests.get", return_value=_photo_response()) as get:
            result = verifier.verify(CHALLENGE, "https://img.example/p.png", {"latitude": 1.0})

        assert result.verified is True
        assert result.confidence == 0.82
        get.assert_called_once()
        parts = model.generate_content.call_args.args[0]
        assert parts[1] == {"mime_type": "image/png", "data": b"\xff\xd8jpeg"}
        assert model.generate_content.call_args.kwargs["request_options"] == {"timeout": 12}

    def test_unknown_content_type_guesses_from_url(self):
        model = _model_replying('{"verified": false, "confidence": 0.1, "reasoning": "no"}')
        verifier = PhotoVerifier(api_key="key", model=model)

        with patch(
            "sponta.services.verification.requests.get",
            return_value=_photo_response(content_type="application/octet-stream"),
        ):
            verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert model.generate_content.call_args.args[0][1]["mime_type"] == "image/jpeg"

    def test_download_failure_fails_closed(self):
        model = _model_replying('{"verified": true}')
        verifier = PhotoVerifier(api_key="key", model=model)

        with patch(
            "sponta.services.verification.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert "connection refused" in result.reasoning
        model.generate_content.assert_not_called()

    def test_oversized_photo_fails_closed(self):
        verifier = PhotoVerifier(api_key="key", model=_model_replying("{}"), max_photo_bytes=4)

        with patch("sponta.services.verification.requests.get", return_value=_photo_response(content=b"123456")):
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert result.confidence == 0.0

    def test_declared_length_over_limit_is_rejected_unread(self):
        verifier = PhotoVerifier(api_key="key", model=_model_replying("{}"), max_photo_bytes=4)
        resp = _photo_response(content=b"123456", content_length=6)

        with patch("sponta.services.verification.requests.get", return_value=resp):
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        resp.iter_content.assert_not_called()
        resp.close.assert_called_once()

    def test_download_stops_once_limit_is_passed(self):
        verifier = PhotoVerifier(api_key="key", model=_model_replying("{}"), max_photo_bytes=4)
        consumed = []

        def chunks(chunk_size):
            for chunk in (b"123", b"456", b"789"):
                consumed.append(chunk)
                yield chunk

        resp = _photo_response()
        resp.iter_content.side_effect = chunks

        with patch("sponta.services.verification.requests.get", return_value=resp) as get:
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert consumed == [b"123", b"456"]
        assert get.call_args.kwargs["stream"] is True
        resp.close.assert_called_once()

    def test_model_timeout_fails_closed_with_message(self):
        model = MagicMock()
        model.generate_content.side_effect = TimeoutError("deadline exceeded")
        verifier = PhotoVerifier(api_key="key", model=model)

        with patch("sponta.services.verification.requests.get", return_value=_photo_response()):
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert result.confidence == 0.0
        assert "deadline exceeded" in result.reasoning

    def test_blocked_response_text_fails_closed(self):
        class BlockedResponse:
            @property
            def text(self):
                raise ValueError("blocked")

        model = MagicMock()
        model.generate_content.return_value = BlockedResponse()
        verifier = PhotoVerifier(api_key="key", model=model)

        with patch("sponta.services.verification.requests.get", return_value=_photo_response()):
            result = verifier.verify(CHALLENGE, "https://img.example/p.jpg")

        assert result.verified is False
        assert "blocked" in result.reasoning
