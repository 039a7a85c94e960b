"""Tests for sponta/services/verification_context.py"""

from sponta.services.verification_context import DEFAULT_RULE_ID, KNOWLEDGE_BASE, challenge_field, select_context


class TestSelectContext:
    def test_run_in_fitness_category_picks_exercise_rule(self):
        rule = select_context({"title": "Go for a 10-minute run", "description": "", "category": "fitness"})

        assert rule.id == "exercise_generic"

    def test_unmatched_text_falls_back_to_default(self):
        rule = select_context({"title": "Write a short poem", "description": "Any topic", "category": "creative"})

        assert rule.id == DEFAULT_RULE_ID
        assert rule.tags == ()

    def test_first_matching_rule_wins(self):
        """Outdoor is listed before social, so a park picnic with friends is an outdoor check."""
        rule = select_context({"title": "Picnic in the park", "description": "Bring friends", "category": "social"})

        assert rule.id == "outdoor_generic"

    def test_matching_is_case_insensitive(self):
        rule = select_context({"title": "GYM DAY", "description": None, "category": None})

        assert rule.id == "exercise_generic"

    def test_accepts_objects_with_attributes(self, make_challenge):
        challenge = make_challenge(title="Party time", description="", category="social")

        assert select_context(challenge).id == "social_selfie"

    def test_default_rule_is_last(self):
        assert KNOWLEDGE_BASE[-1].id == DEFAULT_RULE_ID


class TestChallengeField:
    def test_reads_dicts_and_objects_alike(self, make_challenge):
        challenge = make_challenge(title="Sunrise walk")

        assert challenge_field({"title": "Sunrise walk"}, "title") == "Sunrise walk"
        assert challenge_field(challenge, "title") == "Sunrise walk"

    def test_missing_or_empty_values_become_empty_text(self):
        assert challenge_field({"title": None}, "title") == ""
        assert challenge_field({}, "description") == ""
        assert challenge_field(object(), "category") == ""
