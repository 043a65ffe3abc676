"""Tests for notification categories and actions."""

from gentle_notify.categories import (
    MAX_ACTIONS_PER_CATEGORY,
    NotificationAction,
    NotificationCategory,
)
from gentle_notify.enums import ActionOption, ActionStyle, CategoryOption


class TestNotificationAction:
    def test_destructive_style_adds_option(self):
        action = NotificationAction("delete", "Delete", style=ActionStyle.destructive)
        assert action.effective_options() == frozenset({ActionOption.destructive})

    def test_normal_style_keeps_options(self):
        action = NotificationAction(
            "open", "Open", options=frozenset({ActionOption.foreground})
        )
        assert action.effective_options() == frozenset({ActionOption.foreground})

    def test_options_coerced_from_strings(self):
        action = NotificationAction("open", "Open", style="normal", options=["foreground"])

        assert action.style is ActionStyle.normal
        assert action.options == frozenset({ActionOption.foreground})

    def test_payload(self):
        action = NotificationAction(
            "delete",
            "Delete",
            style=ActionStyle.destructive,
            options=frozenset({ActionOption.authentication_required}),
            symbol_name="trash",
        )

        assert action.to_payload() == {
            "identifier": "delete",
            "title": "Delete",
            "options": ["authentication_required", "destructive"],
            "symbol_name": "trash",
        }


class TestNotificationCategory:
    def test_keeps_at_most_four_actions(self):
        actions = [NotificationAction(f"a{i}", f"A{i}") for i in range(6)]

        category = NotificationCategory("many", actions)

        assert len(category.actions) == MAX_ACTIONS_PER_CATEGORY
        assert [a.identifier for a in category.actions] == ["a0", "a1", "a2", "a3"]

    def test_defaults_are_empty(self):
        category = NotificationCategory("plain")

        assert category.actions == ()
        assert category.intent_identifiers == ()
        assert category.options == frozenset()

    def test_payload(self):
        category = NotificationCategory(
            "review",
            actions=[NotificationAction("done", "Done")],
            intent_identifiers=["review-intent"],
            options={"custom_dismiss_action"},
        )

        assert category.options == frozenset({CategoryOption.custom_dismiss_action})
        assert category.to_payload() == {
            "identifier": "review",
            "actions": [
                {"identifier": "done", "title": "Done", "options": [], "symbol_name": None}
            ],
            "intent_identifiers": ["review-intent"],
            "options": ["custom_dismiss_action"],
        }
