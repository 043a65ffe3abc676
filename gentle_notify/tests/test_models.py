"""Tests for the notification value types."""

from datetime import datetime, timedelta, timezone

import pytest

from gentle_notify.enums import InterruptionLevel
from gentle_notify.models import (
    CalendarSchedule,
    DateComponents,
    ExactDate,
    NotificationContent,
    NotificationItem,
    NotificationPolicy,
    NotificationRequest,
    NotificationSound,
    TimeInterval,
    normalize_user_info,
)


class TestUserInfo:
    def test_accepts_closed_variant(self):
        data = {"s": "x", "i": 1, "f": 1.5, "b": True, "nested": {"deep": {"n": 2}}}
        assert normalize_user_info(data) == data

    def test_copies_nested_maps(self):
        nested = {"n": 1}
        result = normalize_user_info({"outer": nested})

        nested["n"] = 2

        assert result["outer"]["n"] == 1

    def test_rejects_non_string_keys(self):
        with pytest.raises(TypeError):
            normalize_user_info({1: "x"})

    def test_rejects_lists(self):
        with pytest.raises(TypeError):
            normalize_user_info({"items": [1, 2]})

    def test_rejects_none_values(self):
        with pytest.raises(TypeError):
            normalize_user_info({"missing": None})

    def test_none_becomes_empty(self):
        assert normalize_user_info(None) == {}

    def test_content_equality_uses_user_info(self):
        a = NotificationContent(title="t", body="b", user_info={"k": {"x": 1}})
        b = NotificationContent(title="t", body="b", user_info={"k": {"x": 1}})
        c = NotificationContent(title="t", body="b", user_info={"k": {"x": 2}})

        assert a == b
        assert a != c


class TestNotificationSound:
    def test_default_sounds_are_equal(self):
        assert NotificationSound.default() == NotificationSound.default()

    def test_named_sounds_compare_by_name(self):
        assert NotificationSound.named("chime") == NotificationSound.named("chime")
        assert NotificationSound.named("chime") != NotificationSound.named("bell")

    def test_equal_descriptions_collapse(self):
        """Equality is textual: same description means same sound."""
        assert NotificationSound("named:chime") == NotificationSound.named("chime")
        assert len({NotificationSound.default(), NotificationSound("default")}) == 1

    def test_critical_volume_range(self):
        assert str(NotificationSound.critical("alarm", 0.5)) == "critical:alarm@0.5"
        with pytest.raises(ValueError):
            NotificationSound.critical("alarm", 1.5)

    def test_not_equal_to_strings(self):
        assert NotificationSound.default() != "default"


class TestNotificationContent:
    def test_defaults(self):
        content = NotificationContent(title="t", body="b")

        assert content.subtitle is None
        assert content.thread_id is None
        assert content.user_info == {}
        assert content.sound == NotificationSound.default()
        assert content.interruption_level is InterruptionLevel.active
        assert content.hidden_preview_placeholder is None

    def test_level_is_coerced_from_string(self):
        content = NotificationContent(title="t", body="b", interruption_level="critical")
        assert content.interruption_level is InterruptionLevel.critical

    def test_rejects_negative_badge(self):
        with pytest.raises(ValueError):
            NotificationContent(title="t", body="b", badge=-1)

    def test_with_helpers_return_new_values(self):
        content = NotificationContent(title="t", body="b")

        updated = (
            content.with_thread_id("thread")
            .with_category("cat")
            .with_badge(3)
            .with_sound(None)
            .with_user_info({"k": "v"})
            .with_hidden_preview_placeholder("Hidden")
        )

        assert content.thread_id is None
        assert updated.thread_id == "thread"
        assert updated.category_id == "cat"
        assert updated.badge == 3
        assert updated.sound is None
        assert updated.user_info == {"k": "v"}
        assert updated.hidden_preview_placeholder == "Hidden"

    def test_with_user_info_validates(self):
        content = NotificationContent(title="t", body="b")
        with pytest.raises(TypeError):
            content.with_user_info({"bad": object()})

    def test_placeholder_is_not_merged_into_body(self):
        content = NotificationContent(
            title="t", body="secret", hidden_preview_placeholder="Reminder"
        )

        payload = content.to_payload()

        assert payload["body"] == "secret"
        assert payload["hidden_preview_placeholder"] == "Reminder"

    def test_payload_round_trip(self):
        content = NotificationContent(
            title="t",
            body="b",
            subtitle="s",
            thread_id="th",
            category_id="cat",
            user_info={"n": {"x": 1}},
            badge=2,
            sound=NotificationSound.named("chime"),
            interruption_level=InterruptionLevel.time_sensitive,
        )

        assert NotificationContent.from_payload(content.to_payload()) == content

    def test_payload_silent_sound(self):
        content = NotificationContent(title="t", body="b", sound=None)
        assert content.to_payload()["sound"] is None
        assert NotificationContent.from_payload(content.to_payload()).sound is None


class TestSchedules:
    def test_components_need_a_field(self):
        with pytest.raises(ValueError):
            DateComponents()

    def test_components_range_checked(self):
        with pytest.raises(ValueError):
            DateComponents(hour=24)
        with pytest.raises(ValueError):
            DateComponents(weekday=7)

    def test_components_as_dict_only_set_fields(self):
        assert DateComponents(hour=9, minute=30).as_dict() == {"hour": 9, "minute": 30}

    def test_time_interval_accepts_seconds(self):
        interval = TimeInterval(90)
        assert interval.offset == timedelta(seconds=90)
        assert interval.offset_seconds == 90.0

    def test_time_interval_after(self):
        interval = TimeInterval.after(minutes=1, seconds=5, repeats=True)
        assert interval.offset_seconds == 65.0
        assert interval.repeats is True

    def test_time_interval_rejects_other_types(self):
        with pytest.raises(TypeError):
            TimeInterval("soon")


class TestNotificationRequest:
    def test_default_identifier_is_unique(self):
        content = NotificationContent(title="t", body="b")
        a = NotificationRequest(content=content, schedule=TimeInterval(5))
        b = NotificationRequest(content=content, schedule=TimeInterval(5))

        assert a.identifier
        assert a.identifier != b.identifier

    def test_default_policy(self):
        policy = NotificationPolicy()

        assert policy.avoid_duplicates is True
        assert policy.max_pending_count is None
        assert policy.coalesce_by_thread_id is True
        assert policy.clamp_text_length is True

    def test_rejects_negative_limit(self):
        with pytest.raises(ValueError):
            NotificationPolicy(max_pending_count=-1)

    def test_rejects_empty_identifier(self):
        with pytest.raises(ValueError):
            NotificationRequest(
                content=NotificationContent(title="t", body="b"),
                schedule=TimeInterval(5),
                identifier="",
            )

    def test_rejects_unknown_schedule(self):
        with pytest.raises(TypeError):
            NotificationRequest(
                content=NotificationContent(title="t", body="b"),
                schedule=timedelta(seconds=5),
            )

    def test_accepts_every_schedule_kind(self):
        content = NotificationContent(title="t", body="b")
        for schedule in (
            TimeInterval(5),
            CalendarSchedule(DateComponents(hour=8)),
            ExactDate(datetime(2030, 1, 1, tzinfo=timezone.utc)),
        ):
            assert NotificationRequest(content=content, schedule=schedule).schedule == schedule

    def test_item_thread_defaults_to_none(self):
        assert NotificationItem("x").thread_id is None
