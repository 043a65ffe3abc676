"""Enum definitions shared by the notification model and the HTTP layer."""

import enum


class InterruptionLevel(str, enum.Enum):
    active = "active"
    passive = "passive"
    time_sensitive = "time_sensitive"
    critical = "critical"


class ActionStyle(str, enum.Enum):
    normal = "normal"
    destructive = "destructive"


class ActionOption(str, enum.Enum):
    foreground = "foreground"
    authentication_required = "authentication_required"
    destructive = "destructive"


class CategoryOption(str, enum.Enum):
    custom_dismiss_action = "custom_dismiss_action"
    hidden_previews_show_title = "hidden_previews_show_title"
    hidden_previews_show_subtitle = "hidden_previews_show_subtitle"
