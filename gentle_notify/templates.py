"""Message template loading and rendering for delivered notifications."""

from pathlib import Path

import yaml


_templates: dict | None = None


def load_templates() -> dict:
    """
    Load message templates from YAML file.

    Caches templates after first load.
    """
    global _templates
    if _templates is not None:
        return _templates

    yaml_path = Path(__file__).parent / "messages.yaml"
    with open(yaml_path, encoding="utf-8") as f:
        _templates = yaml.safe_load(f)

    return _templates


def render_message(template: str, context: dict) -> str:
    """
    Render a message template with context variables.

    Raises:
        KeyError: If a required variable is missing from context
    """
    return template.format(**context)


def get_message(interruption_level: str, channel: str, context: dict) -> str:
    """
    Get and render a message for an interruption level and channel.

    Args:
        interruption_level: e.g., "active", "critical"
        channel: e.g., "discord", "log"
        context: Variables to substitute
    """
    templates = load_templates()
    template = templates[interruption_level][channel]
    return render_message(template, context)


def build_delivery_context(payload: dict, action_titles: list[str] | None = None) -> dict:
    """
    Build template variables from a stored notification payload.

    The hidden-preview placeholder is not used here: delivered messages always
    show the real body.
    """
    subtitle = payload.get("subtitle")
    return {
        "title": payload["title"],
        "body": payload["body"],
        "subtitle_line": f"\n_{subtitle}_" if subtitle else "",
        "actions_line": (
            "\n" + " ".join(f"[{title}]" for title in action_titles)
            if action_titles
            else ""
        ),
    }


def render_notification(
    payload: dict, channel: str, action_titles: list[str] | None = None
) -> str:
    level = payload.get("interruption_level") or "active"
    return get_message(level, channel, build_delivery_context(payload, action_titles))
