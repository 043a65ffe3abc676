"""Notification categories and the actions attached to them."""

from dataclasses import dataclass, field

from .enums import ActionOption, ActionStyle, CategoryOption

# The notification service shows at most this many actions per category
MAX_ACTIONS_PER_CATEGORY = 4


@dataclass(frozen=True)
class NotificationAction:
    """A button shown with a delivered notification."""

    identifier: str
    title: str
    style: ActionStyle = ActionStyle.normal
    options: frozenset[ActionOption] = frozenset()
    symbol_name: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "style", ActionStyle(self.style))
        object.__setattr__(
            self, "options", frozenset(ActionOption(o) for o in self.options)
        )

    def effective_options(self) -> frozenset[ActionOption]:
        """Options as registered with the service; destructive style implies the option."""
        if self.style == ActionStyle.destructive:
            return self.options | {ActionOption.destructive}
        return self.options

    def to_payload(self) -> dict:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "options": sorted(o.value for o in self.effective_options()),
            "symbol_name": self.symbol_name,
        }


@dataclass(frozen=True)
class NotificationCategory:
    """
    A named group of actions that content can opt into via ``category_id``.

    Only the first MAX_ACTIONS_PER_CATEGORY actions are kept.
    """

    identifier: str
    actions: tuple[NotificationAction, ...] = ()
    intent_identifiers: tuple[str, ...] = ()
    options: frozenset[CategoryOption] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(
            self, "actions", tuple(self.actions)[:MAX_ACTIONS_PER_CATEGORY]
        )
        object.__setattr__(self, "intent_identifiers", tuple(self.intent_identifiers))
        object.__setattr__(
            self, "options", frozenset(CategoryOption(o) for o in self.options)
        )

    def to_payload(self) -> dict:
        return {
            "identifier": self.identifier,
            "actions": [action.to_payload() for action in self.actions],
            "intent_identifiers": list(self.intent_identifiers),
            "options": sorted(o.value for o in self.options),
        }
