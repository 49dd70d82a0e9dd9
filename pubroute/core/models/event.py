from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventMessage(BaseModel):
    """
    Base of every decoded event notification.

    The wire discriminator is the `event` key; it is kept as received (case
    included) in `event_type` and only normalized when the handler key is
    derived. Concrete variants pin the discriminator they accept through
    `kind`, so the set of variants stays closed.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )

    kind: ClassVar[str] = ""

    event_type: Annotated[
        str,
        Field(
            alias="event",
            description="Declared event type, e.g. 'subscribe' or 'CLICK'."
        )
    ]

    to_user_name: Annotated[
        str,
        Field(description="Account the notification was sent to.")
    ]

    from_user_name: Annotated[
        str,
        Field(description="Identifier of the user who triggered the event.")
    ]

    create_time: Annotated[
        int,
        Field(description="Creation time of the event, in epoch seconds.")
    ]

    msg_type: Annotated[
        str,
        Field(default="event", description="Message category, always 'event' here.")
    ]

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("event type must not be empty")
        if cls.kind and v.lower() != cls.kind:
            raise ValueError(f"{cls.__name__} expects event '{cls.kind}', got '{v}'")
        return v


class SubscribeEvent(EventMessage):
    kind: ClassVar[str] = "subscribe"

    event_key: Annotated[
        str | None,
        Field(
            default=None,
            description=(
                "Set when the user subscribed by scanning a parametric QR code,\n"
                "in the form 'qrscene_<scene>'."
            )
        )
    ]

    ticket: Annotated[
        str | None,
        Field(default=None, description="QR code ticket, exchangeable for the image.")
    ]

    @property
    def scene(self) -> str | None:
        """Scene value of a QR-code subscription, without its prefix."""
        if self.event_key is None:
            return None
        return self.event_key.removeprefix("qrscene_")


class UnsubscribeEvent(EventMessage):
    kind: ClassVar[str] = "unsubscribe"


class ScanEvent(EventMessage):
    """Already-subscribed user scanned a parametric QR code."""
    kind: ClassVar[str] = "scan"

    event_key: Annotated[
        str,
        Field(description="Scene value of the QR code.")
    ]

    ticket: Annotated[
        str | None,
        Field(default=None, description="QR code ticket, exchangeable for the image.")
    ]


class ClickEvent(EventMessage):
    kind: ClassVar[str] = "click"

    event_key: Annotated[
        str,
        Field(description="Key of the custom menu entry that was clicked.")
    ]


class ViewEvent(EventMessage):
    kind: ClassVar[str] = "view"

    event_key: Annotated[
        str,
        Field(description="URL the menu entry redirected to.")
    ]

    menu_id: Annotated[
        str | None,
        Field(default=None, description="Identifier of the personalized menu, if any.")
    ]


class LocationEvent(EventMessage):
    kind: ClassVar[str] = "location"

    latitude: float
    longitude: float
    precision: float


EVENT_TYPES: dict[str, type[EventMessage]] = {
    variant.kind: variant
    for variant in (
        SubscribeEvent,
        UnsubscribeEvent,
        ScanEvent,
        ClickEvent,
        ViewEvent,
        LocationEvent,
    )
}
"""
Closed set of decodable variants, keyed by the lower-cased discriminator.
"""
