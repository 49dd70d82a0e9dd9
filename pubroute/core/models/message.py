from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    """
    Raw notification as delivered by the broker.
    The listener owns it for the duration of a single dispatch cycle.
    """
    channel: str
    """
    Channel the payload was published on.
    """

    data: bytes
    """
    Opaque serialized event, decoded by the EventCodec.
    """
