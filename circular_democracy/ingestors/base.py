from abc import ABC, abstractmethod
from circular_democracy.models.message import InboundMessage


class BaseIngestor(ABC):
    """Abstract base class for all input channel adapters.

    Channels (direct API, Stalwart MTA hook) produce InboundMessages through
    this interface. The pipeline consumes InboundMessages, never raw
    channel-specific payloads.
    """

    channel: str
    channel_source: str | None = None

    @abstractmethod
    def to_messages(self, payload) -> list[InboundMessage]:
        """Shape a validated channel payload into one message per recipient.

        Args:
            payload: The channel's validated request model.

        Returns:
            List of InboundMessage objects, in recipient order.
        """
        ...
