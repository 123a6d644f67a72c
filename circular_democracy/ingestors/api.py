from circular_democracy.ingestors.base import BaseIngestor
from circular_democracy.models.message import InboundMessage, MessageInput


class ApiIngestor(BaseIngestor):
    """Ingestor for messages posted directly to the REST API."""

    channel = "api"

    def to_messages(self, payload: MessageInput) -> list[InboundMessage]:
        return [
            InboundMessage(
                external_id=payload.external_id,
                sender_name=payload.sender_name,
                sender_email=payload.sender_email,
                recipient_email=payload.recipient_email,
                subject=payload.subject,
                body=payload.message,
                sent_at=payload.timestamp,
                channel=self.channel,
                channel_source=payload.channel_source,
                campaign_hint=payload.campaign_hint,
            )
        ]
