"""Stalwart MTA hook channel adapter.

Turns one inbound email (as posted by the Stalwart mail server) into one
InboundMessage per envelope recipient. Sender identity prefers Reply-To, then
the From header, then the envelope sender. Message text prefers the plain-text
body, then the stripped HTML body, then the subject line.
"""
import re
from datetime import datetime, timezone
from circular_democracy.ingestors.base import BaseIngestor
from circular_democracy.models.message import InboundMessage
from circular_democracy.models.stalwart import StalwartHook

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def get_header(headers: dict[str, str | list[str]], name: str) -> str | None:
    """Case-insensitive header lookup; list values yield their first item."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, list):
            return value[0] if value else None
        return value or None
    return None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def _address_from_header(value: str) -> str:
    match = re.search(r"<([^>]+)>", value)
    return (match.group(1) if match else value).strip()


def extract_sender_email(hook: StalwartHook) -> str:
    reply_to = get_header(hook.headers, "reply-to")
    if reply_to and is_valid_email(reply_to.strip()):
        return reply_to.strip()

    from_header = get_header(hook.headers, "from")
    if from_header:
        address = _address_from_header(from_header)
        if is_valid_email(address):
            return address

    return hook.sender


def extract_sender_name(hook: StalwartHook, sender_email: str | None = None) -> str:
    from_header = get_header(hook.headers, "from")
    if from_header:
        match = re.match(r"^([^<]+)<", from_header)
        if match:
            name = match.group(1).strip().strip("\"'").strip()
            if name:
                return name

    email = sender_email or extract_sender_email(hook)
    return email.split("@")[0]


def clean_text_content(text: str) -> str:
    """Drop quoted replies and reply lead-ins from a plain-text body."""
    text = re.sub(r"^>.*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*On .* wrote:\s*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def strip_html(html: str) -> str:
    """Simple HTML tag stripping for email body extraction."""
    # Remove script and style blocks
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", html, flags=re.DOTALL | re.IGNORECASE)
    # Remove HTML tags
    text = re.sub(r"<[^>]+>", " ", text)
    # Decode common HTML entities
    text = text.replace("&nbsp;", " ").replace("&quot;", '"')
    text = text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")
    # Collapse whitespace
    return re.sub(r"\s+", " ", text).strip()


def extract_message_content(hook: StalwartHook) -> str:
    body = hook.body
    if body and body.text and body.text.strip():
        return clean_text_content(body.text)

    if body and body.html:
        return strip_html(body.html)

    return (hook.subject or get_header(hook.headers, "subject") or "").strip()


class StalwartIngestor(BaseIngestor):
    """Ingestor for emails delivered through the Stalwart MTA hook."""

    channel = "email"
    channel_source = "stalwart"

    def to_messages(self, payload: StalwartHook) -> list[InboundMessage]:
        sender_email = extract_sender_email(payload)
        sender_name = extract_sender_name(payload, sender_email)
        content = extract_message_content(payload)
        subject = payload.subject or get_header(payload.headers, "subject") or ""
        sent_at = datetime.fromtimestamp(payload.timestamp, tz=timezone.utc)

        return [
            InboundMessage(
                external_id=payload.messageId,
                sender_name=sender_name,
                sender_email=sender_email,
                recipient_email=recipient,
                subject=subject,
                body=content,
                sent_at=sent_at,
                channel=self.channel,
                channel_source=self.channel_source,
            )
            for recipient in payload.recipients
        ]
