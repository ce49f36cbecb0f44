"""
Notification formatting.

Builds the webhook payload for a DomainStatus. Formatting is pure: the same
status always yields the same payload, and the only time-dependent value is
the status's own timestamp.
"""

import re

from .enums import StatusCategory
from .models import (
    DomainStatus,
    NotificationEmbed,
    NotificationField,
    NotificationPayload,
    format_iso_timestamp,
)


COLOR_AVAILABLE = 5814783
COLOR_REDEMPTION = 16776960
COLOR_OTHER = 15548997

CATEGORY_COLORS = {
    StatusCategory.AVAILABLE: COLOR_AVAILABLE,
    StatusCategory.REDEMPTION: COLOR_REDEMPTION,
    StatusCategory.OTHER: COLOR_OTHER,
}

CATEGORY_DESCRIPTIONS = {
    StatusCategory.AVAILABLE: (
        "This domain is currently available for registration. "
        "Please proceed with registration immediately."
    ),
    StatusCategory.REDEMPTION: (
        "This domain is in redemption period or pending delete status. "
        "It may become available soon."
    ),
    StatusCategory.OTHER: "The status of this domain has been updated.",
}

REDEMPTION_PATTERN = re.compile(r"redemption|pending\s*delete", re.IGNORECASE)

# (provider, search URL template)
REGISTRATION_LINKS = [
    ("Namecheap", "https://www.namecheap.com/domains/registration/results/?domain={domain}"),
    ("Google Domains", "https://domains.google.com/registrar/search?searchTerm={domain}"),
    ("GoDaddy", "https://www.godaddy.com/domainsearch/find?domainToCheck={domain}"),
]


def is_redemption_label(label: str) -> bool:
    return REDEMPTION_PATTERN.search(label) is not None


def classify(status: DomainStatus) -> StatusCategory:
    """Classify a status: available first, then redemption/pending delete, then other."""
    if status.is_available:
        return StatusCategory.AVAILABLE
    if any(is_redemption_label(label) for label in status.status):
        return StatusCategory.REDEMPTION
    return StatusCategory.OTHER


def _build_fields(status: DomainStatus) -> list[NotificationField]:
    fields = [
        NotificationField(name="Status", value=status.status_text or "Unknown", inline=True),
    ]

    if status.registrar or status.expiry_date:
        lines = []
        if status.registrar:
            lines.append(f"Registrar: {status.registrar}")
        if status.expiry_date:
            lines.append(f"Expiry Date: {status.expiry_date}")
        fields.append(NotificationField(name="Information", value="\n".join(lines), inline=True))

    fields.append(NotificationField(
        name="Registration Links (if available)",
        value="\n".join(
            f"[{provider}]({template.format(domain=status.domain)})"
            for provider, template in REGISTRATION_LINKS
        ),
    ))
    return fields


def format_notification(status: DomainStatus, mention: str = "@everyone") -> NotificationPayload:
    """
    Build the notification payload for a domain status.

    Args:
        status: The inspected domain status
        mention: Broadcast marker prefixed to availability announcements

    Returns:
        NotificationPayload with one embed
    """
    category = classify(status)

    if category == StatusCategory.AVAILABLE:
        title = f"Domain Available: {status.domain}"
        content = f"🔍 Domain {status.domain} is now available! Please proceed with registration!"
        if mention:
            content = f"{mention} {content}"
    else:
        title = f"Domain Status Update: {status.domain}"
        content = f"🔍 Domain {status.domain} status: **{status.status_text}**"

    return NotificationPayload(
        content=content,
        embeds=[NotificationEmbed(
            title=title,
            description=CATEGORY_DESCRIPTIONS[category],
            color=CATEGORY_COLORS[category],
            fields=_build_fields(status),
            timestamp=format_iso_timestamp(status.timestamp),
        )],
    )
