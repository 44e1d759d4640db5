"""
services/email_service.py
-------------------------
Transactional email through the Brevo API (BREVO_API_KEY).

Delivery is best effort: send() returns False instead of raising, and the
caller decides what to do (invites fall back to a manually shared link).
"""

from html import escape
from typing import Optional

import httpx

from lexcorp.core.config import settings
from lexcorp.core.logging import get_logger

logger = get_logger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"

_ROLE_LABELS = {
    "branch_admin": "Branch Admin",
    "branch_user": "Branch User",
}


class EmailSender:

    def __init__(self, api_key: Optional[str] = None, timeout: float = 15.0) -> None:
        self._api_key = (api_key if api_key is not None else settings.BREVO_API_KEY).strip()
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def send(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        *,
        to_name: Optional[str] = None,
    ) -> bool:
        """Send one email. Returns True if Brevo accepted it."""
        if not self.enabled:
            logger.info("Email delivery disabled, BREVO_API_KEY not set", to=to_email)
            return False

        recipient = {"email": to_email.strip().lower()}
        if to_name and to_name.strip():
            recipient["name"] = to_name.strip()
        payload = {
            "sender": {
                "name": settings.EMAIL_SENDER_NAME,
                "email": settings.EMAIL_SENDER_ADDRESS,
            },
            "to": [recipient],
            "subject": subject,
            "htmlContent": html_content,
        }
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "api-key": self._api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(BREVO_SEND_URL, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Email delivery failed", to=to_email, error=str(exc))
            return False

        if resp.status_code not in (200, 201, 202):
            logger.warning(
                "Email rejected by provider",
                to=to_email,
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            return False
        return True

    async def send_branch_invite(
        self,
        to_email: str,
        organization_name: str,
        branch_identifier: str,
        role: str,
        invite_link: str,
        full_name: Optional[str] = None,
    ) -> bool:
        role_label = escape(_ROLE_LABELS.get(role, role))
        subject = f"You're invited to join {organization_name} on LexCorp"
        greeting = f"Hi {escape(full_name)}," if full_name else "Hello,"
        link = escape(invite_link)
        html = f"""
    <p>{greeting}</p>
    <p>You have been invited to join <strong>{escape(organization_name)}</strong>
    as <strong>{role_label}</strong> for branch <strong>{escape(branch_identifier)}</strong>.</p>
    <p>Click the link below to set your password and activate your access.</p>
    <p><a href="{link}">{link}</a></p>
    <p>If you didn't expect this email, you can ignore it.</p>
    """
        return await self.send(to_email, subject, html, to_name=full_name)
