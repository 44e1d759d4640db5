"""Invite email rendering."""

import pytest

from lexcorp.services.email_service import EmailSender


@pytest.mark.asyncio
async def test_invite_email_escapes_user_supplied_text():
    sender = EmailSender(api_key="test-key")
    captured = {}

    async def fake_send(to_email, subject, html, *, to_name=None):
        captured.update(to_email=to_email, html=html, to_name=to_name)
        return True

    sender.send = fake_send

    sent = await sender.send_branch_invite(
        to_email="hire@acme-legal.com",
        organization_name="Acme & Sons <Legal>",
        branch_identifier="<b>NYC-01</b>",
        role="branch_user",
        invite_link="https://app.lexcorp.test/#/invite/abc",
        full_name='<script>alert("x")</script>',
    )

    assert sent is True
    html = captured["html"]
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Acme &amp; Sons &lt;Legal&gt;" in html
    assert "&lt;b&gt;NYC-01&lt;/b&gt;" in html
    assert "Branch User" in html
    assert 'href="https://app.lexcorp.test/#/invite/abc"' in html


def test_sender_without_key_is_disabled():
    assert EmailSender(api_key="").enabled is False
    assert EmailSender(api_key="test-key").enabled is True
