from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest


class Outbox(list):
    """Captured `(email, link)` pairs from magic-link requests."""

    def last_token(self, email: str) -> str:
        for to, link in reversed(self):
            if to == email.lower():
                return parse_qs(urlparse(link).query)["token"][0]
        raise AssertionError(f"no magic link sent to {email}")


@pytest.fixture(autouse=True)
def outbox(monkeypatch) -> Outbox:
    sent: Outbox = Outbox()

    async def mock_send_magic_link_email(email: str, link: str) -> None:
        print(f"[MOCK MAGIC LINK EMAIL] To: {email}")
        sent.append((email, link))

    monkeypatch.setattr(
        "cinelist.services.auth.session_service.send_magic_link_email",
        mock_send_magic_link_email,
    )
    return sent
