"""
Outgoing email for account credentials.

Messages are rendered from ``airwalk.email.templates`` into an
``OutgoingEmail`` and delivered by the provider named in
``AIRWALK_EMAIL_PROVIDER``: ``smtp`` (aiosmtplib) or ``resend`` (HTTP API).
Providers report delivery as a boolean and log failures themselves, so
callers never have to handle transport errors.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Callable

import structlog

from airwalk.config import get_settings
from airwalk.email.templates import temporary_password, welcome_credentials

logger = structlog.get_logger()

RESEND_ENDPOINT = "https://api.resend.com/emails"
SMTPS_PORT = 465


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str
    text: str


Renderer = Callable[[dict[str, Any]], tuple[str, str, str]]

_TEMPLATE_REGISTRY: dict[str, Renderer] = {
    "welcome": lambda ctx: welcome_credentials(ctx.get("first_name"), ctx["username"], ctx["password"]),
    "temporary_password": lambda ctx: temporary_password(ctx["username"], ctx["password"]),
}


def render_template(to: str, template_name: str, context: dict[str, Any]) -> OutgoingEmail:
    """
    Build the message for a named template.

    Raises:
        ValueError: If the template name is unknown.
    """
    renderer = _TEMPLATE_REGISTRY.get(template_name)
    if renderer is None:
        msg = f"Unknown template: {template_name}"
        raise ValueError(msg)
    subject, html, text = renderer(context)
    return OutgoingEmail(to=to, subject=subject, html=html, text=text)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class BaseEmailProvider(ABC):
    """A delivery channel. ``send`` returns False instead of raising."""

    name = "base"

    def __init__(self, from_address: str, from_name: str) -> None:
        self.sender = f"{from_name} <{from_address}>"

    @abstractmethod
    async def deliver(self, email: OutgoingEmail) -> None:
        """Hand the message to the transport; raise on failure."""

    async def send(self, email: OutgoingEmail) -> bool:
        try:
            await self.deliver(email)
        except Exception:
            logger.exception("email_send_failed", to=email.to, provider=self.name)
            return False
        logger.info("email_sent", to=email.to, subject=email.subject, provider=self.name)
        return True


class SMTPProvider(BaseEmailProvider):
    """SMTP relay. Port 465 speaks implicit TLS, other ports upgrade with STARTTLS."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str,
        use_tls: bool = True,
    ) -> None:
        super().__init__(from_address, from_name)
        self.host = host
        self.port = port
        self.username = username or None
        self.password = password or None
        self.use_tls = use_tls

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = email.to
        message["Subject"] = email.subject
        message.set_content(email.text)
        message.add_alternative(email.html, subtype="html")
        return message

    async def deliver(self, email: OutgoingEmail) -> None:
        import aiosmtplib

        implicit = self.use_tls and self.port == SMTPS_PORT
        await aiosmtplib.send(
            self.build_message(email),
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=implicit,
            start_tls=self.use_tls and not implicit,
            tls_context=ssl.create_default_context() if self.use_tls else None,
        )


class ResendProvider(BaseEmailProvider):
    name = "resend"

    def __init__(self, api_key: str, from_address: str, from_name: str, timeout: float = 10.0) -> None:
        super().__init__(from_address, from_name)
        self.api_key = api_key
        self.timeout = timeout

    async def deliver(self, email: OutgoingEmail) -> None:
        import httpx

        payload = {
            "from": self.sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
            "text": email.text,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                RESEND_ENDPOINT,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
            response.raise_for_status()


def _create_provider() -> BaseEmailProvider:
    settings = get_settings()
    provider_name = settings.email_provider.lower()
    if provider_name == SMTPProvider.name:
        return SMTPProvider(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    if provider_name == ResendProvider.name:
        return ResendProvider(
            api_key=settings.resend_api_key,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
        )
    msg = f"Unsupported email provider: {provider_name}"
    raise ValueError(msg)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class EmailService:
    def __init__(self, provider: BaseEmailProvider | None = None) -> None:
        self.provider = provider or _create_provider()

    async def send_template(self, to: str, template_name: str, context: dict[str, Any]) -> bool:
        """Render ``template_name`` with ``context`` and deliver it. Returns False if delivery failed."""
        return await self.provider.send(render_template(to, template_name, context))


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Process-wide service, built from settings on first use."""
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def reset_email_service() -> None:
    """Forget the cached service so the next call re-reads settings."""
    global _email_service  # noqa: PLW0603
    _email_service = None
