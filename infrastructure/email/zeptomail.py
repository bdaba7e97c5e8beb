"""ZeptoMail implementation of EmailProvider.

Each mail is an HTML body rendered from ``templates/emails`` plus a short
plain-text alternative, posted to the ZeptoMail HTTP API. Delivery problems
are logged and reported as ``False``; they never raise.
"""

import os
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)
_AUTH_PREFIX = "Zoho-enczapikey "
_ACCEPTED = frozenset({200, 201, 202})


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "auth-service",
        app_url: str = "http://localhost:4000",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._app_url = app_url
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def _render(self, template: str, **context: Any) -> str:
        return self._jinja.get_template(template).render(
            app_name=self._app_name, app_url=self._app_url, **context
        )

    def _authorization(self) -> str:
        token = self._settings.zepto_api_token
        return token if token.startswith(_AUTH_PREFIX) else _AUTH_PREFIX + token

    def _payload(
        self, to_email: str, to_name: Optional[str], subject: str, html: str, text: str
    ) -> dict:
        recipient = {"address": to_email, "name": to_name or to_email}
        return {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": recipient}],
            "subject": subject,
            "htmlbody": html,
            "textbody": text,
        }

    async def _send(
        self, to_email: str, to_name: Optional[str], subject: str, html: str, text: str
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("email_send_failed", reason="token_not_configured")
            return False

        try:
            response = await self._http.post(
                self._settings.zepto_api_url,
                json=self._payload(to_email, to_name, subject, html, text),
                headers={
                    "Authorization": self._authorization(),
                    "Content-Type": "application/json",
                },
            )
        except Exception as e:
            log.error(
                "email_send_error",
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code not in _ACCEPTED:
            log.error(
                "email_send_failed",
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False

        log.info("email_sent", subject=subject)
        return True

    @staticmethod
    def _greeting(name: Optional[str]) -> str:
        return f"Hello {name}," if name else "Hello,"

    async def send_welcome_email(self, email: str, name: Optional[str]) -> bool:
        html = self._render("welcome.html", name=name, email=email)
        text = (
            f"{self._greeting(name)}\n\n"
            f"Your account has been created with the email {email}.\n\n"
            f"Get started: {self._app_url}"
        )
        return await self._send(
            email, name, f"Welcome to {self._app_name}", html, text
        )

    async def send_verification_email(
        self, email: str, name: Optional[str], otp_code: str, expires_in_minutes: int
    ) -> bool:
        html = self._render(
            "verification.html",
            name=name,
            otp_code=otp_code,
            expires_in_minutes=expires_in_minutes,
        )
        text = (
            f"{self._greeting(name)}\n\n"
            f"Your verification code is: {otp_code}\n\n"
            f"This code expires in {expires_in_minutes} minutes."
        )
        return await self._send(
            email, name, f"Verify your email - {self._app_name}", html, text
        )

    async def send_password_reset_email(
        self, email: str, name: Optional[str], otp_code: str, expires_in_minutes: int
    ) -> bool:
        html = self._render(
            "password_reset.html",
            name=name,
            otp_code=otp_code,
            expires_in_minutes=expires_in_minutes,
        )
        text = (
            f"{self._greeting(name)}\n\n"
            f"Your password reset code is: {otp_code}\n\n"
            f"This code expires in {expires_in_minutes} minutes. "
            f"If you did not ask for a reset, ignore this email."
        )
        return await self._send(
            email, name, f"Reset your password - {self._app_name}", html, text
        )
