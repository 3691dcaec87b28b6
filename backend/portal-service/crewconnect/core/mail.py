"""
메일 발송 어댑터.

발송은 항상 best-effort: Notifier.deliver()는 실패를 로그로만 남기고 예외를 올리지 않는다.
라우터에서 BackgroundTasks로 예약하므로 응답이 나간 뒤에 실행된다.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, List, Protocol

import httpx

from crewconnect.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: str | None = None


class Mailer(Protocol):
    def send(self, message: OutgoingEmail) -> None: ...


class SmtpMailer:
    def __init__(
        self,
        server: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = True,
    ) -> None:
        self.server = server
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.starttls = starttls

    def build_message(self, message: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.set_content(message.text or "")
        if message.html:
            msg.add_alternative(message.html, subtype="html")
        return msg

    def send(self, message: OutgoingEmail) -> None:
        msg = self.build_message(message)
        with smtplib.SMTP(self.server, self.port, timeout=10) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)


class RelayMailer:
    """
    HTTP 메일 릴레이(Notification Service 등)에 JSON으로 전달.
    """

    def __init__(
        self,
        base_url: str,
        sender: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    def send(self, message: OutgoingEmail) -> None:
        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        with httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            resp = client.post("/send", json=payload)
            resp.raise_for_status()


class ConsoleMailer:
    """개발용: 실제로 보내지 않고 로그만 남긴다."""

    def send(self, message: OutgoingEmail) -> None:
        logger.info("[mail] to=%s subject=%s", message.to, message.subject)


class Notifier:
    def __init__(self, mailer: Mailer) -> None:
        self.mailer = mailer

    def deliver(self, messages: Iterable[OutgoingEmail]) -> List[OutgoingEmail]:
        """
        메시지를 하나씩 보내고, 실패한 메시지 목록을 돌려준다.
        어떤 실패도 호출자에게 전파하지 않는다.
        """
        failed: List[OutgoingEmail] = []
        for message in messages:
            try:
                self.mailer.send(message)
            except Exception:  # noqa: BLE001 - 알림 실패가 본 트랜잭션에 영향을 주면 안 됨
                logger.exception(
                    "Email delivery failed: to=%s, subject=%s",
                    message.to,
                    message.subject,
                )
                failed.append(message)
        return failed


def build_mailer(settings: Settings) -> Mailer:
    backend = settings.MAIL_BACKEND.lower()
    if backend == "smtp":
        return SmtpMailer(
            server=settings.SMTP_SERVER,
            port=settings.SMTP_PORT,
            sender=settings.MAIL_FROM,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            starttls=settings.SMTP_STARTTLS,
        )
    if backend == "relay":
        return RelayMailer(settings.MAIL_RELAY_URL, sender=settings.MAIL_FROM)
    if backend != "console":
        logger.warning("Unknown MAIL_BACKEND=%r, falling back to console", settings.MAIL_BACKEND)
    return ConsoleMailer()
