"""结果邮件通知

只在 SEND_EMAIL=true 时发送。正文是从 CSV 读回的 URL/价格表格（HTML 与纯文本
两份），附件只有门票面板截图。
"""

from __future__ import annotations

import asyncio
import html
import mimetypes
import smtplib
from datetime import datetime
from email.message import EmailMessage
from pathlib import Path

from ..common.config import MailConfig, config
from ..common.exceptions import NotificationError
from ..common.logger import get_logger
from ..common.types import NotificationResult, NotifyPayload
from .csv_export import read_price_table

logger = get_logger(__name__)

EMPTY_TABLE_TEXT = "No URL/price data found."
SMTP_SSL_PORT = 465


def render_tables(rows: list[tuple[str, str]]) -> tuple[str, str]:
    """渲染纯文本与 HTML 两种表格"""
    if not rows:
        return EMPTY_TABLE_TEXT, f"<p>{EMPTY_TABLE_TEXT}</p>"

    text = "\n".join(f"{url}\t{price}" for url, price in rows)
    body = "".join(
        f'<tr><td><a href="{html.escape(url)}">{html.escape(url)}</a></td>'
        f"<td>{html.escape(price)}</td></tr>"
        for url, price in rows
    )
    table = (
        '<table border="1" cellpadding="4" cellspacing="0">'
        "<thead><tr><th>URL</th><th>Price</th></tr></thead>"
        f"<tbody>{body}</tbody></table>"
    )
    return text, table


class MailNotifier:
    """SMTP 邮件通知器"""

    def __init__(self, settings: MailConfig | None = None):
        self.settings = settings or config.mail

    async def notify(self, payload: NotifyPayload, send: bool | None = None) -> NotificationResult:
        """
        发送一个地点的结果邮件。

        Args:
            payload: 截图路径、地点名、CSV 路径
            send: 覆盖配置中的 SEND_EMAIL 开关

        Returns:
            发送结果；未启用时 skipped=True，失败时 error 有值
        """
        enabled = self.settings.enabled if send is None else send
        if not enabled:
            return NotificationResult(skipped=True)

        if not self.settings.is_configured:
            return NotificationResult(error="SMTP or recipient not configured")

        try:
            message, attachments = self.build_message(payload)
        except OSError as e:
            logger.warning(f"[Notify] {payload.place_name} 读取附件失败: {e}")
            return NotificationResult(error=f"附件读取失败: {e}")

        try:
            await asyncio.to_thread(self._send, message)
        except NotificationError as e:
            logger.warning(f"[Notify] {payload.place_name} 邮件发送失败: {e}")
            return NotificationResult(error=str(e))

        logger.info(f"[Notify] {payload.place_name} 邮件已发送")
        return NotificationResult(ok=True, attachments_sent=attachments)

    def build_message(
        self, payload: NotifyPayload, now: datetime | None = None
    ) -> tuple[EmailMessage, list[str]]:
        """构建邮件，返回邮件对象与附件文件名列表"""
        text, table = render_tables(read_price_table(payload.csv_path))
        now = now or datetime.now()

        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = self.settings.email_to
        message["Subject"] = f"{payload.place_name or 'Places'} {now:%Y-%m-%d %H:%M:%S}"
        message.set_content(text)
        message.add_alternative(table, subtype="html")

        attachments: list[str] = []
        if payload.screenshot_path:
            shot = Path(payload.screenshot_path)
            if shot.is_file():
                mime, _ = mimetypes.guess_type(shot.name)
                maintype, subtype = (mime or "application/octet-stream").split("/", 1)
                message.add_attachment(
                    shot.read_bytes(), maintype=maintype, subtype=subtype, filename=shot.name
                )
                attachments.append(shot.name)
            else:
                logger.debug(f"[Notify] 截图不存在，跳过附件: {shot}")

        return message, attachments

    def _send(self, message: EmailMessage) -> None:
        host, port = self.settings.smtp_host, self.settings.smtp_port
        try:
            if port == SMTP_SSL_PORT:
                smtp = smtplib.SMTP_SSL(host, port, timeout=30)
            else:
                smtp = smtplib.SMTP(host, port, timeout=30)
            with smtp:
                if port != SMTP_SSL_PORT:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls()
                        smtp.ehlo()
                smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP 发送失败: {e}") from e
