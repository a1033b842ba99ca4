import email as email_lib
import email.utils
import logging
import smtplib
from datetime import datetime, timezone
from email.mime.text import MIMEText

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from .ports import Mailbox, MailMessage

log = logging.getLogger(__name__)


class ImapMailbox(Mailbox):
    """
    Adapter: the support inbox over IMAP, replies over SMTP.

    Unread mail is fetched with BODY.PEEK so it stays unread until the
    pipeline is done with it.  Drafts are APPENDed to the drafts folder.
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        user: str,
        password: str,
        imap_host: str,
        imap_port: int,
        drafts_folder: str = "[Gmail]/Drafts",
        batch_size: int = 10,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.user = user
        self.password = password
        self.imap_host = imap_host
        self.imap_port = imap_port
        self.drafts_folder = drafts_folder
        self.batch_size = batch_size
        self._uids: dict[str, int] = {}

    def _imap(self) -> IMAPClient:
        client = IMAPClient(self.imap_host, port=self.imap_port, ssl=True)
        client.login(self.user, self.password)
        return client

    async def list_unread(self) -> list[MailMessage]:
        messages = []

        with self._imap() as client:
            client.select_folder("INBOX", readonly=True)
            uids = sorted(client.search(["UNSEEN"]))[: self.batch_size]
            if not uids:
                return messages

            fetched = client.fetch(uids, ["BODY.PEEK[]"])
            for uid in uids:
                raw_bytes = fetched.get(uid, {}).get(b"BODY[]")
                if not raw_bytes:
                    continue
                message = self._parse(uid, email_lib.message_from_bytes(raw_bytes))
                self._uids[message.message_id] = uid
                messages.append(message)

        log.debug("imap: %d unread message(s)", len(messages))
        return messages

    async def mark_read(self, message_id: str) -> None:
        with self._imap() as client:
            client.select_folder("INBOX")
            uid = self._uids.pop(message_id, None)
            uids = [uid] if uid else client.search(["HEADER", "Message-ID", message_id])
            if uids:
                client.set_flags(uids, [b"\\Seen"])

    async def send_reply(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> bool:
        msg = self._build(to, subject, body, thread_id)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            log.error("smtp: failed to send reply to %s: %s", to, exc)
            return False
        return True

    async def create_draft(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> str | None:
        msg = self._build(to, subject, body, thread_id)
        try:
            with self._imap() as client:
                client.append(
                    self.drafts_folder,
                    msg.as_bytes(),
                    flags=[b"\\Draft"],
                    msg_time=datetime.now(timezone.utc),
                )
        except (IMAPClientError, OSError) as exc:
            log.error("imap: failed to create draft for %s: %s", to, exc)
            return None
        return msg["Message-ID"]

    def _build(self, to: str, subject: str, body: str, thread_id: str | None) -> MIMEText:
        msg = MIMEText(body, _charset="utf-8")
        msg["Subject"] = subject
        msg["From"] = self.user
        msg["To"] = to
        msg["Message-ID"] = email.utils.make_msgid(domain="support-reply")
        if thread_id:
            msg["In-Reply-To"] = thread_id
            msg["References"] = thread_id
        return msg

    @classmethod
    def _parse(cls, uid: int, msg) -> MailMessage:
        from_name, from_email = email.utils.parseaddr(msg["From"] or "")
        message_id = (msg["Message-ID"] or "").strip() or f"uid-{uid}"

        references = (msg["References"] or "").split()
        thread_id = references[0] if references else (msg["In-Reply-To"] or message_id)

        try:
            received_at = email.utils.parsedate_to_datetime(msg["Date"])
        except (TypeError, ValueError):
            received_at = datetime.now(timezone.utc)

        return MailMessage(
            message_id=message_id,
            thread_id=thread_id.strip(),
            subject=msg["Subject"] or "",
            from_email=from_email,
            from_name=from_name,
            body=cls._get_body(msg),
            received_at=received_at,
        )

    @staticmethod
    def _decode(part) -> str:
        payload = part.get_payload(decode=True)
        if not payload:
            return ""
        charset = part.get_content_charset() or "utf-8"
        try:
            return payload.decode(charset, errors="replace")
        except LookupError:
            # unknown charset name in the header
            return payload.decode("utf-8", errors="replace")

    @classmethod
    def _get_body(cls, msg) -> str:
        if msg.is_multipart():
            for part in msg.walk():
                if part.get_content_type() == "text/plain":
                    body = cls._decode(part)
                    if body:
                        return body
            return ""
        return cls._decode(msg)
