import os

from .ports import Mailbox


def create_mailbox(channel: str | None = None) -> Mailbox:
    """
    Factory: create the right mailbox adapter based on config.

    The channel can be passed explicitly or read from the
    MAILBOX_CHANNEL env var. Defaults to "console".
    """
    channel = channel or os.environ.get("MAILBOX_CHANNEL", "console")

    if channel == "imap":
        from .imap_mailbox import ImapMailbox

        return ImapMailbox(
            smtp_host=os.environ.get("EMAIL_SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.environ.get("EMAIL_SMTP_PORT", "587")),
            user=os.environ["EMAIL_USER"],
            password=os.environ["EMAIL_PASSWORD"],
            imap_host=os.environ.get("EMAIL_IMAP_HOST", "imap.gmail.com"),
            imap_port=int(os.environ.get("EMAIL_IMAP_PORT", "993")),
            drafts_folder=os.environ.get("EMAIL_DRAFTS_FOLDER", "[Gmail]/Drafts"),
            batch_size=int(os.environ.get("UNREAD_BATCH_SIZE", "10")),
        )

    if channel == "console":
        from .console_mailbox import ConsoleMailbox

        return ConsoleMailbox()

    raise ValueError(f"Unknown mailbox channel: {channel!r}")
