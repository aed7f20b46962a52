"""Test doubles for the email collaborator."""

from typing import List, Optional, Set, Tuple


class FakeEmailService:
    """Records reminder emails instead of talking to an SMTP server."""

    def __init__(self, fail_for: Optional[Set[str]] = None) -> None:
        self.sent: List[Tuple[str, str, str]] = []
        self.fail_for = fail_for or set()

    def send_reminder_email(self, user_email: str, user_name: str, website) -> bool:
        if website.url in self.fail_for:
            return False
        self.sent.append((user_email, user_name, website.url))
        return True


class ExplodingEmailService:
    """Raises for one url, sends everything else."""

    def __init__(self, explode_for: str) -> None:
        self.explode_for = explode_for
        self.sent: List[str] = []

    def send_reminder_email(self, user_email: str, user_name: str, website) -> bool:
        if website.url == self.explode_for:
            raise RuntimeError("smtp connection dropped")
        self.sent.append(website.url)
        return True


class ClaimCheckingEmailService:
    """Notes whether each reminder was already committed as sent when mailed.

    Rolling back first discards anything merely pending, so only a committed
    claim survives the check.
    """

    def __init__(self, session, fail: bool = False) -> None:
        self.session = session
        self.fail = fail
        self.claimed_at_send: List[bool] = []

    def send_reminder_email(self, user_email: str, user_name: str, website) -> bool:
        self.session.rollback()
        self.claimed_at_send.append(website.reminder_sent)
        return not self.fail
