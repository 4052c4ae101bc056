from docworker.config.settings import Settings
from docworker.database.connection import Database
from docworker.notify.audit_notifier import AuditLogNotifier
from docworker.notify.base import BaseNotifier
from docworker.notify.log_notifier import LogNotifier


class NotifierFactory:
    """Creates the configured post-commit notifier."""

    CHOICES = ("log", "audit")

    @classmethod
    def create(cls, settings: Settings, db: Database) -> BaseNotifier:
        kind = settings.notifier.lower()
        if kind == "log":
            return LogNotifier()
        if kind == "audit":
            return AuditLogNotifier(db)
        raise ValueError(f"Unknown notifier '{kind}'. Choose from: {list(cls.CHOICES)}")
