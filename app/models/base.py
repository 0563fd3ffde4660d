from datetime import datetime, timezone

from mongoengine import DateTimeField, Document, EmbeddedDocument


def utc_now() -> datetime:
    # Mongo keeps millisecond precision; trim so stored and returned values agree
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class BaseEmbeddedDocument(EmbeddedDocument):
    meta = {
        "abstract": True,
    }


class BaseDocument(Document):
    created_at = DateTimeField(default=utc_now, null=False)
    updated_at = DateTimeField(default=utc_now, null=False)

    meta = {
        "abstract": True,
    }

    def save(self, *args, **kwargs):
        self.updated_at = utc_now()
        return super().save(*args, **kwargs)
