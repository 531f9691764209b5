"""Log filters for PII masking."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks PII (emails, phone numbers) in log messages."""

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
    # Indian 5+5 (optional +91) or US 3-3-4, matched as whole numbers only
    PHONE_PATTERN = re.compile(
        r"(?:\+91[-.\s]?)?\b\d{5}[-.\s]?\d{5}\b|\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"
    )

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            msg = record.msg
            if "@" in msg:
                msg = self.EMAIL_PATTERN.sub("[EMAIL]", msg)
            if any(c.isdigit() for c in msg):
                msg = self.PHONE_PATTERN.sub("[PHONE]", msg)
            record.msg = msg
        return True
