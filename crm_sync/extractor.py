"""Pull candidate email addresses out of a contact's custom fields."""

from __future__ import annotations

from collections.abc import Iterator

from .models import Contact, CustomField

EMAIL_FIELD_CODE = "EMAIL"
EMAIL_NAME_MARKER = "email"
SEPARATOR = "@"


def is_email_field(field: CustomField) -> bool:
    """True for the built-in ``EMAIL`` field or any field named like ``*email*``."""
    if field.code == EMAIL_FIELD_CODE:
        return True
    if field.name is None:
        return False
    return EMAIL_NAME_MARKER in field.name.lower()


def extract_emails(contact: Contact) -> Iterator[str]:
    """Yield trimmed candidate emails in field order, then value order.

    A value counts as a candidate when it contains ``@`` after trimming;
    there is no further format check.  Duplicates are yielded as-is.
    """
    for field in contact.custom_fields:
        if not is_email_field(field):
            continue
        for item in field.values:
            if item.value is None:
                continue
            email = item.value.strip()
            if SEPARATOR in email:
                yield email
