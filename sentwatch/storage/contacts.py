"""
Contact directory: maps a normalized email address to a WhatsApp phone number.

Stored as a single JSON object ({"client@firm.com": "15551234567", ...}).
Every mutation reloads the file, applies the change and rewrites the whole
document; there is no locking, so concurrent writers race and the last one wins.
"""

from __future__ import annotations

from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.storage import JsonFileStore
from sentwatch.storage.models import ContactEntry
from sentwatch.utils.email import normalize_email, normalize_phone
from sentwatch.utils.redaction import redact

logger = get_logger(__name__)


class ContactDirectory(JsonFileStore):
    """Email -> phone directory persisted as a flat JSON file."""

    def get_all(self) -> dict[str, str]:
        """Return the full mapping; empty when the file is missing or unreadable."""
        data = self.read_json(default={})
        if not isinstance(data, dict):
            logger.error("Contacts file %s is not a JSON object; treating as empty", self.path)
            return {}
        contacts: dict[str, str] = {}
        for email, phone in data.items():
            # Hand-edited files may hold null or non-numeric phones
            if not isinstance(phone, str) or not normalize_phone(phone):
                logger.warning("Skipping contact %s: phone is not a number", redact(email))
                counter("contacts.invalid_entries")
                continue
            contacts[str(email)] = phone
        return contacts

    def upsert(self, email: str, raw_phone: str) -> dict[str, str]:
        """
        Add or replace a contact.

        Args:
            email: Address in any case/spacing; stored lowercase and trimmed
            raw_phone: Phone in any format; stored as digits only

        Returns:
            The full mapping after the write

        Raises:
            ValueError: If email or phone normalize to an empty value
            StorePersistenceError: If the directory cannot be written
        """
        entry = ContactEntry(email=normalize_email(email), phone=normalize_phone(raw_phone))

        contacts = self.get_all()
        contacts[entry.email] = entry.phone
        self.write_json(contacts)

        counter("contacts.upserted")
        log_event("contacts.upserted", email_hash=redact(entry.email), total=len(contacts))
        return contacts

    def remove(self, email: str) -> bool:
        """
        Delete a contact.

        Returns:
            False if no entry exists for the address, True once removed and persisted

        Raises:
            StorePersistenceError: If the directory cannot be written
        """
        key = normalize_email(email)
        contacts = self.get_all()
        if key not in contacts:
            return False

        del contacts[key]
        self.write_json(contacts)

        counter("contacts.removed")
        log_event("contacts.removed", email_hash=redact(key), total=len(contacts))
        return True

    def resolve(self, email: str) -> str | None:
        """
        Look up the phone number for an address, case-insensitively.

        Reads the file on every call so edits made through the API are picked
        up by the next relay without a restart.
        """
        key = normalize_email(email)
        if not key:
            return None

        contacts = self.get_all()
        phone = contacts.get(key)
        if phone is not None:
            return phone

        # Hand-edited files may hold keys that were never normalized
        for stored_email, stored_phone in contacts.items():
            if normalize_email(stored_email) == key:
                return stored_phone
        return None
