"""Customer entity with its contact-info rules."""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from agenda.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MAX_EMAIL_LENGTH = 255
MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(value: str) -> str:
    normalized = (value or '').strip().lower()
    if not normalized or len(normalized) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(normalized):
        raise ValidationError('Invalid email format', 'INVALID_EMAIL')
    return normalized


def sanitize_phone(value: str) -> str:
    digits = re.sub(r'\D', '', value or '')
    if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
        raise ValidationError('Invalid phone number format', 'INVALID_PHONE')
    return digits


def normalize_name(value: str) -> str:
    normalized = (value or '').strip()
    if len(normalized) < MIN_NAME_LENGTH:
        raise ValidationError(
            f'Name must have at least {MIN_NAME_LENGTH} characters',
            'INVALID_CUSTOMER_NAME',
        )
    return normalized


@dataclass
class Customer:
    name: str
    email: str
    phone: str
    provider_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name)
        self.email = normalize_email(self.email)
        self.phone = sanitize_phone(self.phone)

    def update_contact_info(self, name: str, email: str, phone: str, at: datetime | None = None) -> None:
        # Validate everything before touching any field.
        name, email, phone = normalize_name(name), normalize_email(email), sanitize_phone(phone)
        self.name = name
        self.email = email
        self.phone = phone
        self.updated_at = at or _utcnow()
