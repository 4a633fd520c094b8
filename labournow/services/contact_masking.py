"""Phone-number masking and time-boxed unmask tokens.

This is a display-safety layer: it decides what a caller gets to *see*.
Connecting an actual call goes through the telephony relay, not through here.

Unmask tokens are self-contained: ``base64(mobile:issued_at_ms:ttl_minutes)``
followed by an HMAC-SHA256 signature, so nothing is stored server-side and a
token cannot be revoked before it expires.
"""
import base64
import binascii
import hashlib
import hmac
import logging
import re
from datetime import datetime, timezone
from typing import Any

from labournow.config import settings
from labournow.models.common import UserRole
from labournow.models.contact import DisclosureDecision, TemporaryMask, UnmaskTokenCheck

logger = logging.getLogger(__name__)

INDIAN_MOBILE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")
COUNTRY_CODE = "+91"
REVEAL_CHAR = "#"
MASK_CHAR = "X"
SEPARATORS = "- "
MOBILE_DIGITS = 10

_PHONE_KEY = re.compile(r"(mobile|phone)", re.IGNORECASE)
_ASCII_NUMBER = re.compile(r"[0-9]+")


class ContactValidationError(ValueError):
    """Raised when a token is requested for something that is not an Indian mobile."""


class MaskingPatternError(ContactValidationError):
    """Raised for a masking pattern that does not describe ten digit slots."""


def normalize_indian_mobile(mobile: str) -> str | None:
    """Return the bare 10-digit number, or None if ``mobile`` is not an Indian mobile.

    Accepts the usual decorations: spaces, dashes, a ``+91``/``91`` country
    code or a leading trunk ``0``.
    """
    if not isinstance(mobile, str):
        return None
    digits = re.sub(r"[^0-9]", "", mobile)
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    elif len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    if not INDIAN_MOBILE_PATTERN.match(digits):
        return None
    return digits


def is_valid_indian_mobile(mobile: str) -> bool:
    return normalize_indian_mobile(mobile) is not None


def format_indian_mobile(mobile: str) -> str:
    """``9876543210`` -> ``+91-98765-43210``. Anything else comes back unchanged."""
    digits = normalize_indian_mobile(mobile)
    if digits is None:
        return mobile
    return f"{COUNTRY_CODE}-{digits[:5]}-{digits[5:]}"


def _render_pattern(digits: str, pattern: str) -> str:
    slots = [ch for ch in pattern if ch not in SEPARATORS]
    if len(slots) != MOBILE_DIGITS or any(ch not in (REVEAL_CHAR, MASK_CHAR) for ch in slots):
        raise MaskingPatternError(
            f"Masking pattern must have {MOBILE_DIGITS} '{REVEAL_CHAR}'/'{MASK_CHAR}' slots: {pattern!r}"
        )
    out = []
    i = 0
    for ch in pattern:
        if ch in SEPARATORS:
            out.append(ch)
            continue
        out.append(digits[i] if ch == REVEAL_CHAR else MASK_CHAR)
        i += 1
    return "".join(out)


def validate_masking_pattern(pattern: str) -> str:
    _render_pattern("0" * MOBILE_DIGITS, pattern)
    return pattern


def mask_mobile_number(
    mobile: str,
    show_full_number: bool = False,
    masking_pattern: str | None = None,
) -> str:
    """Mask a mobile number for display.

    Values that are not Indian mobile numbers are returned untouched so that
    unrelated data is never mangled. ``#`` slots in the pattern reveal the
    digit, ``X`` slots hide it.
    """
    digits = normalize_indian_mobile(mobile)
    if digits is None:
        return mobile
    if show_full_number:
        return format_indian_mobile(digits)
    pattern = masking_pattern or settings.mask_pattern
    return f"{COUNTRY_CODE}-{_render_pattern(digits, pattern)}"


def is_masked(value: str) -> bool:
    return isinstance(value, str) and MASK_CHAR in value


def can_disclose(user_role: UserRole | str, has_active_booking: bool) -> DisclosureDecision:
    role = user_role if isinstance(user_role, UserRole) else UserRole.parse(user_role)

    if role == UserRole.admin:
        return DisclosureDecision(allowed=True)
    if role == UserRole.employer and has_active_booking:
        return DisclosureDecision(allowed=True)
    if role == UserRole.employer:
        return DisclosureDecision(
            allowed=True,
            requires_time_boxed_token=True,
            reason="Requires an active booking or a temporary unmask token",
        )

    logger.info("Contact disclosure denied for role=%s", role.value)
    return DisclosureDecision(allowed=False, reason="Not authorised to view this number")


def unmask_mobile_number(
    mobile: str, user_role: UserRole | str, has_active_booking: bool = False
) -> str:
    """Full number for callers allowed to see it outright, masked form otherwise."""
    decision = can_disclose(user_role, has_active_booking)
    if decision.allowed and not decision.requires_time_boxed_token:
        return format_indian_mobile(mobile)
    return mask_mobile_number(mobile)


def _is_phone_key(key) -> bool:
    return isinstance(key, str) and (bool(_PHONE_KEY.search(key)) or key.lower() == "contact")


def mask_contact_fields(payload: Any, disclose: bool = False, masking_pattern: str | None = None) -> Any:
    """Return a copy of a JSON-like payload with phone-like fields masked.

    A field is phone-like when its key mentions ``mobile`` or ``phone``, or is
    exactly ``contact``.
    """
    if isinstance(payload, dict):
        out = {}
        for key, value in payload.items():
            if isinstance(value, str) and _is_phone_key(key):
                out[key] = mask_mobile_number(
                    value, show_full_number=disclose, masking_pattern=masking_pattern
                )
            else:
                out[key] = mask_contact_fields(value, disclose, masking_pattern)
        return out
    if isinstance(payload, (list, tuple)):
        return [mask_contact_fields(item, disclose, masking_pattern) for item in payload]
    return payload


# --- Unmask tokens ---

def _epoch_ms(now: datetime | None) -> int:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be a timezone-aware datetime")
    return int(now.timestamp() * 1000)


def _sign(encoded_payload: str) -> str:
    digest = hmac.new(
        settings.unmask_token_secret.encode("utf-8"),
        encoded_payload.encode("ascii"),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def issue_temporary_unmask_token(
    mobile: str, ttl_minutes: int | None = None, now: datetime | None = None
) -> TemporaryMask:
    digits = normalize_indian_mobile(mobile)
    if digits is None:
        raise ContactValidationError("Not a valid Indian mobile number")
    ttl_minutes = settings.unmask_token_ttl_minutes if ttl_minutes is None else ttl_minutes
    if not 1 <= ttl_minutes <= settings.max_unmask_token_ttl_minutes:
        raise ContactValidationError(
            f"ttl_minutes must be within [1, {settings.max_unmask_token_ttl_minutes}], got {ttl_minutes}"
        )

    issued_ms = _epoch_ms(now)
    raw = f"{digits}:{issued_ms}:{ttl_minutes}"
    encoded = base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")
    expires_ms = issued_ms + ttl_minutes * 60_000

    return TemporaryMask(
        masked_number=mask_mobile_number(digits),
        token=f"{encoded}.{_sign(encoded)}",
        expires_at=datetime.fromtimestamp(expires_ms / 1000, tz=timezone.utc),
    )


def validate_unmask_token(token: str, now: datetime | None = None) -> UnmaskTokenCheck:
    """Check a token issued by ``issue_temporary_unmask_token``.

    Never raises for a bad token: anything malformed or tampered with is
    simply not valid. An intact but stale token comes back with
    ``expired=True``. ``now`` must be timezone-aware.
    """
    invalid = UnmaskTokenCheck(valid=False)
    if not isinstance(token, str) or token.count(".") != 1:
        return invalid

    encoded, signature = token.split(".")
    try:
        if not hmac.compare_digest(signature.encode("ascii"), _sign(encoded).encode("ascii")):
            logger.info("Rejected unmask token with a bad signature")
            return invalid
        raw = base64.urlsafe_b64decode(encoded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return invalid

    parts = raw.split(":")
    if len(parts) != 3:
        return invalid
    mobile, issued, ttl = parts
    if not INDIAN_MOBILE_PATTERN.fullmatch(mobile):
        return invalid
    if not _ASCII_NUMBER.fullmatch(issued) or not _ASCII_NUMBER.fullmatch(ttl):
        return invalid
    ttl_minutes = int(ttl)
    if ttl_minutes < 1:
        return invalid

    expires_ms = int(issued) + ttl_minutes * 60_000
    try:
        expires_at = datetime.fromtimestamp(expires_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return invalid
    if _epoch_ms(now) > expires_ms:
        return UnmaskTokenCheck(valid=False, expired=True, expires_at=expires_at)

    return UnmaskTokenCheck(valid=True, mobile=format_indian_mobile(mobile), expires_at=expires_at)
