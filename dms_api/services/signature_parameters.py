"""Resolution and validation of the provider-facing signature parameters.

Every overridable field is resolved independently: the caller's value when
present, the tenant default otherwise. Expiration falls back to
``now + expiration_days``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, TypeVar

import pycountry
import structlog

from dms_api.core.config import SignatureDefaults
from dms_api.models import ensure_utc, now_utc
from dms_api.ports.base import EcmSignatureRequest

log = structlog.get_logger(__name__)

T = TypeVar("T")

SIGNER_ROLES = ("Signer", "Approver", "Reviewer", "Witness", "Notary", "CC")
AUTHENTICATION_METHODS = ("EMAIL", "SMS", "PHONE", "ACCESS_CODE", "ID_CHECK", "NONE")

MIN_SIGNING_ORDER = 1
MAX_SIGNING_ORDER = 100
MAX_CUSTOM_MESSAGE_LENGTH = 1000
MAX_METADATA_LENGTH = 5000


@dataclass(frozen=True)
class ResolvedSignatureParameters:
    custom_message: str
    language: str
    time_zone: str
    signer_role: str
    signing_order: int
    signature_required: bool
    authentication_method: str
    expires_at: datetime


def _value_or_default(value: T | None, default: T) -> T:
    return value if value is not None else default


def resolve_parameters(signature: Any, defaults: SignatureDefaults, now: datetime | None = None) -> ResolvedSignatureParameters:
    now = now or now_utc()
    expiration = ensure_utc(signature.expiration_date)
    if expiration is None:
        expiration = now + timedelta(days=defaults.expiration_days)

    return ResolvedSignatureParameters(
        custom_message=_value_or_default(signature.custom_signature_message, defaults.custom_message),
        language=_value_or_default(signature.signer_language, defaults.language),
        time_zone=_value_or_default(signature.signer_time_zone, defaults.time_zone),
        signer_role=_value_or_default(signature.signer_role, defaults.signer_role),
        signing_order=_value_or_default(signature.signing_order, defaults.signing_order),
        signature_required=_value_or_default(signature.signature_required, defaults.signature_required),
        authentication_method=_value_or_default(signature.authentication_method, defaults.authentication_method),
        expires_at=expiration,
    )


def build_signature_request(signature: Any, defaults: SignatureDefaults, now: datetime | None = None) -> EcmSignatureRequest:
    now = now or now_utc()
    params = resolve_parameters(signature, defaults, now)
    log.debug("signature_request_resolved", signature_id=signature.signature_id, document_id=signature.document_id)
    return EcmSignatureRequest(
        id=signature.signature_id,
        envelope_id=signature.document_id,
        signer_email=signature.signer_email,
        signer_name=signature.signer_name,
        signer_role=params.signer_role,
        signing_order=params.signing_order,
        required=params.signature_required,
        custom_message=params.custom_message,
        language=params.language,
        time_zone=params.time_zone,
        authentication_method=params.authentication_method,
        expires_at=params.expires_at,
        created_at=now,
    )


def is_valid_language_code(code: str | None) -> bool:
    if not code or len(code) != 2 or not code.isalpha():
        return False
    try:
        language = pycountry.languages.get(alpha_2=code.lower())
    except LookupError:
        return False
    return language is not None and bool(getattr(language, "alpha_3", None))


def _one_year_after(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # 29 February
        return moment.replace(year=moment.year + 1, day=28)


def validate_signature_parameters(signature: Any, now: datetime | None = None) -> list[str]:
    """Return every violation found; an empty list means the input is acceptable."""
    now = now or now_utc()
    errors: list[str] = []

    language = signature.signer_language
    if language is not None and not is_valid_language_code(language):
        errors.append(
            f"Invalid language code: {language}. Must be a valid ISO 639-1 language code (e.g., 'en', 'es', 'fr')"
        )

    order = signature.signing_order
    if order is not None and not MIN_SIGNING_ORDER <= order <= MAX_SIGNING_ORDER:
        errors.append(f"Signing order must be between {MIN_SIGNING_ORDER} and {MAX_SIGNING_ORDER}, got: {order}")

    role = signature.signer_role
    if role is not None and role not in SIGNER_ROLES:
        errors.append(f"Invalid signer role: {role}. Must be one of: {', '.join(SIGNER_ROLES)}")

    method = signature.authentication_method
    if method is not None and method not in AUTHENTICATION_METHODS:
        errors.append(f"Invalid authentication method: {method}. Must be one of: {', '.join(AUTHENTICATION_METHODS)}")

    expiration = ensure_utc(signature.expiration_date)
    if expiration is not None:
        if expiration < now:
            errors.append(f"Expiration date cannot be in the past: {expiration.isoformat()}")
        if expiration > _one_year_after(now):
            errors.append(f"Expiration date cannot be more than 1 year in the future: {expiration.isoformat()}")

    message = signature.custom_signature_message
    if message is not None and len(message) > MAX_CUSTOM_MESSAGE_LENGTH:
        errors.append(
            f"Custom signature message cannot exceed {MAX_CUSTOM_MESSAGE_LENGTH} characters, got: {len(message)}"
        )

    metadata = signature.ecm_metadata
    if metadata is not None and len(metadata) > MAX_METADATA_LENGTH:
        errors.append(f"ECM metadata cannot exceed {MAX_METADATA_LENGTH} characters, got: {len(metadata)}")

    if errors:
        log.warning("signature_parameters_invalid", errors=errors)
    return errors
