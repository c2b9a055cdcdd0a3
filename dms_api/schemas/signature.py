from datetime import datetime

from pydantic import BaseModel, ConfigDict

from dms_api.models.enums import SignatureFormat, SignatureStatus, SignatureType, VerificationStatus


class SignatureIn(BaseModel):
    # Provider-assigned fields (external signer id, signing URL) are not
    # accepted here; unknown keys are ignored.
    # Length and range rules are checked by validate_signature_parameters so
    # that every violation is reported at once.
    signature_id: str | None = None
    document_id: str
    document_version_id: str | None = None
    signer_party_id: str | None = None
    signer_name: str | None = None
    signer_email: str | None = None
    signature_type: SignatureType | None = None
    signature_format: SignatureFormat | None = None
    signature_status: SignatureStatus | None = None
    signature_data: str | None = None
    signature_certificate: str | None = None
    signature_position_x: int | None = None
    signature_position_y: int | None = None
    signature_page: int | None = None
    signature_width: int | None = None
    signature_height: int | None = None
    signature_reason: str | None = None
    signature_location: str | None = None
    signature_contact_info: str | None = None
    expiration_date: datetime | None = None
    custom_signature_message: str | None = None
    signer_language: str | None = None
    signer_time_zone: str | None = None
    signing_order: int | None = None
    signer_role: str | None = None
    signature_required: bool | None = None
    authentication_method: str | None = None
    ecm_metadata: str | None = None
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class SignatureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    signature_id: str
    document_id: str
    document_version_id: str | None = None
    signer_party_id: str | None = None
    signer_name: str | None = None
    signer_email: str | None = None
    signature_type: SignatureType | None = None
    signature_format: SignatureFormat | None = None
    signature_status: SignatureStatus
    signature_data: str | None = None
    signature_certificate: str | None = None
    signature_position_x: int | None = None
    signature_position_y: int | None = None
    signature_page: int | None = None
    signature_width: int | None = None
    signature_height: int | None = None
    signature_reason: str | None = None
    signature_location: str | None = None
    signature_contact_info: str | None = None
    expiration_date: datetime | None = None
    signed_at: datetime | None = None
    custom_signature_message: str | None = None
    signer_language: str | None = None
    signer_time_zone: str | None = None
    signing_order: int | None = None
    signer_role: str | None = None
    signature_required: bool | None = None
    authentication_method: str | None = None
    external_signer_id: str | None = None
    signing_url: str | None = None
    ecm_metadata: str | None = None
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None


class DocumentSigningStatusOut(BaseModel):
    document_id: str
    fully_signed: bool


class SignatureRequestIn(BaseModel):
    request_id: str | None = None
    signature_id: str
    request_reference: str | None = None
    request_status: SignatureStatus | None = None
    request_message: str | None = None
    notification_sent: bool | None = None
    notification_sent_at: datetime | None = None
    reminder_sent: bool | None = None
    reminder_sent_at: datetime | None = None
    expiration_date: datetime | None = None
    completed_at: datetime | None = None
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class SignatureRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: str
    signature_id: str
    request_reference: str | None = None
    request_status: SignatureStatus
    request_message: str | None = None
    notification_sent: bool
    notification_sent_at: datetime | None = None
    reminder_sent: bool
    reminder_sent_at: datetime | None = None
    expiration_date: datetime | None = None
    completed_at: datetime | None = None
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None


class ProviderStatusIn(BaseModel):
    request_reference: str
    external_status: str


class VerificationIn(BaseModel):
    verification_id: str | None = None
    signature_id: str
    verification_status: VerificationStatus | None = None
    verification_details: str | None = None
    verification_provider: str | None = None
    verification_timestamp: datetime | None = None
    certificate_valid: bool | None = None
    certificate_details: str | None = None
    certificate_issuer: str | None = None
    certificate_subject: str | None = None
    certificate_valid_from: datetime | None = None
    certificate_valid_until: datetime | None = None
    document_integrity_valid: bool | None = None
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class VerificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    verification_id: str
    signature_id: str
    verification_status: VerificationStatus
    verification_details: str | None = None
    verification_provider: str | None = None
    verification_timestamp: datetime
    certificate_valid: bool | None = None
    certificate_details: str | None = None
    certificate_issuer: str | None = None
    certificate_subject: str | None = None
    certificate_valid_from: datetime | None = None
    certificate_valid_until: datetime | None = None
    document_integrity_valid: bool | None = None
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None
