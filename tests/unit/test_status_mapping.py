from dms_api.core.status_mapping import ALL_MAPPINGS, DOCUMENT_STATUS, SIGNATURE_STATUS
from dms_api.models import DocumentStatus, SignatureStatus
from dms_api.ports.base import EcmDocumentStatus, EcmSignatureRequestStatus


def test_shipped_mappings_are_complete():
    for mapping in ALL_MAPPINGS:
        assert mapping.validate() == []


def test_document_status_defaults():
    assert DOCUMENT_STATUS.to_external(None) == EcmDocumentStatus.ACTIVE
    assert DOCUMENT_STATUS.to_local(None) == DocumentStatus.DRAFT
    assert DOCUMENT_STATUS.to_local("NOT_A_STATUS") == DocumentStatus.DRAFT


def test_document_status_known_values():
    assert DOCUMENT_STATUS.to_external(DocumentStatus.PUBLISHED) == EcmDocumentStatus.ACTIVE
    assert DOCUMENT_STATUS.to_local("ARCHIVED") == DocumentStatus.ARCHIVED


def test_signature_status_mapping():
    assert SIGNATURE_STATUS.to_local(EcmSignatureRequestStatus.VIEWED) == SignatureStatus.IN_PROGRESS
    assert SIGNATURE_STATUS.to_local("DECLINED") == SignatureStatus.REJECTED
    assert SIGNATURE_STATUS.to_local("CANCELLED") == SignatureStatus.CANCELED
    assert SIGNATURE_STATUS.to_local("bogus") == SignatureStatus.PENDING
    assert SIGNATURE_STATUS.to_external(SignatureStatus.SIGNED) == EcmSignatureRequestStatus.SIGNED
