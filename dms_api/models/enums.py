from enum import Enum


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    MARKED_FOR_DELETION = "MARKED_FOR_DELETION"
    DELETED = "DELETED"
    LOCKED = "LOCKED"
    EXPIRED = "EXPIRED"


class DocumentType(str, Enum):
    DOCUMENT = "DOCUMENT"
    IMAGE = "IMAGE"
    PDF = "PDF"
    CONTRACT = "CONTRACT"
    INVOICE = "INVOICE"
    RECEIPT = "RECEIPT"
    FORM = "FORM"
    REPORT = "REPORT"
    EMAIL = "EMAIL"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    ARCHIVE = "ARCHIVE"
    OTHER = "OTHER"


class SecurityLevel(str, Enum):
    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    CONFIDENTIAL = "CONFIDENTIAL"
    RESTRICTED = "RESTRICTED"
    SECRET = "SECRET"


class StorageType(str, Enum):
    LOCAL_FILESYSTEM = "LOCAL_FILESYSTEM"
    DATABASE = "DATABASE"
    S3 = "S3"
    AZURE_BLOB = "AZURE_BLOB"
    GOOGLE_CLOUD_STORAGE = "GOOGLE_CLOUD_STORAGE"
    CDN = "CDN"
    DISTRIBUTED_FS = "DISTRIBUTED_FS"
    EXTERNAL_REFERENCE = "EXTERNAL_REFERENCE"


class SignatureStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self not in (SignatureStatus.PENDING, SignatureStatus.IN_PROGRESS)


class SignatureType(str, Enum):
    SIMPLE = "SIMPLE"
    ADVANCED = "ADVANCED"
    QUALIFIED = "QUALIFIED"


class SignatureFormat(str, Enum):
    PADES = "PADES"
    XADES = "XADES"
    CADES = "CADES"
    PKCS7 = "PKCS7"


class VerificationStatus(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"
    INDETERMINATE = "INDETERMINATE"
    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"
    NOT_VERIFIED = "NOT_VERIFIED"


class PermissionType(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    DELETE = "DELETE"
    SHARE = "SHARE"
    EXECUTE = "EXECUTE"
    CREATE = "CREATE"
    MOVE = "MOVE"
    COPY = "COPY"
    VIEW_METADATA = "VIEW_METADATA"
    MODIFY_METADATA = "MODIFY_METADATA"
    VIEW_VERSIONS = "VIEW_VERSIONS"
    CREATE_VERSION = "CREATE_VERSION"
    VIEW_AUDIT = "VIEW_AUDIT"
    MANAGE_PERMISSIONS = "MANAGE_PERMISSIONS"
    CHECKOUT = "CHECKOUT"
    CHECKIN = "CHECKIN"
    SIGN = "SIGN"
    SEND_FOR_SIGNATURE = "SEND_FOR_SIGNATURE"
    ADMIN = "ADMIN"
