from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from dms_api.core.config import Settings, TenantDefaults
from dms_api.core.status_mapping import ALL_MAPPINGS
from dms_api.models.enums import DocumentType, SecurityLevel
from dms_api.services.signature_parameters import AUTHENTICATION_METHODS, SIGNER_ROLES, is_valid_language_code

log = structlog.get_logger(__name__)


class ConfigurationError(RuntimeError):
    pass


@dataclass
class ConfigReport:
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _check_defaults(scope: str, defaults: TenantDefaults, report: ConfigReport) -> None:
    signature = defaults.signature
    if signature.expiration_days <= 0:
        report.errors.append(f"{scope}: signature expiration days must be positive, got: {signature.expiration_days}")
    elif signature.expiration_days > 365:
        report.warnings.append(
            f"{scope}: signature expiration days is very long: {signature.expiration_days} days"
        )
    if signature.signing_order <= 0:
        report.errors.append(f"{scope}: signing order must be positive, got: {signature.signing_order}")
    if not is_valid_language_code(signature.language):
        report.errors.append(f"{scope}: invalid default signer language: {signature.language}")
    if signature.signer_role not in SIGNER_ROLES:
        report.errors.append(f"{scope}: unknown default signer role: {signature.signer_role}")
    if signature.authentication_method not in AUTHENTICATION_METHODS:
        report.errors.append(f"{scope}: unknown default authentication method: {signature.authentication_method}")
    if signature.send_reminders and signature.reminder_interval_days <= 0:
        report.errors.append(
            f"{scope}: reminder interval days must be positive, got: {signature.reminder_interval_days}"
        )
    if defaults.document.retention_days <= 0:
        report.errors.append(f"{scope}: document retention days must be positive, got: {defaults.document.retention_days}")
    if defaults.document.security_level not in {level.value for level in SecurityLevel}:
        report.errors.append(f"{scope}: unknown default security level: {defaults.document.security_level}")
    if defaults.document.document_type not in {kind.value for kind in DocumentType}:
        report.errors.append(f"{scope}: unknown default document type: {defaults.document.document_type}")


def validate_configuration(config: Settings) -> ConfigReport:
    report = ConfigReport()
    _check_defaults("defaults", config.tenant_defaults(None), report)
    for tenant_id in sorted(config.tenant_overrides):
        _check_defaults(f"tenant {tenant_id}", config.tenant_defaults(tenant_id), report)
    for mapping in ALL_MAPPINGS:
        report.errors.extend(mapping.validate())
    return report


def check_configuration(config: Settings) -> None:
    report = validate_configuration(config)
    for warning in report.warnings:
        log.warning("configuration_warning", warning=warning)
    if report.errors:
        for error in report.errors:
            log.error("configuration_error", error=error)
        raise ConfigurationError("Configuration validation failed: " + "; ".join(report.errors))
    log.info(
        "configuration_validated",
        tenants=len(config.tenant_overrides),
        content_backend=config.content_backend,
        version_backend=config.version_backend,
    )
