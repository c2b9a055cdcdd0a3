import asyncio

import structlog

from dms_api.db.session import SessionLocal
from dms_api.services.signature_request_service import SignatureRequestService
from dms_api.workers.celery_app import celery_app

log = structlog.get_logger(__name__)


@celery_app.task(name="dms_api.workers.tasks.process_expired_signature_requests")
def process_expired_signature_requests() -> dict:
    async def _run() -> dict:
        async with SessionLocal() as session:
            svc = SignatureRequestService(session)
            expired = await svc.process_expired_requests()
            return {"expired": [row.request_id for row in expired]}

    result = asyncio.run(_run())
    log.info("expiry_sweep_finished", expired=len(result["expired"]))
    return result


@celery_app.task(name="dms_api.workers.tasks.send_signature_reminders")
def send_signature_reminders() -> dict:
    async def _run() -> dict:
        async with SessionLocal() as session:
            svc = SignatureRequestService(session)
            reminded = await svc.send_due_reminders()
            return {"reminded": [row.request_id for row in reminded]}

    result = asyncio.run(_run())
    log.info("reminder_sweep_finished", reminded=len(result["reminded"]))
    return result
