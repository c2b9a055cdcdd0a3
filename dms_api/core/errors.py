from fastapi import HTTPException


def api_error(status_code: int, code: str, message: str, detail: dict | None = None, hint: str | None = None) -> HTTPException:
    payload = {
        "code": code,
        "message": message,
        "detail": detail or {},
        "hint": hint,
    }
    return HTTPException(status_code=status_code, detail=payload)


def not_found(entity: str, entity_id: str | None) -> HTTPException:
    label = entity.replace("_", " ").capitalize()
    return api_error(404, f"{entity}_not_found", f"{label} not found", {f"{entity}_id": entity_id})


def invalid_argument(message: str, detail: dict | None = None) -> HTTPException:
    return api_error(400, "invalid_argument", message, detail)


def validation_failed(errors: list[str]) -> HTTPException:
    return api_error(
        422,
        "validation_failed",
        "Signature parameter validation failed: " + ", ".join(errors),
        {"errors": errors},
    )


def illegal_state(message: str, detail: dict | None = None) -> HTTPException:
    return api_error(409, "illegal_state", message, detail)
