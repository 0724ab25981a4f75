"""
Contact directory endpoints: list, add/update, delete.

Each write reloads and rewrites the whole directory file.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from sentwatch.api.dependencies import get_context
from sentwatch.api.models import ContactRequest, ContactsResponse, OperationResponse
from sentwatch.observability.telemetry import counter
from sentwatch.relay.context import RelayContext
from sentwatch.storage import StorePersistenceError

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.get("")
async def list_contacts(context: RelayContext = Depends(get_context)) -> dict[str, str]:
    return context.contacts.get_all()


@router.post("", response_model=ContactsResponse, response_model_exclude_none=True)
async def upsert_contact(
    body: ContactRequest,
    context: RelayContext = Depends(get_context),
) -> ContactsResponse | JSONResponse:
    if not body.email or not body.phone:
        counter("api.contacts.rejected")
        return _error(status.HTTP_400_BAD_REQUEST, "Email and phone are required")

    try:
        contacts = context.contacts.upsert(body.email, body.phone)
    except StorePersistenceError:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save contact")
    except ValueError:
        counter("api.contacts.rejected")
        return _error(status.HTTP_400_BAD_REQUEST, "Email and phone must be valid")

    return ContactsResponse(success=True, contacts=contacts)


@router.delete("/{email}", response_model=OperationResponse, response_model_exclude_none=True)
async def delete_contact(
    email: str,
    context: RelayContext = Depends(get_context),
) -> OperationResponse | JSONResponse:
    try:
        removed = context.contacts.remove(email)
    except StorePersistenceError:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete contact")

    if not removed:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "not found"})

    return OperationResponse(success=True)
