"""
Contacts API Endpoints
Contact CRUD; creates and updates report how many linked records were rewritten.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from roombridge.dependencies import get_contact_service
from roombridge.modules.contacts.schemas.contact_schemas import CreateContactRequest, UpdateContactRequest
from roombridge.modules.contacts.services.contact_service import ContactService
from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter()


@router.post("", status_code=201, summary="Create a contact")
async def create_contact(body: CreateContactRequest, service: ContactService = Depends(get_contact_service)):
    """
    Returns {contact, updates: {roomsUpdated, messagesUpdated, whatsappMessagesUpdated}}.
    """
    return await service.create_contact(body.model_dump())


@router.get("", summary="List contacts")
async def list_contacts(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Substring of username or phone"),
    service: ContactService = Depends(get_contact_service),
):
    return await service.list_contacts(page=page, limit=limit, search=search)


@router.get("/{contact_id}", summary="Contact detail")
async def get_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    return await service.get_contact(contact_id)


@router.put("/{contact_id}", summary="Update a contact")
async def update_contact(
    contact_id: str,
    body: UpdateContactRequest,
    service: ContactService = Depends(get_contact_service),
):
    return await service.update_contact(contact_id, body.model_dump(exclude_none=True))
