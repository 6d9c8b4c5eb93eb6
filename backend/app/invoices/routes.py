import uuid

from fastapi import APIRouter, Depends, Request, status

from app.dependencies import get_current_provider, get_current_user, get_invoice_service
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.invoice import InvoiceCreateRequest, InvoiceResponse, InvoiceWithDetailsResponse
from app.services.invoice_service import InvoiceService
from app.utils.rate_limit import LIST_RATE_LIMIT, limiter

router = APIRouter()


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_invoice(
    request: Request,
    body: InvoiceCreateRequest,
    provider: User = Depends(get_current_provider),
    service: InvoiceService = Depends(get_invoice_service),
):
    return await service.create_invoice(provider.id, body)


@router.get("", response_model=list[InvoiceWithDetailsResponse])
@limiter.limit(LIST_RATE_LIMIT)
async def list_my_invoices(
    request: Request,
    user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoices for the caller's vehicles (owners) or bookings (providers)."""
    return await service.get_invoices_by_role(user.id, UserRole(user.role))


@router.get("/{invoice_id}", response_model=InvoiceWithDetailsResponse)
async def get_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return await service.get_invoice(invoice_id, user.id)
