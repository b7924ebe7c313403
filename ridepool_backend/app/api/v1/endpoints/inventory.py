"""
Seat Inventory API Endpoints.

Admin trigger for a seat reconciliation pass.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from ridepool_backend.app.db.session import get_session_factory
from ridepool_backend.app.domain.inventory.seat_reconciler import SeatInventoryReconciler
from ridepool_backend.app.schemas.inventory import ReconcileRequest, ReconciliationReport

router = APIRouter(prefix="/admin/inventory", tags=["Admin - Seat Inventory"])


@router.post("/reconcile", response_model=ReconciliationReport)
async def reconcile_seat_inventory(
    request: ReconcileRequest,
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    Recompute available seats for rides in scope and fix any drift.

    Returns every inspected ride with its old and new value. Oversold rides
    are written as computed (negative) and flagged with a warning.
    """
    reconciler = SeatInventoryReconciler(session_factory)
    return await reconciler.reconcile(request)
