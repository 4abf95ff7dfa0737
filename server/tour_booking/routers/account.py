"""Account router: overview snapshot and payment methods on file."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, Principal, RequiredAuth
from ..core.exceptions import InternalServerError, PersistenceError, ProblemDetailsException, ValidationError
from ..models.payment_method import PaymentAccountType, UserPaymentMethod
from ..schemas.account import AccountBooking, AccountOverview, AccountStats, AccountTour, SavedTour
from ..schemas.common import to_number
from ..schemas.payment_method import BankAccount, MomoAccount, PaymentAccounts, SavePaymentAccountsRequest
from ..services.account_service import AccountBookingRow, AccountService, SavedTourRow
from ..services.payment_method_service import PaymentMethodService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/account", tags=["account"])

# Query parameter declared at module level to avoid B008 linting errors
TYPE_QUERY = Query(None, alias="type", description="Account type to delete: bank or momo")


def _convert_booking_row(row: AccountBookingRow) -> AccountBooking:
    booking = row.booking
    tour = row.tour
    return AccountBooking(
        id=booking.id,
        reference=booking.reference,
        booking_date=booking.booking_date,
        departure_date=booking.departure_date,
        guests=booking.guests,
        total_amount=to_number(booking.total_amount),
        status=row.status,
        tour=AccountTour(
            id=tour.id,
            slug=tour.slug,
            title=tour.title,
            location=tour.location,
            image=tour.image,
            duration=tour.duration,
            average_rating=to_number(tour.average_rating),
            price=to_number(tour.price),
            original_price=float(tour.original_price) if tour.original_price is not None else None,
        ),
        rating=row.rating,
    )


def _convert_saved_row(row: SavedTourRow) -> SavedTour:
    tour = row.tour
    return SavedTour(
        id=tour.id,
        slug=tour.slug,
        title=tour.title,
        location=tour.location,
        image=tour.image,
        duration=tour.duration,
        average_rating=to_number(tour.average_rating),
        review_count=tour.review_count or 0,
        price=to_number(tour.price),
        original_price=float(tour.original_price) if tour.original_price is not None else None,
        added_date=row.entry.added_date,
    )


def _convert_payment_methods(rows: List[UserPaymentMethod]) -> PaymentAccounts:
    """Fold account rows into bank and momo blocks, skipping rows with no data."""
    accounts = PaymentAccounts()
    for row in rows:
        if row.type == PaymentAccountType.BANK.value:
            if row.bank_name or row.account_name or row.account_number:
                accounts.bank = BankAccount(
                    id=row.id,
                    bank_name=row.bank_name or "",
                    account_name=row.account_name or "",
                    account_number=row.account_number or "",
                )
        elif row.type == PaymentAccountType.MOMO.value:
            if row.momo_owner or row.momo_phone:
                accounts.momo = MomoAccount(
                    id=row.id,
                    owner_name=row.momo_owner or "",
                    phone_number=row.momo_phone or "",
                )
    return accounts


def _payment_accounts_response(rows: List[UserPaymentMethod]) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=_convert_payment_methods(rows).model_dump(mode="json", by_alias=True, exclude_none=True)
    )


@router.get("/overview", response_model=AccountOverview)
async def get_account_overview(
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Bookings, upcoming trips and saved tours of the signed-in user."""
    account_service = AccountService(db)

    try:
        snapshot = await account_service.get_overview(principal.user_id)
        response_data = AccountOverview(
            stats=AccountStats(
                total_bookings=snapshot.total_bookings,
                saved_tours_count=snapshot.saved_tours_count,
                average_saved_rating=snapshot.average_saved_rating,
            ),
            bookings=[_convert_booking_row(row) for row in snapshot.bookings],
            upcoming_trips=[_convert_booking_row(row) for row in snapshot.upcoming_trips],
            recent_saved=[_convert_saved_row(row) for row in snapshot.recent_saved],
            favorite_tours=[_convert_saved_row(row) for row in snapshot.favorite_tours],
            saved_tours=[_convert_saved_row(row) for row in snapshot.saved_tours],
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Failed to load account data",
            operation="account_overview"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error in account overview",
            extra={"user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.get("/payment-methods", response_model=PaymentAccounts)
async def get_payment_methods(
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Bank and MoMo accounts on file for the signed-in user."""
    service = PaymentMethodService(db)

    try:
        rows = await service.list_methods(principal.user_id)
        return _payment_accounts_response(rows)

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Failed to load payment methods",
            operation="list_payment_methods"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error loading payment methods",
            extra={"user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/payment-methods", response_model=PaymentAccounts)
async def save_payment_methods(
    request: SavePaymentAccountsRequest,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Create, update or clear the signed-in user's bank and MoMo accounts.

    Returns the accounts on file after the change.
    """
    service = PaymentMethodService(db)

    try:
        rows = await service.save_methods(principal.user_id, request)
        return _payment_accounts_response(rows)

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Failed to save payment methods",
            operation="save_payment_methods"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error saving payment methods",
            extra={"user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.delete("/payment-methods", response_model=PaymentAccounts)
async def delete_payment_method(
    requested_type: Optional[str] = TYPE_QUERY,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Delete one account type and return the accounts still on file."""
    try:
        account_type = PaymentAccountType(requested_type)
    except ValueError:
        raise ValidationError("Invalid type, must be 'bank' or 'momo'")

    service = PaymentMethodService(db)

    try:
        rows = await service.delete_method(principal.user_id, account_type)
        return _payment_accounts_response(rows)

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Failed to delete payment method",
            operation="delete_payment_method"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error deleting payment method",
            extra={"user_id": principal.user_id, "type": requested_type, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e
