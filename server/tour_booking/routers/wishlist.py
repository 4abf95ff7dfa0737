"""Wishlist router for saving tours to favorites."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, Principal, RequiredAuth, parse_positive_id
from ..core.exceptions import InternalServerError, PersistenceError, ProblemDetailsException
from ..core.observability import metrics_collector
from ..schemas.wishlist import WishlistRemoveResponse, WishlistSaveResponse, WishlistStatus
from ..services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tours", tags=["wishlist"])


@router.post("/{tour_id}/wishlist", response_model=WishlistSaveResponse)
async def save_to_wishlist(
    tour_id: str,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Save a tour to the signed-in user's favorites. Saving twice is harmless."""
    tour_id_num = parse_positive_id(tour_id, "tour")
    wishlist_service = WishlistService(db)

    try:
        result = await wishlist_service.save_tour(principal.user_id, tour_id_num)
        response_data = WishlistSaveResponse(
            message="Tour saved to favorites" if result.created else "Tour already saved",
            created=result.created,
            wishlist_id=result.entry.id,
            added_date=result.entry.added_date,
        )

        if result.created:
            metrics_collector.record_wishlist_change("saved")

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="The tour could not be saved to favorites",
            operation="save_wishlist"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error saving tour to wishlist",
            extra={"tour_id": tour_id, "user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.get("/{tour_id}/wishlist", response_model=WishlistStatus)
async def get_wishlist_status(
    tour_id: str,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Whether the signed-in user has saved the tour."""
    tour_id_num = parse_positive_id(tour_id, "tour")
    wishlist_service = WishlistService(db)

    try:
        entry = await wishlist_service.get_entry(principal.user_id, tour_id_num)
        response_data = WishlistStatus(
            saved=entry is not None,
            wishlist_id=entry.id if entry else None,
            added_date=entry.added_date if entry else None,
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Favorites could not be loaded",
            operation="get_wishlist"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error reading wishlist",
            extra={"tour_id": tour_id, "user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.delete("/{tour_id}/wishlist", response_model=WishlistRemoveResponse)
async def remove_from_wishlist(
    tour_id: str,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Remove a tour from the signed-in user's favorites."""
    tour_id_num = parse_positive_id(tour_id, "tour")
    wishlist_service = WishlistService(db)

    try:
        removed = await wishlist_service.remove_tour(principal.user_id, tour_id_num)
        response_data = WishlistRemoveResponse(
            message="Tour removed from favorites",
            removed=removed,
        )

        if removed:
            metrics_collector.record_wishlist_change("removed")

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="The tour could not be removed from favorites",
            operation="remove_wishlist"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error removing tour from wishlist",
            extra={"tour_id": tour_id, "user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e
