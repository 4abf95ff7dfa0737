"""Review router for tour ratings."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, OptionalAuth, Principal, RequiredAuth, parse_positive_id
from ..core.exceptions import InternalServerError, PersistenceError, ProblemDetailsException
from ..core.observability import metrics_collector
from ..schemas.review import ReviewSummary, SubmitReviewRequest
from ..services.review_service import RatingSummary, ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tours", tags=["review"])


def _convert_summary_to_schema(summary: RatingSummary) -> ReviewSummary:
    return ReviewSummary(
        average_rating=float(summary.average_rating),
        review_count=summary.review_count,
        user_rating=summary.user_rating,
    )


@router.get("/{tour_id}/reviews", response_model=ReviewSummary)
async def get_reviews(
    tour_id: str,
    principal: Optional[Principal] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Average rating and review count of a tour, plus the caller's rating when signed in."""
    tour_id_num = parse_positive_id(tour_id, "tour")
    review_service = ReviewService(db)

    try:
        summary = await review_service.get_summary(
            tour_id_num,
            user_id=principal.user_id if principal else None
        )

        return JSONResponse(
            status_code=200,
            content=_convert_summary_to_schema(summary).model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="Failed to load ratings",
            operation="get_reviews"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error loading ratings",
            extra={"tour_id": tour_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/{tour_id}/reviews", response_model=ReviewSummary)
async def submit_review(
    tour_id: str,
    request: SubmitReviewRequest,
    principal: Principal = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Rate a tour; a second rating from the same user replaces the first."""
    tour_id_num = parse_positive_id(tour_id, "tour")
    review_service = ReviewService(db)

    try:
        summary = await review_service.submit_review(
            tour_id_num,
            principal.user_id,
            rating=request.rating,
            comment=request.comment
        )

        metrics_collector.record_review_submitted()

        return JSONResponse(
            status_code=200,
            content=_convert_summary_to_schema(summary).model_dump(mode="json", by_alias=True)
        )

    except ProblemDetailsException:
        raise

    except SQLAlchemyError as e:
        raise PersistenceError(
            detail="The rating could not be saved",
            operation="submit_review"
        ) from e

    except Exception as e:
        logger.error(
            "Unexpected error saving rating",
            extra={"tour_id": tour_id, "user_id": principal.user_id, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e
