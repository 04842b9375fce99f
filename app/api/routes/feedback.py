import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_optional_user
from app.db.models.feedback import Feedback
from app.schemas.misc import FeedbackRequest, FeedbackResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["Feedback"])

RATING_LABELS = {5: "Excellent!", 4: "Great!", 3: "Good!", 2: "Fair", 1: "Poor"}


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    payload: FeedbackRequest,
    user=Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Store a star rating with optional comments. Works signed in or anonymously."""
    feedback = Feedback(
        user_id=user.id if user else None,
        rating=payload.rating,
        email=payload.email or (user.email if user else None),
        message=payload.message,
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)

    logger.info(f"Feedback received: feedback_id={feedback.id}, rating={feedback.rating}")
    return {
        "id": feedback.id,
        "rating": feedback.rating,
        "label": RATING_LABELS[feedback.rating],
        "message": "Thank you for your feedback!",
    }
