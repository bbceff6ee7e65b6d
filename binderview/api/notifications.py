from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from binderview.api.deps import get_session
from binderview.services.notifications import Severity
from binderview.services.viewer import ViewerSession

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationResponse(BaseModel):
    message: str
    severity: Severity
    duration: float


@router.get("/current", response_model=NotificationResponse | None)
async def current_notification(
    session: Annotated[ViewerSession, Depends(get_session)],
) -> NotificationResponse | None:
    """
    The notification on display, or null once it has expired.

    Available before the catalog loads so the renderer can show load errors.
    """
    notification = session.notifications.current()
    if notification is None:
        return None
    return NotificationResponse(
        message=notification.message,
        severity=notification.severity,
        duration=notification.duration,
    )


@router.delete("/current", status_code=204)
async def dismiss_notification(
    session: Annotated[ViewerSession, Depends(get_session)],
) -> None:
    session.notifications.dismiss()
