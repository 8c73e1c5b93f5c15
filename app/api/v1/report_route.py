from fastapi import APIRouter, Depends, HTTPException, status as http_status
from sqlalchemy.orm import Session

from app.api.dependencies import get_db, get_current_user
from app.database.models.users import Profile
from app.database.services.report_service import ReportService
from app.ReqResModels.reportmodels import BookingReportSummary
from app.logic.exceptions import PermissionDenied, DatabaseError

router = APIRouter(prefix="/reports", tags=["reports"])

@router.get(
    "/summary",
    response_model=BookingReportSummary,
    summary="Booking summary",
    description="Booking counts per type and status, and accounts awaiting approval"
)
def get_summary(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ReportService.get_summary(db, current_user)
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
