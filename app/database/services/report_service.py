from sqlalchemy.orm import Session
from sqlalchemy import func

from app.database.models.users import Profile
from app.database.services.booking_service import BOOKING_MODELS
from app.database.services.user_service import role_names
from app.logic.permissions import ensure_permission
from app.logic.workflow import ApprovalStatus
from app.ReqResModels.reportmodels import BookingReportSummary
from app.logic.exceptions import DatabaseError


class ReportService:

    @staticmethod
    def get_summary(db: Session, actor: Profile) -> BookingReportSummary:
        """Booking counts per type and status"""
        ensure_permission(role_names(actor), "can_download_reports", "view reports")
        try:
            bookings = {}
            totals = {status.value: 0 for status in ApprovalStatus}
            for kind, model in BOOKING_MODELS.items():
                counts = {status.value: 0 for status in ApprovalStatus}
                rows = db.query(model.status, func.count(model.id)).group_by(model.status).all()
                for status, count in rows:
                    counts[status] = count
                    totals[status] = totals.get(status, 0) + count
                bookings[kind.value] = counts

            pending_accounts = db.query(Profile).filter(Profile.account_approved == False).count()

            return BookingReportSummary(bookings=bookings, totals=totals, pending_accounts=pending_accounts)

        except Exception as e:
            raise DatabaseError(f"Failed to build report summary: {str(e)}")
