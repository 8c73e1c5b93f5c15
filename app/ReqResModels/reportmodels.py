from pydantic import BaseModel
from typing import Dict

# Response Models
class BookingReportSummary(BaseModel):
    bookings: Dict[str, Dict[str, int]]
    totals: Dict[str, int]
    pending_accounts: int
