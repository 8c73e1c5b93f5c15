"""Approval stages for each booking type.

A booking carries one field per approval stage plus an overall ``status``.
Stages are decided strictly in order: only the first stage that is still
``pending`` can be decided, approving the last pending stage approves the
booking, and declining any stage declines it.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum

from app import config
from app.logic.exceptions import BookingAlreadyDecidedError


class BookingType(str, Enum):
    ACCOMMODATION = "accommodation"
    FACILITY = "facility"
    FOOD = "food"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class Decision(str, Enum):
    APPROVE = "approve"
    DECLINE = "decline"

    @property
    def status(self) -> ApprovalStatus:
        return ApprovalStatus.APPROVED if self is Decision.APPROVE else ApprovalStatus.DECLINED


BOOKING_LABELS = {
    BookingType.ACCOMMODATION: "Accommodation",
    BookingType.FACILITY: "Facility",
    BookingType.FOOD: "Food order",
}


@dataclass(frozen=True)
class ApprovalStage:
    field: str
    permission: str
    label: str


DEPARTMENT_STAGE = ApprovalStage("department_approval", "can_approve_guest_rooms", "Department")
HR_STAGE = ApprovalStage("hr_approval", "can_approve_guest_rooms", "HR")
ACCOMMODATION_MD_STAGE = ApprovalStage("md_approval", "can_final_approve_guest_rooms", "Managing Director")
CLUB_MANAGER_STAGE = ApprovalStage("club_manager_approval", "can_manage_facilities", "Club House Manager")
FACILITY_MD_STAGE = ApprovalStage("md_approval", "can_final_approve_facilities", "Managing Director")
KITCHEN_STAGE = ApprovalStage("admin_approval", "can_update_menu", "Kitchen")

# Every stage a booking type can have, in decision order
ALL_STAGES: Dict[BookingType, List[ApprovalStage]] = {
    BookingType.ACCOMMODATION: [DEPARTMENT_STAGE, HR_STAGE, ACCOMMODATION_MD_STAGE],
    BookingType.FACILITY: [CLUB_MANAGER_STAGE, FACILITY_MD_STAGE],
    BookingType.FOOD: [KITCHEN_STAGE],
}


def approval_chain(booking_type: BookingType) -> List[ApprovalStage]:
    """Stages a newly submitted booking of this type must pass, per current configuration"""
    booking_type = BookingType(booking_type)
    if booking_type == BookingType.ACCOMMODATION:
        chain = []
        if config.ACCOMMODATION_DEPARTMENT_STAGE:
            chain.append(DEPARTMENT_STAGE)
        chain.append(HR_STAGE)
        if config.ACCOMMODATION_MD_STAGE:
            chain.append(ACCOMMODATION_MD_STAGE)
        return chain
    if booking_type == BookingType.FACILITY:
        chain = [CLUB_MANAGER_STAGE]
        if config.FACILITY_MD_STAGE:
            chain.append(FACILITY_MD_STAGE)
        return chain
    return [KITCHEN_STAGE]


def initial_stage_values(booking_type: BookingType) -> Dict[str, Optional[str]]:
    """Stage field values for a new booking: pending inside the chain, null outside it"""
    chain_fields = {stage.field for stage in approval_chain(booking_type)}
    return {
        stage.field: ApprovalStatus.PENDING.value if stage.field in chain_fields else None
        for stage in ALL_STAGES[BookingType(booking_type)]
    }


def required_stages(booking_type: BookingType, record) -> List[ApprovalStage]:
    """Stages this particular booking was created with.

    Read from the record rather than the configuration so a booking keeps
    the chain it was submitted under.
    """
    return [
        stage for stage in ALL_STAGES[BookingType(booking_type)]
        if getattr(record, stage.field, None) is not None
    ]


def current_stage(booking_type: BookingType, record) -> Optional[ApprovalStage]:
    if getattr(record, "status", None) != ApprovalStatus.PENDING.value:
        return None
    for stage in required_stages(booking_type, record):
        value = getattr(record, stage.field)
        if value == ApprovalStatus.PENDING.value:
            return stage
        if value == ApprovalStatus.DECLINED.value:
            return None
    return None


@dataclass
class Transition:
    stage: ApprovalStage
    decision: Decision
    updates: Dict[str, str]
    is_final: bool

    @property
    def final_status(self) -> Optional[ApprovalStatus]:
        return self.decision.status if self.is_final else None


def plan_transition(booking_type: BookingType, record, decision: Decision) -> Transition:
    """Work out the field changes a decision makes on the booking's current stage"""
    decision = Decision(decision)
    stage = current_stage(booking_type, record)
    if stage is None:
        raise BookingAlreadyDecidedError(
            f"{BOOKING_LABELS[BookingType(booking_type)]} booking {getattr(record, 'id', '')} is no longer pending"
        )

    remaining = [
        s for s in required_stages(booking_type, record)
        if s.field != stage.field and getattr(record, s.field) == ApprovalStatus.PENDING.value
    ]
    is_final = decision == Decision.DECLINE or not remaining

    updates = {stage.field: decision.status.value}
    if is_final:
        updates["status"] = decision.status.value
    return Transition(stage=stage, decision=decision, updates=updates, is_final=is_final)
