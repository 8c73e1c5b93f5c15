from types import SimpleNamespace

import pytest

from app import config
from app.logic.exceptions import BookingAlreadyDecidedError
from app.logic.permissions import has_permission
from app.logic.workflow import (
    BookingType,
    ApprovalStatus,
    Decision,
    approval_chain,
    initial_stage_values,
    required_stages,
    current_stage,
    plan_transition,
    HR_STAGE,
    ACCOMMODATION_MD_STAGE,
    CLUB_MANAGER_STAGE,
    FACILITY_MD_STAGE,
    KITCHEN_STAGE,
)


def accommodation(**stages):
    values = {"id": 1, "status": "pending", "department_approval": None, "hr_approval": None, "md_approval": None}
    values.update(stages)
    return SimpleNamespace(**values)


def test_default_chains():
    assert [s.field for s in approval_chain(BookingType.ACCOMMODATION)] == ["hr_approval"]
    assert [s.field for s in approval_chain(BookingType.FACILITY)] == ["club_manager_approval"]
    assert [s.field for s in approval_chain(BookingType.FOOD)] == ["admin_approval"]


def test_optional_stages_follow_configuration(monkeypatch):
    monkeypatch.setattr(config, "ACCOMMODATION_DEPARTMENT_STAGE", True)
    monkeypatch.setattr(config, "ACCOMMODATION_MD_STAGE", True)
    monkeypatch.setattr(config, "FACILITY_MD_STAGE", True)
    assert [s.field for s in approval_chain("accommodation")] == ["department_approval", "hr_approval", "md_approval"]
    assert [s.field for s in approval_chain("facility")] == ["club_manager_approval", "md_approval"]


def test_initial_stage_values_leave_unused_stages_null(monkeypatch):
    monkeypatch.setattr(config, "ACCOMMODATION_MD_STAGE", True)
    assert initial_stage_values(BookingType.ACCOMMODATION) == {
        "department_approval": None,
        "hr_approval": "pending",
        "md_approval": "pending",
    }


def test_required_stages_come_from_the_record():
    record = accommodation(hr_approval="approved", md_approval="pending")
    assert [s.field for s in required_stages(BookingType.ACCOMMODATION, record)] == ["hr_approval", "md_approval"]


def test_current_stage_is_first_pending_stage():
    assert current_stage(BookingType.ACCOMMODATION, accommodation(hr_approval="pending")).field == "hr_approval"
    record = accommodation(hr_approval="approved", md_approval="pending")
    assert current_stage(BookingType.ACCOMMODATION, record).field == "md_approval"


def test_current_stage_is_none_once_decided():
    assert current_stage(BookingType.ACCOMMODATION, accommodation(status="approved", hr_approval="approved")) is None
    record = accommodation(hr_approval="declined", md_approval="pending")
    assert current_stage(BookingType.ACCOMMODATION, record) is None


def test_approving_only_stage_is_final():
    transition = plan_transition(BookingType.ACCOMMODATION, accommodation(hr_approval="pending"), Decision.APPROVE)
    assert transition.is_final
    assert transition.final_status == ApprovalStatus.APPROVED
    assert transition.updates == {"hr_approval": "approved", "status": "approved"}


def test_approving_first_of_two_stages_is_not_final():
    record = accommodation(hr_approval="pending", md_approval="pending")
    transition = plan_transition(BookingType.ACCOMMODATION, record, "approve")
    assert not transition.is_final
    assert transition.final_status is None
    assert transition.updates == {"hr_approval": "approved"}


def test_declining_any_stage_is_final():
    record = accommodation(hr_approval="pending", md_approval="pending")
    transition = plan_transition(BookingType.ACCOMMODATION, record, Decision.DECLINE)
    assert transition.is_final
    assert transition.updates == {"hr_approval": "declined", "status": "declined"}


def test_decided_booking_cannot_transition():
    record = accommodation(status="declined", hr_approval="declined")
    with pytest.raises(BookingAlreadyDecidedError):
        plan_transition(BookingType.ACCOMMODATION, record, Decision.APPROVE)


@pytest.mark.parametrize("stage, role", [
    (HR_STAGE, "hr_office"),
    (ACCOMMODATION_MD_STAGE, "managing_director"),
    (CLUB_MANAGER_STAGE, "club_house_manager"),
    (FACILITY_MD_STAGE, "managing_director"),
    (KITCHEN_STAGE, "club_house_manager"),
])
def test_each_stage_is_decidable_by_its_role(stage, role):
    assert has_permission([role], stage.permission)
