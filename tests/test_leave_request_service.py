from datetime import date, timedelta

import pytest

from conftest import FAR_FUTURE, principal_for, reload
from leaveflow.constants.constants import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, LeaveStatus, RoleName
from leaveflow.core.exceptions import (
    Forbidden,
    InsufficientBalance,
    InvalidRange,
    InvalidTransition,
    NotFound,
    Overlap,
)
from leaveflow.services.LeaveRequestService import LeaveRequestService
from leaveflow.services.UserManagementService import UserManagementService
from leaveflow.utils.dates import inclusive_days


def day(offset):
    return FAR_FUTURE + timedelta(days=offset)


@pytest.fixture
def service(db_session):
    return LeaveRequestService(db_session)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2030, 1, 1), date(2030, 1, 1), 1),
        (date(2030, 1, 1), date(2030, 1, 5), 5),
        (date(2030, 2, 27), date(2030, 3, 1), 3),
        (date(2031, 12, 31), date(2032, 1, 1), 2),
    ],
)
def test_inclusive_days(start, end, expected):
    assert inclusive_days(start, end) == expected


def test_terminal_statuses_allow_no_transitions():
    for status in TERMINAL_STATUSES:
        assert ALLOWED_TRANSITIONS[status] == set()
    assert set(ALLOWED_TRANSITIONS) == set(LeaveStatus)


# ------------------------------
# submit
# ------------------------------
def test_submit_creates_pending_request_without_touching_balance(service, db_session, employee):
    leave = service.submit(employee.user_id, day(0), day(4), reason="Holiday")

    assert leave.status == LeaveStatus.pending
    assert leave.days == 5
    assert leave.reason == "Holiday"
    assert reload(db_session, employee).annual_leave_balance == 25


def test_submit_rejects_reversed_range(service, employee):
    with pytest.raises(InvalidRange):
        service.submit(employee.user_id, day(3), day(1))


@pytest.mark.parametrize("start,end", [(0, 0), (-2, 0), (4, 6), (-5, 10), (2, 3)])
def test_submit_rejects_overlap_with_active_request(service, employee, start, end):
    service.submit(employee.user_id, day(0), day(4))

    with pytest.raises(Overlap):
        service.submit(employee.user_id, day(start), day(end))


def test_submit_rejects_overlap_with_approved_request(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(1))
    service.approve(leave.request_id, principal_for(manager))

    with pytest.raises(Overlap):
        service.submit(employee.user_id, day(1), day(2))


def test_submit_allows_adjacent_ranges(service, employee):
    service.submit(employee.user_id, day(0), day(4))
    leave = service.submit(employee.user_id, day(5), day(6))
    assert leave.status == LeaveStatus.pending


def test_submit_ignores_terminal_requests_when_checking_overlap(service, team):
    employee, manager = team
    rejected = service.submit(employee.user_id, day(0), day(2))
    service.reject(rejected.request_id, principal_for(manager))
    cancelled = service.submit(employee.user_id, day(0), day(2))
    service.cancel(cancelled.request_id, employee.user_id)

    leave = service.submit(employee.user_id, day(0), day(2))
    assert leave.status == LeaveStatus.pending


def test_overlap_is_per_requester(service, make_user, employee):
    colleague = make_user()
    service.submit(employee.user_id, day(0), day(4))
    leave = service.submit(colleague.user_id, day(0), day(4))
    assert leave.status == LeaveStatus.pending


def test_submit_rejects_more_days_than_balance(service, make_user):
    user = make_user(balance=2)
    with pytest.raises(InsufficientBalance):
        service.submit(user.user_id, day(0), day(2))


def test_submit_for_unknown_user(service):
    with pytest.raises(NotFound):
        service.submit(9999, day(0), day(0))


# ------------------------------
# approve / reject
# ------------------------------
def test_approve_then_cancel_restores_balance(service, db_session, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(2))

    service.approve(leave.request_id, principal_for(manager))
    assert reload(db_session, employee).annual_leave_balance == 22

    service.cancel(leave.request_id, employee.user_id)
    assert reload(db_session, employee).annual_leave_balance == 25
    assert reload(db_session, leave).status == LeaveStatus.cancelled


def test_request_cannot_be_approved_twice(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(0))
    service.approve(leave.request_id, principal_for(manager))

    with pytest.raises(InvalidTransition):
        service.approve(leave.request_id, principal_for(manager))


def test_approve_checks_balance_at_approval_time(service, db_session, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(4))
    UserManagementService(db_session).update_balance(employee.user_id, 3)

    with pytest.raises(InsufficientBalance):
        service.approve(leave.request_id, principal_for(manager))
    assert reload(db_session, leave).status == LeaveStatus.pending
    assert reload(db_session, employee).annual_leave_balance == 3


def test_admin_can_approve_any_request(service, db_session, employee, admin):
    leave = service.submit(employee.user_id, day(0), day(0))

    service.approve(leave.request_id, principal_for(admin))

    assert reload(db_session, leave).status == LeaveStatus.approved
    assert reload(db_session, employee).annual_leave_balance == 24


def test_manager_cannot_approve_outside_team(service, make_user, employee, manager):
    other_manager = make_user(RoleName.manager)
    UserManagementService(service.db).assign_manager(employee.user_id, other_manager.user_id)
    leave = service.submit(employee.user_id, day(0), day(0))

    with pytest.raises(Forbidden):
        service.approve(leave.request_id, principal_for(manager))
    with pytest.raises(Forbidden):
        service.reject(leave.request_id, principal_for(manager))


def test_employee_cannot_review(service, make_user, employee):
    leave = service.submit(employee.user_id, day(0), day(0))
    with pytest.raises(Forbidden):
        service.approve(leave.request_id, principal_for(make_user()))


def test_approve_unknown_request(service, admin):
    with pytest.raises(NotFound):
        service.approve(12345, principal_for(admin))


def test_reject_stores_reason(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(1))

    rejected = service.reject(leave.request_id, principal_for(manager), reason="Busy period")

    assert rejected.status == LeaveStatus.rejected
    assert rejected.reason == "Busy period"


def test_approved_request_cannot_be_rejected(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(1))
    service.approve(leave.request_id, principal_for(manager))

    with pytest.raises(InvalidTransition):
        service.reject(leave.request_id, principal_for(manager))


def test_rejected_request_cannot_be_approved(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(1))
    service.reject(leave.request_id, principal_for(manager))

    with pytest.raises(InvalidTransition):
        service.approve(leave.request_id, principal_for(manager))


# ------------------------------
# cancel
# ------------------------------
def test_cancel_pending_keeps_balance(service, db_session, employee):
    leave = service.submit(employee.user_id, day(0), day(1))

    service.cancel(leave.request_id, employee.user_id, reason="Plans changed")

    assert reload(db_session, leave).status == LeaveStatus.cancelled
    assert leave.reason == "Plans changed"
    assert reload(db_session, employee).annual_leave_balance == 25


def test_cancel_someone_elses_request(service, make_user, employee):
    leave = service.submit(employee.user_id, day(0), day(1))
    with pytest.raises(Forbidden):
        service.cancel(leave.request_id, make_user().user_id)


def test_cancelled_request_is_terminal(service, employee):
    leave = service.submit(employee.user_id, day(0), day(1))
    service.cancel(leave.request_id, employee.user_id)

    with pytest.raises(InvalidTransition):
        service.cancel(leave.request_id, employee.user_id)


def test_rejected_request_cannot_be_cancelled(service, team):
    employee, manager = team
    leave = service.submit(employee.user_id, day(0), day(1))
    service.reject(leave.request_id, principal_for(manager))

    with pytest.raises(InvalidTransition):
        service.cancel(leave.request_id, employee.user_id)


# ------------------------------
# team membership
# ------------------------------
def test_reassignment_moves_employee_to_new_manager(service, db_session, make_user, team):
    employee, manager = team
    new_manager = make_user(RoleName.manager)
    UserManagementService(db_session).assign_manager(employee.user_id, new_manager.user_id)
    leave = service.submit(employee.user_id, day(0), day(0))

    with pytest.raises(Forbidden):
        service.approve(leave.request_id, principal_for(manager))
    service.approve(leave.request_id, principal_for(new_manager))


def test_future_assignment_is_not_active_yet(service, db_session, make_user, team):
    employee, manager = team
    new_manager = make_user(RoleName.manager)
    UserManagementService(db_session).assign_manager(
        employee.user_id, new_manager.user_id, start_date=date.today() + timedelta(days=10)
    )
    leave = service.submit(employee.user_id, day(0), day(0))

    with pytest.raises(Forbidden):
        service.approve(leave.request_id, principal_for(new_manager))
    service.approve(leave.request_id, principal_for(manager))


# ------------------------------
# list_for_caller
# ------------------------------
@pytest.fixture
def populated(service, db_session, make_user, team):
    employee, manager = team
    teammate = make_user()
    outsider = make_user()
    other_manager = make_user(RoleName.manager)
    admin_service = UserManagementService(db_session)
    admin_service.assign_manager(teammate.user_id, manager.user_id)
    admin_service.assign_manager(outsider.user_id, other_manager.user_id)

    requests = {
        "employee": service.submit(employee.user_id, day(0), day(1)),
        "teammate": service.submit(teammate.user_id, day(2), day(3)),
        "outsider": service.submit(outsider.user_id, day(4), day(5)),
    }
    service.approve(requests["teammate"].request_id, principal_for(manager))
    return {
        "employee": employee,
        "manager": manager,
        "teammate": teammate,
        "outsider": outsider,
        "other_manager": other_manager,
        "requests": requests,
    }


def _ids(leaves):
    return [leave.request_id for leave in leaves]


def test_employee_sees_only_own_requests(service, populated):
    leaves = service.list_for_caller(principal_for(populated["employee"]))
    assert _ids(leaves) == [populated["requests"]["employee"].request_id]


def test_employee_cannot_ask_for_someone_else(service, populated):
    with pytest.raises(Forbidden):
        service.list_for_caller(
            principal_for(populated["employee"]), employee_id=populated["teammate"].user_id
        )


def test_manager_sees_team_requests(service, populated):
    requests = populated["requests"]
    leaves = service.list_for_caller(principal_for(populated["manager"]))
    assert _ids(leaves) == [requests["employee"].request_id, requests["teammate"].request_id]


def test_manager_filters_by_status_and_employee(service, populated):
    manager = principal_for(populated["manager"])
    requests = populated["requests"]

    pending = service.list_for_caller(manager, status=LeaveStatus.pending)
    assert _ids(pending) == [requests["employee"].request_id]

    teammate_only = service.list_for_caller(manager, employee_id=populated["teammate"].user_id)
    assert _ids(teammate_only) == [requests["teammate"].request_id]


def test_manager_cannot_filter_outside_team(service, populated):
    with pytest.raises(Forbidden):
        service.list_for_caller(
            principal_for(populated["manager"]), employee_id=populated["outsider"].user_id
        )


def test_admin_sees_everything_and_filters(service, admin, populated):
    requests = populated["requests"]
    actor = principal_for(admin)

    assert len(service.list_for_caller(actor)) == 3
    assert _ids(service.list_for_caller(actor, manager_id=populated["other_manager"].user_id)) == [
        requests["outsider"].request_id
    ]
    assert _ids(service.list_for_caller(actor, employee_id=populated["teammate"].user_id)) == [
        requests["teammate"].request_id
    ]
    assert service.list_for_caller(
        actor, employee_id=populated["outsider"].user_id, manager_id=populated["manager"].user_id
    ) == []


# ------------------------------
# remaining_balance
# ------------------------------
def test_remaining_balance_scoping(service, populated, admin):
    employee = populated["employee"]
    manager = populated["manager"]
    outsider = populated["outsider"]

    assert service.remaining_balance(employee.user_id, principal_for(employee)).annual_leave_balance == 25
    with pytest.raises(Forbidden):
        service.remaining_balance(outsider.user_id, principal_for(employee))

    assert service.remaining_balance(populated["teammate"].user_id, principal_for(manager)).annual_leave_balance == 23
    assert service.remaining_balance(manager.user_id, principal_for(manager)).user_id == manager.user_id
    with pytest.raises(Forbidden):
        service.remaining_balance(outsider.user_id, principal_for(manager))

    assert service.remaining_balance(outsider.user_id, principal_for(admin)).user_id == outsider.user_id
    with pytest.raises(NotFound):
        service.remaining_balance(9999, principal_for(admin))


def test_managed_users(service, populated):
    team = service.managed_users(populated["manager"].user_id)
    assert {user.user_id for user in team} == {populated["employee"].user_id, populated["teammate"].user_id}
    assert service.managed_users(populated["employee"].user_id) == []
