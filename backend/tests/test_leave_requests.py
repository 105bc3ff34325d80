"""Tests for leave requests: filing, approval with balance debit, rejection,
cancellation, listing scopes, and the per-user balance view.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from helpers import add_benefit_type, add_profile, make_auth, make_headers, set_balance
from sqlalchemy import event, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import col

from workforce.exceptions import InvalidStateError, NotFoundError, ValidationError
from workforce.models.benefit import BenefitBalance
from workforce.models.enums import LeaveRequestStatus, Role
from workforce.models.leave_request import LeaveRequest
from workforce.schemas.leave_request import CreateLeaveRequestPayload, LeaveDecisionPayload, LeaveRequestFilters
from workforce.services import leave_request as leave_service

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
    from sqlalchemy.orm import Session

TENANT_ID = uuid.uuid4()
EMPLOYEE = make_auth(TENANT_ID)
MANAGER = make_auth(TENANT_ID, role=Role.MANAGER)
ADMIN = make_auth(TENANT_ID, role=Role.ADMIN)
LEAVE_URL = f"/tenants/{TENANT_ID}/leave-requests"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _pto(session: AsyncSession, balance: str | None = "10", **kwargs: object) -> uuid.UUID:
    """Create a PTO benefit type, optionally seeding EMPLOYEE's balance. Returns its id."""
    benefit_type = await add_benefit_type(session, TENANT_ID, **kwargs)  # type: ignore[arg-type]
    if balance is not None:
        await set_balance(session, TENANT_ID, EMPLOYEE.user_id, benefit_type, Decimal(balance))
    return benefit_type.id


def _payload(
    benefit_type_id: uuid.UUID,
    amount: str,
    start: date = date(2025, 7, 1),
    end: date = date(2025, 7, 3),
) -> CreateLeaveRequestPayload:
    return CreateLeaveRequestPayload(
        benefit_type_id=benefit_type_id, start_date=start, end_date=end, amount=Decimal(amount)
    )


async def _current_balance(session: AsyncSession, user_id: uuid.UUID, benefit_type_id: uuid.UUID) -> Decimal:
    result = await session.execute(
        select(col(BenefitBalance.current_balance)).where(
            col(BenefitBalance.user_id) == user_id,
            col(BenefitBalance.benefit_type_id) == benefit_type_id,
        )
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_is_pending_and_leaves_balance(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    response = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "3"))

    assert response.status == LeaveRequestStatus.PENDING
    assert response.user_id == EMPLOYEE.user_id
    assert response.approver_id is None
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(10)


async def test_create_with_unknown_benefit_type(db_session: AsyncSession) -> None:
    with pytest.raises(ValidationError, match="Invalid benefit type"):
        await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(uuid.uuid4(), "1"))


async def test_create_with_other_tenants_benefit_type(db_session: AsyncSession) -> None:
    foreign = await add_benefit_type(db_session, uuid.uuid4())
    foreign_id = foreign.id
    with pytest.raises(ValidationError, match="Invalid benefit type"):
        await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(foreign_id, "1"))


async def test_create_without_balance_row_starts_from_zero(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance=None)
    with pytest.raises(ValidationError, match="Available: 0, Requested: 1"):
        await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))


async def test_create_over_balance_allowed_when_negative_permitted(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="1", allow_negative_balance=True)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "4"))
    approved = await leave_service.approve_leave_request(db_session, MANAGER, created.id)

    assert approved.status == LeaveRequestStatus.APPROVED
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(-3)


# ---------------------------------------------------------------------------
# Approve / reject / cancel
# ---------------------------------------------------------------------------


async def test_approve_debits_and_blocks_later_overdraw(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="10")
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "3"))
    approved = await leave_service.approve_leave_request(
        db_session, MANAGER, created.id, LeaveDecisionPayload(note="Enjoy")
    )

    assert approved.status == LeaveRequestStatus.APPROVED
    assert approved.approver_id == MANAGER.user_id
    assert approved.approved_at is not None
    assert approved.note == "Enjoy"
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(7)

    with pytest.raises(ValidationError) as excinfo:
        await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "10"))
    assert str(excinfo.value) == "Insufficient balance. Available: 7, Requested: 10"


async def test_approve_bumps_balance_version(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))
    await leave_service.approve_leave_request(db_session, MANAGER, created.id)

    result = await db_session.execute(select(col(BenefitBalance.version)))
    assert result.scalar_one() == 2


async def test_second_approval_fails_when_pending_requests_overdraw(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="5")
    first = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "4"))
    second = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "4"))

    await leave_service.approve_leave_request(db_session, MANAGER, first.id)
    with pytest.raises(ValidationError, match="Insufficient balance. Available: 1, Requested: 4"):
        await leave_service.approve_leave_request(db_session, MANAGER, second.id)

    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(1)
    still_pending = await leave_service.get_leave_request(db_session, TENANT_ID, second.id)
    assert still_pending.status == LeaveRequestStatus.PENDING


async def test_approve_keeps_note_when_none_given(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(
        db_session,
        EMPLOYEE,
        CreateLeaveRequestPayload(
            benefit_type_id=pto,
            start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 1),
            amount=Decimal(1),
            note="Dentist",
        ),
    )
    approved = await leave_service.approve_leave_request(db_session, MANAGER, created.id)
    assert approved.note == "Dentist"


async def test_approve_non_pending_is_invalid_state(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2"))
    await leave_service.approve_leave_request(db_session, MANAGER, created.id)

    with pytest.raises(InvalidStateError, match="Cannot approve request with status: approved"):
        await leave_service.approve_leave_request(db_session, MANAGER, created.id)
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(8)


async def test_approve_debits_balance_changed_since_create(engine: AsyncEngine, db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="10")
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "3"))

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as other:
        await other.execute(
            update(BenefitBalance)
            .where(col(BenefitBalance.user_id) == EMPLOYEE.user_id)
            .values(current_balance=Decimal(8))
        )
        await other.commit()

    await leave_service.approve_leave_request(db_session, MANAGER, created.id)
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(5)


async def test_store_failure_during_approval_changes_nothing(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="10")
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "3"))
    request_id = created.id

    def _fail_on_approval(session: Session, _flush_context: object, _instances: object) -> None:
        if any(isinstance(obj, LeaveRequest) and obj.status == "approved" for obj in session.dirty):
            raise OperationalError("UPDATE leave_request", {}, Exception("connection lost"))

    event.listen(db_session.sync_session, "before_flush", _fail_on_approval)
    try:
        with pytest.raises(SQLAlchemyError):
            await leave_service.approve_leave_request(db_session, MANAGER, request_id)
    finally:
        event.remove(db_session.sync_session, "before_flush", _fail_on_approval)

    status = await db_session.execute(select(col(LeaveRequest.status)).where(col(LeaveRequest.id) == request_id))
    assert status.scalar_one() == "pending"
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(10)
    version = await db_session.execute(select(col(BenefitBalance.version)))
    assert version.scalar_one() == 1


async def test_reject_leaves_balance_unchanged(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2"))
    rejected = await leave_service.reject_leave_request(
        db_session, MANAGER, created.id, LeaveDecisionPayload(note="Busy week")
    )

    assert rejected.status == LeaveRequestStatus.REJECTED
    assert rejected.approver_id == MANAGER.user_id
    assert rejected.note == "Busy week"
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(10)


async def test_cancel_own_pending_request(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2"))
    cancelled = await leave_service.cancel_leave_request(db_session, EMPLOYEE, created.id)

    assert cancelled.status == LeaveRequestStatus.CANCELLED
    assert await _current_balance(db_session, EMPLOYEE.user_id, pto) == Decimal(10)


async def test_cancel_by_someone_else_is_rejected(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2"))
    with pytest.raises(ValidationError, match="only cancel your own"):
        await leave_service.cancel_leave_request(db_session, ADMIN, created.id)


async def test_cancel_after_approval_is_invalid_state(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2"))
    await leave_service.approve_leave_request(db_session, MANAGER, created.id)

    with pytest.raises(InvalidStateError, match="Cannot cancel request with status: approved"):
        await leave_service.cancel_leave_request(db_session, EMPLOYEE, created.id)


async def test_unknown_request_is_not_found(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await leave_service.approve_leave_request(db_session, MANAGER, uuid.uuid4())


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


async def test_list_mine_and_team(db_session: AsyncSession) -> None:
    benefit_type = await add_benefit_type(db_session, TENANT_ID)
    pto = benefit_type.id
    other = make_auth(TENANT_ID)
    await set_balance(db_session, TENANT_ID, EMPLOYEE.user_id, benefit_type, Decimal(10))
    await set_balance(db_session, TENANT_ID, other.user_id, benefit_type, Decimal(10))
    await add_profile(db_session, TENANT_ID, EMPLOYEE.user_id, manager_user_id=MANAGER.user_id)

    mine = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))
    await leave_service.create_leave_request(db_session, other, _payload(pto, "1"))

    everyone = await leave_service.list_leave_requests(db_session, EMPLOYEE, LeaveRequestFilters())
    assert everyone.total == 2

    own = await leave_service.list_leave_requests(db_session, EMPLOYEE, LeaveRequestFilters(mine=True))
    assert [r.id for r in own.items] == [mine.id]

    team = await leave_service.list_leave_requests(db_session, MANAGER, LeaveRequestFilters(team=True, mine=True))
    assert [r.id for r in team.items] == [mine.id]

    nobody = await leave_service.list_leave_requests(db_session, other, LeaveRequestFilters(team=True))
    assert nobody.items == []
    assert nobody.total == 0


async def test_list_matches_overlapping_date_range(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="20")
    july = await leave_service.create_leave_request(
        db_session, EMPLOYEE, _payload(pto, "3", date(2025, 7, 1), date(2025, 7, 3))
    )
    await leave_service.create_leave_request(
        db_session, EMPLOYEE, _payload(pto, "2", date(2025, 8, 11), date(2025, 8, 12))
    )

    result = await leave_service.list_leave_requests(
        db_session, EMPLOYEE, LeaveRequestFilters(date_from=date(2025, 7, 3), date_to=date(2025, 7, 31))
    )
    assert [r.id for r in result.items] == [july.id]


async def test_list_by_status(db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    first = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))
    await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))
    await leave_service.cancel_leave_request(db_session, EMPLOYEE, first.id)

    result = await leave_service.list_leave_requests(
        db_session, EMPLOYEE, LeaveRequestFilters(status=LeaveRequestStatus.CANCELLED)
    )
    assert [r.id for r in result.items] == [first.id]



# ---------------------------------------------------------------------------
# Balances view
# ---------------------------------------------------------------------------


async def test_balances_report_used_amount(db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="20", annual_amount=Decimal(20))
    created = await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "2.5"))
    await leave_service.approve_leave_request(db_session, MANAGER, created.id)

    balances = await leave_service.get_user_benefit_balances(db_session, TENANT_ID, EMPLOYEE.user_id)
    assert balances.total == 1
    item = balances.items[0]
    assert item.benefit_type_key == "pto"
    assert item.current_balance == Decimal("17.5")
    assert item.total_amount == "20.00"
    assert item.used_amount == "2.50"


# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------


async def test_http_request_and_approve(async_client: AsyncClient, db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="5")
    resp = await async_client.post(
        LEAVE_URL,
        json={"benefit_type_id": str(pto), "start_date": "2025-07-01", "end_date": "2025-07-02", "amount": "2"},
        headers=make_headers(EMPLOYEE),
    )
    assert resp.status_code == 201
    request_id = resp.json()["id"]

    resp = await async_client.post(f"{LEAVE_URL}/{request_id}/approve", headers=make_headers(EMPLOYEE))
    assert resp.status_code == 403

    resp = await async_client.post(f"{LEAVE_URL}/{request_id}/approve", headers=make_headers(MANAGER))
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    resp = await async_client.get(
        f"/tenants/{TENANT_ID}/users/{EMPLOYEE.user_id}/balances", headers=make_headers(EMPLOYEE)
    )
    assert resp.status_code == 200
    assert resp.json()["items"][0]["current_balance"] in ("3", "3.00")


async def test_http_insufficient_balance_is_400(async_client: AsyncClient, db_session: AsyncSession) -> None:
    pto = await _pto(db_session, balance="1")
    resp = await async_client.post(
        LEAVE_URL,
        json={"benefit_type_id": str(pto), "start_date": "2025-07-01", "end_date": "2025-07-02", "amount": "2"},
        headers=make_headers(EMPLOYEE),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient balance. Available: 1, Requested: 2"


async def test_http_end_before_start_is_422(async_client: AsyncClient, db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    resp = await async_client.post(
        LEAVE_URL,
        json={"benefit_type_id": str(pto), "start_date": "2025-07-02", "end_date": "2025-07-01", "amount": "1"},
        headers=make_headers(EMPLOYEE),
    )
    assert resp.status_code == 422


async def test_http_list_uses_from_and_to(async_client: AsyncClient, db_session: AsyncSession) -> None:
    pto = await _pto(db_session)
    await leave_service.create_leave_request(db_session, EMPLOYEE, _payload(pto, "1"))

    resp = await async_client.get(
        LEAVE_URL, params={"mine": "true", "from": "2025-08-01", "to": "2025-08-31"}, headers=make_headers(EMPLOYEE)
    )
    assert resp.status_code == 200
    assert resp.json()["total"] == 0


async def test_http_balances_of_other_user_forbidden(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        f"/tenants/{TENANT_ID}/users/{uuid.uuid4()}/balances", headers=make_headers(EMPLOYEE)
    )
    assert resp.status_code == 403
