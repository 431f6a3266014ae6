# backend/rentdesk/routers/applications.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..domain.errors import NotAuthorized
from ..schemas import ApplicationEnvelope, ApplicationOut, ApplicationStatusUpdate, ApprovalResultOut, ErrorOut
from ..services.approval_workflow import ApprovalWorkflow
from ..services.ownership import must_get_application

router = APIRouter(prefix="/applications", tags=["applications"])

# WorkflowError bodies, see main._workflow_error_handler
_READ_ERRORS = {code: {"model": ErrorOut} for code in (401, 403, 404)}
_REVIEW_ERRORS = {code: {"model": ErrorOut} for code in (400, 401, 403, 404, 409, 500)}


def get_workflow() -> ApprovalWorkflow:
    return ApprovalWorkflow()


@router.get("/{application_id}", response_model=ApplicationEnvelope, responses=_READ_ERRORS)
def get_application(application_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    row = must_get_application(db, application_id=application_id)
    prop = row.property
    visible_to = {row.tenant_id, prop.landlord_id, prop.agent_id}
    if p.user_id not in visible_to and p.role != "admin":
        raise NotAuthorized("Not authorized to view this application")
    return {"application": ApplicationOut.model_validate(row)}


def _review(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session,
    p: Principal,
    workflow: ApprovalWorkflow,
) -> ApprovalResultOut:
    outcome = workflow.run(
        db,
        application_id=application_id,
        approver_id=p.user_id,
        approver_role=p.role,
        requested_status=payload.status,
    )
    db.refresh(outcome.application)
    return ApprovalResultOut(
        application=ApplicationOut.model_validate(outcome.application),
        previous_status=outcome.previous_status,
        lease_id=outcome.lease.id if outcome.lease is not None else None,
        payment_id=outcome.escrow.payment_id if outcome.escrow is not None else None,
        payment_url=outcome.escrow.payment_url if outcome.escrow is not None else None,
    )


@router.patch("/{application_id}", response_model=ApprovalResultOut, responses=_REVIEW_ERRORS)
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return _review(application_id, payload, db, p, workflow)


@router.post("/{application_id}/approve", response_model=ApprovalResultOut, responses=_REVIEW_ERRORS)
def approve_application(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return _review(application_id, payload, db, p, workflow)
