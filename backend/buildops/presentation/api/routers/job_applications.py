"""
Job Application Routes
"""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from buildops.presentation.api.dependencies import ApplicationService, CorrelationId, UserId
from buildops.presentation.api.responses import result_response
from buildops.presentation.api.schemas import (
    ApproveApplicationRequest,
    RejectApplicationRequest,
    ScheduleInterviewRequest,
    SubmitJobApplicationRequest,
    WithdrawApplicationRequest,
)

router = APIRouter(prefix="/api/job-applications", tags=["job-applications"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Submit Job Application")
async def submit_job_application(
    body: SubmitJobApplicationRequest,
    applications: ApplicationService,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.submit_application(
        applicant_name=body.applicant_name,
        email=body.email,
        phone=body.phone,
        experience_level=body.experience_level,
        experience_description=body.experience_description,
        resume_file=body.resume.to_uploaded_file() if body.resume else None,
        request_metadata=body.metadata,
        correlation_id=correlation_id,
    )
    return result_response(result, status.HTTP_201_CREATED)


@router.get("", summary="List Job Applications")
async def list_job_applications(
    applications: ApplicationService,
    correlation_id: CorrelationId,
    status_filter: str | None = Query(None, alias="status"),
    experience_level: str | None = None,
    applicant_name: str | None = None,
    email: str | None = None,
    has_resume: bool | None = None,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "submitted_at",
    sort_order: str = "desc",
) -> JSONResponse:
    result = await applications.get_application_list(
        correlation_id=correlation_id,
        status=status_filter,
        experience_level=experience_level,
        applicant_name=applicant_name,
        email=email,
        has_resume=has_resume,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return result_response(result)


@router.get("/{application_id}", summary="Get Job Application")
async def get_job_application(
    application_id: str,
    applications: ApplicationService,
    correlation_id: CorrelationId,
    include_timeline: bool = True,
) -> JSONResponse:
    result = await applications.get_application_details(
        application_id, include_timeline=include_timeline, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/{application_id}/review", summary="Move Application To Review")
async def move_application_to_review(
    application_id: str,
    applications: ApplicationService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.move_to_review(
        application_id, user_id=user_id, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/{application_id}/interview", summary="Schedule Interview")
async def schedule_interview(
    application_id: str,
    body: ScheduleInterviewRequest,
    applications: ApplicationService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.schedule_interview(
        application_id, body.interview_date, user_id=user_id, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/{application_id}/approve", summary="Approve Application")
async def approve_application(
    application_id: str,
    body: ApproveApplicationRequest,
    applications: ApplicationService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.approve_application(
        application_id, notes=body.notes, user_id=user_id, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/{application_id}/reject", summary="Reject Application")
async def reject_application(
    application_id: str,
    body: RejectApplicationRequest,
    applications: ApplicationService,
    user_id: UserId,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.reject_application(
        application_id, body.reason, user_id=user_id, correlation_id=correlation_id
    )
    return result_response(result)


@router.post("/{application_id}/withdraw", summary="Withdraw Application")
async def withdraw_application(
    application_id: str,
    body: WithdrawApplicationRequest,
    applications: ApplicationService,
    correlation_id: CorrelationId,
) -> JSONResponse:
    result = await applications.withdraw_application(
        application_id, reason=body.reason, correlation_id=correlation_id
    )
    return result_response(result)
