"""
HealthBuddy — Assessment Routes

Збережені результати завершених інтерв'ю.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_services, ServicesManager
from ..models import AssessmentListResponse

router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.get("", response_model=AssessmentListResponse)
def list_assessments(
    limit: int = Query(default=50, ge=1, le=500),
    services: ServicesManager = Depends(get_services)
) -> AssessmentListResponse:
    """Збережені знімки, новіші першими"""
    snapshots = services.assessment_store.list()
    return AssessmentListResponse(
        assessments=[s.to_dict() for s in snapshots[:limit]],
        total=len(snapshots),
    )


@router.get("/{assessment_id}")
def get_assessment(
    assessment_id: str,
    services: ServicesManager = Depends(get_services)
):
    """Один знімок за id"""
    snapshot = services.assessment_store.get(assessment_id)
    if snapshot is None:
        raise HTTPException(
            status_code=404,
            detail=f"Assessment '{assessment_id}' not found"
        )
    return snapshot.to_dict()
