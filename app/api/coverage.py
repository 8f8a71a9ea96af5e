from fastapi import APIRouter

from app.api.deps import resolve_point
from app.models import CoverageVerdict
from app.schemas import CoverageCheckRequest, CoverageGroupRequest, CoverageGroupResponse
from app.services.coverage import check_coverage, find_covering_group

router = APIRouter(prefix="/coverage", tags=["coverage"])


@router.post("/check", response_model=CoverageVerdict)
def coverage_check(body: CoverageCheckRequest):
    return check_coverage(resolve_point(body), body.polygons, loading=body.loading, error=body.error)


@router.post("/group", response_model=CoverageGroupResponse)
def coverage_group(body: CoverageGroupRequest):
    group = find_covering_group(resolve_point(body), body.groups)
    if group is None:
        return CoverageGroupResponse(covered=False)
    return CoverageGroupResponse(covered=True, group_id=group.id, group_name=group.name)
