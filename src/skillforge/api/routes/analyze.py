"""Content analysis routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from skillforge.analysis.frameworks import get_framework
from skillforge.api.dependencies import get_analysis_service
from skillforge.api.schemas import AnalyzeRequest, APIResponse
from skillforge.constants import ContentType
from skillforge.services.analysis_service import ContentAnalysisService

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post("/analyze")
async def analyze_content(
    body: AnalyzeRequest,
    service: ContentAnalysisService = Depends(get_analysis_service),
) -> APIResponse:
    """Analyze content and return the structured extraction."""
    result = await service.analyze(body.content, body.content_type)
    report = service.assess(result)
    return APIResponse(
        success=True,
        data={
            **result.to_dict(),
            "quality": {
                "isValid": report.is_valid,
                "issues": report.issues,
                "requiresReview": report.requires_review,
            },
        },
    )


@router.get("/analyses/{analysis_id}")
async def get_analysis(
    analysis_id: str,
    service: ContentAnalysisService = Depends(get_analysis_service),
) -> APIResponse:
    """Reload a stored analysis."""
    result = await service.get_analysis(analysis_id)
    return APIResponse(success=True, data=result.to_dict())


@router.get("/content-types")
async def list_content_types() -> APIResponse:
    """Content types with their extraction sections."""
    return APIResponse(
        success=True,
        data=[
            {
                "contentType": str(ct),
                "sections": sorted(get_framework(ct)),
            }
            for ct in ContentType
        ],
    )
