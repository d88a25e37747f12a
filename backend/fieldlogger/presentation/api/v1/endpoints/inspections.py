"""Inspection endpoints — offline creation, local listing and the live merged view."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from fieldlogger.application.schemas import (
    InspectionCreate,
    InspectionSchema,
    MergedViewResponse,
    ValidationErrorResponse,
)
from fieldlogger.application.services import InspectionFactory, LiveMergeView, SSEManager
from fieldlogger.domain.exceptions import ValidationError
from fieldlogger.infrastructure.database import SQLAlchemyInspectionStore
from fieldlogger.infrastructure.dependencies import (
    get_inspection_factory,
    get_inspection_store,
    get_live_view,
    get_sse_manager,
    merged_view_payload,
)

router = APIRouter(prefix="/inspections", tags=["Inspections"])


@router.post("", response_model=InspectionSchema, status_code=status.HTTP_201_CREATED)
async def create_inspection(
    data: InspectionCreate,
    factory: InspectionFactory = Depends(get_inspection_factory),
) -> InspectionSchema:
    """Record an inspection locally. Succeeds offline; sync happens in the background."""
    result = await factory.create(data.location, data.technician, data.findings)
    if isinstance(result, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=ValidationErrorResponse(field=result.field, message=result.message).model_dump(),
        )
    return InspectionSchema.from_entity(result)


@router.get("", response_model=list[InspectionSchema])
async def list_inspections(
    store: SQLAlchemyInspectionStore = Depends(get_inspection_store),
) -> list[InspectionSchema]:
    """All locally stored inspections, newest first."""
    return [InspectionSchema.from_entity(item) for item in await store.all()]


@router.get("/live", response_model=MergedViewResponse)
async def live_inspections(
    view: LiveMergeView = Depends(get_live_view),
) -> dict:
    """Current merged view: authoritative stream plus local pending records."""
    return merged_view_payload(view.current)


@router.get("/events/stream")
async def live_inspections_stream(
    view: LiveMergeView = Depends(get_live_view),
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint — an ``initial`` frame with the current view, then ``update``
    frames on every re-render."""
    return StreamingResponse(
        sse.subscribe(initial=merged_view_payload(view.current)),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/{inspection_id}", response_model=InspectionSchema)
async def get_inspection(
    inspection_id: str,
    store: SQLAlchemyInspectionStore = Depends(get_inspection_store),
) -> InspectionSchema:
    inspection = await store.get(inspection_id)
    if inspection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Inspection with id '{inspection_id}' not found",
        )
    return InspectionSchema.from_entity(inspection)
