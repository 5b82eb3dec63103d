"""
API routes for measurement results, export, persistence and sizing
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..dependencies import get_measurement_store, get_session_manager
from ..exceptions import PersistenceError
from ..models.schemas import (
    MeasurementRecord, ResultsResponse, SaveMeasurementsRequest, SaveMeasurementsResponse,
    SizingRecommendation, Units
)
from ..services.export import build_export, export_filename
from ..services.persistence import SupabaseMeasurementStore
from ..services.recommendation import recommendation_service
from ..services.session_manager import SessionContext, SessionManager
from ..utils.units import convert
from .capture import require_session

logger = logging.getLogger(__name__)

router = APIRouter()


def require_results(session_id: str, manager: SessionManager) -> SessionContext:
    context = require_session(session_id, manager)
    if not context.has_results:
        raise HTTPException(status_code=404, detail="No measurements yet. Please complete all capture steps first.")
    return context


@router.get("/sessions/{session_id}/results", response_model=ResultsResponse)
async def get_results(
    session_id: str,
    units: Optional[Units] = Query(None, description="Express lengths in inches or cm"),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Measurements and Shirt/Pants/Jacket size recommendations of a completed session
    """
    context = require_results(session_id, manager)
    record = convert(context.record, units) if units else context.record
    return ResultsResponse(measurements=record, recommendations=context.recommendations)


@router.get("/sessions/{session_id}/export")
async def export_results(
    session_id: str,
    units: Optional[Units] = Query(None, description="Express lengths in inches or cm"),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Download measurements, recommendations and raw pose data as a JSON document
    """
    context = require_results(session_id, manager)
    record = convert(context.record, units) if units else context.record
    document = build_export(record, context.recommendations, context.snapshots)
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/sessions/{session_id}/save", response_model=SaveMeasurementsResponse)
async def save_results(
    session_id: str,
    request: Optional[SaveMeasurementsRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
    store: SupabaseMeasurementStore = Depends(get_measurement_store),
):
    """
    Store the session's measurements under a new or existing profile

    A store failure is reported as a warning; the results stay available to export or retry.
    """
    context = require_results(session_id, manager)
    request = request or SaveMeasurementsRequest()

    try:
        saved = await run_in_threadpool(
            store.save,
            context.record,
            context.snapshots,
            profile_id=request.profile_id,
            name=request.name,
            email=request.email,
            preferences={"units": request.units, "fit": request.fit},
        )
    except PersistenceError as e:
        logger.warning(f"Saving session {session_id} failed: {e}")
        return SaveMeasurementsResponse(saved=False, profile_id=request.profile_id, warning=str(e))

    return SaveMeasurementsResponse(
        saved=True,
        measurement_id=saved["measurementId"],
        profile_id=saved["profileId"],
    )


@router.post("/recommendations", response_model=List[SizingRecommendation])
async def get_recommendations(measurements: MeasurementRecord):
    """
    Size recommendations for a measurement record in inches or cm
    """
    return recommendation_service.recommend(measurements)


@router.post("/measurements/convert", response_model=MeasurementRecord)
async def convert_measurements(
    measurements: MeasurementRecord,
    units: Units = Query(..., description="Target unit"),
):
    """
    Express a measurement record in another unit
    """
    return convert(measurements, units)
