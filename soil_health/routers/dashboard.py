"""
Dashboard Router.
Summary metrics and CSV / Excel exports of the district soil data.
"""
import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from soil_health.database import get_db
from soil_health.services.dashboard_service import (
    dashboard_summary,
    district_summary,
    district_summary_csv,
    resolve_year,
)
from soil_health.services.excel_service import dashboard_excel_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/summary")
async def get_summary(
    state: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Key metrics, NPK trends, state distribution, activity feed and district table."""
    return dashboard_summary(db, state=state, year=year)


@router.get("/export/csv")
async def export_csv(
    state: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    target_year = resolve_year(db, year)
    content = district_summary_csv(district_summary(db, state, target_year))
    logger.info(f"Exported dashboard CSV for year {target_year} (state={state})")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="soil_health_data.csv"'},
    )


@router.get("/export/excel")
async def export_excel(
    state: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    summary = dashboard_summary(db, state=state, year=year)
    excel_buffer = dashboard_excel_service.generate_dashboard_excel(summary)
    filename = f"soil_health_dashboard_{summary['year']}.xlsx"

    return StreamingResponse(
        io.BytesIO(excel_buffer.getvalue()),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
