"""
Router para administrar el scheduler de keywords
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from services.pulse.app import config
from services.pulse.app.container import Container
from shared.services.logging_config import get_logger

from .reddit_router import get_container

logger = get_logger(__name__)
router = APIRouter(prefix="/scheduler", tags=["Scheduler"])


class ScheduleKeywordBody(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=100)
    fetchInterval: int = Field(config.DEFAULT_FETCH_INTERVAL_HOURS,
                               ge=config.MIN_FETCH_INTERVAL_HOURS, le=config.MAX_FETCH_INTERVAL_HOURS)
    autoFetch: bool = True


class UpdateIntervalBody(BaseModel):
    fetchInterval: int = Field(..., ge=config.MIN_FETCH_INTERVAL_HOURS, le=config.MAX_FETCH_INTERVAL_HOURS)


@router.get("/status")
def get_scheduler_status(container: Container = Depends(get_container)):
    """Estado del scheduler: en ejecución, próxima pasada y keywords en curso."""
    return container.scheduler.status()


@router.get("/keywords")
def list_scheduled_keywords(container: Container = Depends(get_container)):
    keywords = container.scheduling.list_scheduled()
    return {"keywords": [k.to_dict() for k in keywords], "total": len(keywords)}


@router.post("/keywords")
def schedule_keyword(body: ScheduleKeywordBody, container: Container = Depends(get_container)):
    """Agrega o actualiza la programación de una keyword."""
    try:
        keyword = container.scheduling.schedule(body.keyword, body.fetchInterval, body.autoFetch)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "keyword": keyword.to_dict()}


@router.put("/keywords/{keyword}/interval")
def update_keyword_interval(keyword: str, body: UpdateIntervalBody, container: Container = Depends(get_container)):
    try:
        record = container.scheduling.update_interval(keyword, body.fetchInterval)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail=f"Keyword '{keyword}' not found")
    return {"status": "success", "keyword": record.to_dict()}


@router.delete("/keywords/{keyword}")
def unschedule_keyword(keyword: str, container: Container = Depends(get_container)):
    """Retira la keyword del scheduler (se desactiva, no se borra)."""
    try:
        removed = container.scheduling.unschedule(keyword)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail=f"Keyword '{keyword}' not found")
    return {"status": "success", "message": f"Keyword '{keyword}' removed from scheduling"}


@router.post("/start")
def start_scheduler(container: Container = Depends(get_container)):
    started = container.scheduler.start()
    return {
        "status": "success" if started else "already_running",
        "scheduler": container.scheduler.status(),
    }


@router.post("/stop")
def stop_scheduler(container: Container = Depends(get_container)):
    stopped = container.scheduler.stop()
    return {
        "status": "success" if stopped else "already_stopped",
        "scheduler": container.scheduler.status(),
    }


@router.post("/run")
def run_scheduler_now(container: Container = Depends(get_container)):
    """Ejecuta una pasada inmediata sobre las keywords vencidas."""
    result = container.scheduler.run_now()
    if result is None:
        raise HTTPException(status_code=500, detail="Scheduled run failed; see logs")
    return {"status": "success", "result": result.to_dict()}
