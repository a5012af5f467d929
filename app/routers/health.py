from fastapi import APIRouter, Depends

from app.routers.tasks import get_task_service
from app.services.task_service import TaskService

router = APIRouter()

@router.get("/z")
def healthz(service: TaskService = Depends(get_task_service)):
    # Check si l'API est up, et sur quel stockage
    return {"status": "ok", "backend": service.backend}
