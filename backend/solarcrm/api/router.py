from fastapi import APIRouter
from solarcrm.api.routers import auth, admin, firms, projects, reclamations, worker_auth, worker

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(firms.router, tags=["firms"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(reclamations.router, prefix="/reclamations", tags=["reclamations"])
api_router.include_router(worker_auth.router, prefix="/worker-auth", tags=["worker-auth"])
api_router.include_router(worker.router, prefix="/worker", tags=["worker"])
