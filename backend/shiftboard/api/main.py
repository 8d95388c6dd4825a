from fastapi import APIRouter

from shiftboard.api.routes import health, jobs, machines, schedule

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(jobs.router)
api_router.include_router(schedule.router)
api_router.include_router(machines.router)
