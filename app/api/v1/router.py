from fastapi import APIRouter
from app.api.v1.endpoints import agenda, creneaux, rendezvous, notifications

api_router = APIRouter()
api_router.include_router(agenda.router, prefix="/agenda", tags=["agenda"])
api_router.include_router(creneaux.router, prefix="/creneaux", tags=["creneaux"])
api_router.include_router(rendezvous.router, prefix="/rendezvous", tags=["rendezvous"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
