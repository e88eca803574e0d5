# medmitra_portal/routers/admin.py
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..backend import admins
from ..backend.client import BackendClient
from ..models import Portal
from .deps import get_client, require_portal

# (main.py mounts this router with prefix="/admin")
router = APIRouter(tags=["admin"], dependencies=[Depends(require_portal(Portal.admin))])

@router.get("/profile")
def profile(client: BackendClient = Depends(get_client)):
    return {"admin": admins.get_profile(client)}

@router.put("/profile")
def update_profile(updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "admin": admins.update_profile(client, updates)}

@router.get("/dashboard")
def dashboard(client: BackendClient = Depends(get_client)):
    return admins.dashboard_stats(client)

# ──────────────────────────────────────────────────────────────────────────────
# Doctor & coordinator verification
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/doctors")
def doctors(status: Optional[str] = None, page: int = 1, limit: int = 20, client: BackendClient = Depends(get_client)):
    return admins.list_doctors(client, status, page, limit)

@router.post("/doctors/{doctor_id}/verify")
def verify_doctor(doctor_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, "doctor": admins.verify_doctor(client, doctor_id)}

@router.post("/doctors/{doctor_id}/suspend")
def suspend_doctor(doctor_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, "doctor": admins.suspend_doctor(client, doctor_id)}

@router.get("/coordinators")
def coordinators(status: Optional[str] = None, hospital_id: Optional[str] = Query(default=None, alias="hospitalId"),
                 page: int = 1, limit: int = 20, client: BackendClient = Depends(get_client)):
    return admins.list_coordinators(client, status, hospital_id, page, limit)

@router.post("/coordinators/{coordinator_id}/verify")
def verify_coordinator(coordinator_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, "coordinator": admins.verify_coordinator(client, coordinator_id)}

@router.post("/coordinators/{coordinator_id}/suspend")
def suspend_coordinator(coordinator_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, "coordinator": admins.suspend_coordinator(client, coordinator_id)}
