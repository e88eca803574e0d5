# medmitra_portal/backend/admins.py
from __future__ import annotations
from typing import Optional

from .client import BackendClient, unwrap


def get_profile(client: BackendClient) -> dict:
    return unwrap(client.get("/admin/profile"), "admin", default={})


def update_profile(client: BackendClient, data: dict) -> dict:
    return unwrap(client.put("/admin/profile", data), "admin", default={})


def dashboard_stats(client: BackendClient) -> dict:
    return unwrap(client.get("/admin/dashboard/stats"), default={"doctors": 0, "admins": 0, "coordinators": 0})


def list_doctors(client: BackendClient, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
    return unwrap(client.get("/admin/doctors", params={"status": status, "page": page, "limit": limit}), default={})


def verify_doctor(client: BackendClient, doctor_id: str) -> dict:
    return unwrap(client.post(f"/admin/doctors/{doctor_id}/verify"), "doctor", default={})


def suspend_doctor(client: BackendClient, doctor_id: str) -> dict:
    return unwrap(client.post(f"/admin/doctors/{doctor_id}/suspend"), "doctor", default={})


def list_coordinators(client: BackendClient, status: Optional[str] = None, hospital_id: Optional[str] = None,
                      page: int = 1, limit: int = 20) -> dict:
    params = {"status": status, "hospitalId": hospital_id, "page": page, "limit": limit}
    return unwrap(client.get("/admin/coordinators", params=params), default={})


def verify_coordinator(client: BackendClient, coordinator_id: str) -> dict:
    return unwrap(client.post(f"/admin/coordinators/{coordinator_id}/verify"), "coordinator", default={})


def suspend_coordinator(client: BackendClient, coordinator_id: str) -> dict:
    return unwrap(client.post(f"/admin/coordinators/{coordinator_id}/suspend"), "coordinator", default={})
