from fastapi import APIRouter, Depends, UploadFile, File
from portal.database.supabase_client import get_service_supabase
from portal.modules.connections.schemas import (
    ConnectionCreate, ConnectionUpdate, ConnectionStatusUpdate, ConnectionRow, ConnectionSummary, ConnectionResponse
)
from portal.modules.connections.service import ConnectionService
from portal.core.dependencies import get_current_user, require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/connections", tags=["connections"])


def get_connection_service(supabase: Client = Depends(get_service_supabase)) -> ConnectionService:
    return ConnectionService(supabase)


@router.get("", response_model=List[ConnectionSummary])
async def list_connections(
    user_data: Dict = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service)
):
    """List data source connections, newest first"""
    return service.list_connections()


@router.post("", response_model=ConnectionRow, status_code=201)
async def create_connection(
    connection_data: ConnectionCreate,
    user_data: Dict = Depends(require_admin),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.create_connection(connection_data)


@router.get("/{connection_id}", response_model=ConnectionResponse)
async def get_connection(
    connection_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.get_connection(connection_id)


@router.put("/{connection_id}", response_model=ConnectionRow)
async def update_connection(
    connection_id: str,
    connection_data: ConnectionUpdate,
    user_data: Dict = Depends(require_admin),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.update_connection(connection_id, connection_data)


@router.patch("/{connection_id}", response_model=ConnectionRow)
async def update_connection_status(
    connection_id: str,
    status_update: ConnectionStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: ConnectionService = Depends(get_connection_service)
):
    """Set the connection status (active, pending or failed)"""
    return service.update_status(connection_id, status_update.status)


@router.delete("/{connection_id}")
async def delete_connection(
    connection_id: str,
    user_data: Dict = Depends(require_admin),
    service: ConnectionService = Depends(get_connection_service)
):
    service.delete_connection(connection_id)
    return {"success": True}


@router.post("/{connection_id}/logo", response_model=ConnectionResponse)
async def upload_connection_logo(
    connection_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: ConnectionService = Depends(get_connection_service)
):
    return await service.upload_logo(connection_id, file)
