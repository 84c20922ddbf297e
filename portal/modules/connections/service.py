from supabase import Client
from portal.modules.connections.schemas import (
    ConnectionCreate, ConnectionUpdate, ConnectionRow, ConnectionResponse, CONNECTION_STATUSES
)
from portal.core.errors import raise_for_postgrest
from portal.database.storage import LogoStorage, CONNECTION_LOGO_PREFIX, read_logo_upload
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile
import os
import uuid
import logging

logger = logging.getLogger(__name__)


class ConnectionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = LogoStorage(supabase)

    def _validate_status(self, status: Optional[str]):
        if status is not None and status not in CONNECTION_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Allowed values: {', '.join(CONNECTION_STATUSES)}"
            )

    def _get_row(self, connection_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("connections")\
                .select("*")\
                .eq("id", connection_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch connection", not_found="Connection not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Connection not found")
        return result.data

    def _to_response(self, row: Dict[str, Any], include_config: bool = False) -> ConnectionResponse:
        return ConnectionResponse(
            id=row["id"],
            name=row["name"],
            logo=self.storage.resolve_logo(row.get("logo_url"), row.get("type")),
            status=row.get("status") or "pending",
            last_sync=row.get("last_sync") or row.get("created_at"),
            type=row["type"],
            description=row.get("description"),
            config=(row.get("config") or {}) if include_config else None
        )

    def list_connections(self) -> List[ConnectionResponse]:
        try:
            result = self.supabase.table("connections")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "list connections")
        return [self._to_response(row) for row in result.data or []]

    def get_connection(self, connection_id: str) -> ConnectionResponse:
        return self._to_response(self._get_row(connection_id), include_config=True)

    def create_connection(self, connection_data: ConnectionCreate) -> ConnectionRow:
        """New connections always start as pending and never synced"""
        try:
            result = self.supabase.table("connections").insert({
                "name": connection_data.name,
                "type": connection_data.type,
                "description": connection_data.description,
                "logo_url": connection_data.logo,
                "status": "pending",
                "config": connection_data.config or {},
                "created_at": datetime.now(timezone.utc).isoformat(),
                "last_sync": None
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create connection")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create connection")
        logger.info(f"Connection {result.data[0]['id']} created")
        return ConnectionRow(**result.data[0])

    def update_connection(self, connection_id: str, connection_data: ConnectionUpdate) -> ConnectionRow:
        """Partial update: only supplied fields are written"""
        self._validate_status(connection_data.status)
        self._get_row(connection_id)

        update_data = {}
        if connection_data.name:
            update_data["name"] = connection_data.name
        if "description" in connection_data.model_fields_set:
            update_data["description"] = connection_data.description
        if connection_data.logo:
            update_data["logo_url"] = connection_data.logo
        if connection_data.status:
            update_data["status"] = connection_data.status
        if connection_data.config:
            update_data["config"] = connection_data.config
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("connections")\
                .update(update_data)\
                .eq("id", connection_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update connection")
        if not result.data:
            raise HTTPException(status_code=404, detail="Connection not found")
        return ConnectionRow(**result.data[0])

    def update_status(self, connection_id: str, status: str) -> ConnectionRow:
        """Set status; becoming active stamps last_sync"""
        self._validate_status(status)
        update_data = {"status": status}
        if status == "active":
            update_data["last_sync"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("connections")\
                .update(update_data)\
                .eq("id", connection_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update connection")
        if not result.data:
            raise HTTPException(status_code=404, detail="Connection not found")
        return ConnectionRow(**result.data[0])

    def delete_connection(self, connection_id: str) -> bool:
        """Delete the row, then its stored logo (best-effort)"""
        logo_url = None
        try:
            existing = self.supabase.table("connections")\
                .select("logo_url")\
                .eq("id", connection_id)\
                .maybe_single()\
                .execute()
            if existing is not None and existing.data:
                logo_url = existing.data.get("logo_url")
        except Exception as e:
            logger.error(f"Error fetching connection {connection_id} before delete: {e}")

        try:
            self.supabase.table("connections")\
                .delete()\
                .eq("id", connection_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "delete connection")

        if logo_url and logo_url.startswith(CONNECTION_LOGO_PREFIX):
            if not self.storage.delete_files([logo_url]):
                logger.warning(f"Logo {logo_url} of deleted connection {connection_id} was not removed")
        logger.info(f"Connection {connection_id} deleted")
        return True

    async def upload_logo(self, connection_id: str, file: UploadFile) -> ConnectionResponse:
        """Store an uploaded logo under connections/{id}/ and save the storage path"""
        row = self._get_row(connection_id)
        content = await read_logo_upload(file)
        extension = os.path.splitext(file.filename or "")[1] or ".png"
        path = f"{CONNECTION_LOGO_PREFIX}{connection_id}/{uuid.uuid4().hex}{extension}"
        try:
            self.storage.ensure_bucket()
            self.storage.upload_file(content, path, file.content_type)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to upload logo: {str(e)}")

        try:
            result = self.supabase.table("connections")\
                .update({
                    "logo_url": path,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", connection_id)\
                .execute()
        except Exception as e:
            self.storage.delete_files([path])
            raise_for_postgrest(e, "save connection logo")

        previous = row.get("logo_url")
        if previous and previous.startswith(CONNECTION_LOGO_PREFIX) and previous != path:
            self.storage.delete_files([previous])
        return self._to_response(result.data[0], include_config=True)
