from fastapi import HTTPException, UploadFile
from supabase import Client
from portal.config import settings
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

# Storage paths with this prefix live in the logos bucket; anything else is an external URL
CONNECTION_LOGO_PREFIX = "connections/"
COMPANY_LOGO_PREFIX = "companies/"


class BucketStorage:
    """Thin wrapper over a Supabase Storage bucket"""

    def __init__(self, supabase: Client, bucket_name: str):
        self.supabase = supabase
        self.bucket_name = bucket_name

    def upload_file(self, file_content: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        """Upload file and return its storage path"""
        try:
            self.supabase.storage.from_(self.bucket_name).upload(
                path,
                file_content,
                file_options={"content-type": content_type, "upsert": "true"}
            )
            return path
        except Exception as e:
            logger.error(f"Failed to upload {path} to bucket {self.bucket_name}: {str(e)}")
            raise

    def delete_files(self, paths: List[str]) -> bool:
        try:
            self.supabase.storage.from_(self.bucket_name).remove(paths)
            return True
        except Exception as e:
            logger.error(f"Failed to delete {paths} from bucket {self.bucket_name}: {str(e)}")
            return False

    def public_url(self, path: str) -> str:
        return self.supabase.storage.from_(self.bucket_name).get_public_url(path)


class LogoStorage(BucketStorage):
    """Public logos bucket, created on first use"""

    _ready_buckets = set()

    def __init__(self, supabase: Client):
        super().__init__(supabase, settings.logos_bucket)

    def ensure_bucket(self):
        if self.bucket_name in self._ready_buckets:
            return
        try:
            buckets = self.supabase.storage.list_buckets()
        except Exception as e:
            logger.error(f"Error listing storage buckets: {str(e)}")
            raise RuntimeError(f"Failed to initialize storage: {str(e)}")

        if not any(getattr(b, "name", None) == self.bucket_name for b in buckets or []):
            try:
                self.supabase.storage.create_bucket(
                    self.bucket_name,
                    options={"public": True, "file_size_limit": settings.logo_max_bytes}
                )
                logger.info(f"Bucket '{self.bucket_name}' created")
            except Exception as e:
                logger.error(f"Error creating bucket {self.bucket_name}: {str(e)}")
                raise RuntimeError(f"Failed to create bucket {self.bucket_name}: {str(e)}")
        self._ready_buckets.add(self.bucket_name)

    @classmethod
    def reset(cls):
        cls._ready_buckets.clear()

    def resolve_logo(self, logo_url: Optional[str], connection_type: Optional[str] = None) -> Optional[str]:
        """Public URL for stored logos, the raw value for external URLs, else the bundled type logo"""
        if logo_url and (logo_url.startswith(CONNECTION_LOGO_PREFIX) or logo_url.startswith(COMPANY_LOGO_PREFIX)):
            return self.public_url(logo_url)
        if logo_url:
            return logo_url
        if connection_type:
            return f"/logos/{connection_type.lower()}.png"
        return None


async def read_logo_upload(file: UploadFile) -> bytes:
    """Read an uploaded image, enforcing type and the logos bucket size limit"""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Logo must be an image file")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Logo file is empty")
    if len(content) > settings.logo_max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Logo exceeds the {settings.logo_max_bytes // (1024 * 1024)}MB limit"
        )
    return content
