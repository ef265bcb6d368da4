from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_QUALITY = 80

class AssetRecord(BaseModel):
    """Catalog snapshot of a stored asset."""
    model_config = ConfigDict(extra="ignore")

    asset_id: str
    storage_path: Optional[str] = None
    mime_type: Optional[str] = None
    filename: Optional[str] = None
    slug: Optional[str] = None

class TransformRequest(BaseModel):
    width: Optional[int] = Field(None, gt=0)
    height: Optional[int] = Field(None, gt=0)
    quality: int = Field(DEFAULT_QUALITY, ge=1, le=100)

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None or self.height is not None
