"""Generated image records as returned by the backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from modules.services.errors import ImageApiError


@dataclass(slots=True, frozen=True)
class GeneratedImageAsset:
    """Stored file behind a generated image."""

    id: str
    file_path: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    mime_type: str = "image/png"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GeneratedImageAsset":
        return cls(
            id=str(payload.get("id") or ""),
            file_path=payload.get("filePath"),
            width=payload.get("width"),
            height=payload.get("height"),
            mime_type=str(payload.get("mimeType") or "image/png"),
        )


@dataclass(slots=True, frozen=True)
class GeneratedImage:
    """Metadata describing one generated image of an entity."""

    id: str
    url: Optional[str]
    created_at: Optional[datetime]
    entity_id: Optional[str] = None
    asset_id: Optional[str] = None
    model: str = ""
    prompt: str = ""
    aspect_ratio: Optional[str] = None
    steps: Optional[int] = None
    display_order: Optional[int] = None
    asset: Optional[GeneratedImageAsset] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "GeneratedImage":
        """Build a record from a backend JSON object."""
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ImageApiError("Malformed image payload: missing id")

        asset_payload = payload.get("asset")
        asset = GeneratedImageAsset.from_payload(asset_payload) if isinstance(asset_payload, dict) else None

        url = payload.get("url")
        if not url and asset is not None and asset.file_path:
            url = "/" + asset.file_path.lstrip("/")

        return cls(
            id=str(payload["id"]),
            url=url or None,
            created_at=_parse_timestamp(payload.get("createdAt")),
            entity_id=payload.get("entityId"),
            asset_id=payload.get("assetId"),
            model=str(payload.get("model") or ""),
            prompt=str(payload.get("prompt") or ""),
            aspect_ratio=payload.get("aspectRatio"),
            steps=payload.get("steps"),
            display_order=payload.get("displayOrder"),
            asset=asset,
        )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
