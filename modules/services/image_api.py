"""HTTP client for the journal's generated-images API."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import requests
from pydantic import BaseModel, Field, ValidationError

from config.settings import AppConfig
from modules.services.errors import ImageApiError
from modules.services.image_records import GeneratedImage

logger = logging.getLogger(__name__)

IMAGES_PATH = "/api/generated-images"


class GenerateImageRequest(BaseModel):
    """Body of a generation request, validated before it is sent."""

    entity_id: UUID
    summary_text: str = Field(min_length=1)
    custom_prompt: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "entityId": str(self.entity_id),
            "summaryText": self.summary_text,
        }
        # An empty custom prompt means "use the stored template"
        if self.custom_prompt:
            payload["customPrompt"] = self.custom_prompt
        return payload


class GeneratedImagesClient:
    """Facade around the ``/api/generated-images`` endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        user_id: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        if user_id:
            self._session.cookies.set("userId", user_id)

    @classmethod
    def from_config(cls, config: AppConfig) -> "GeneratedImagesClient":
        return cls(config.api_base_url, timeout=config.request_timeout, user_id=config.user_id)

    def list_images(self, entity_id: str) -> List[GeneratedImage]:
        """Return the backend's current images for an entity, in display order."""
        response = self._request("GET", IMAGES_PATH, params={"entityId": entity_id})
        data = self._decode(response)
        if not response.ok:
            raise ImageApiError(_error_message(data, "Failed to fetch images"), response.status_code)
        return [GeneratedImage.from_payload(item) for item in data.get("images") or []]

    def generate_image(
        self,
        entity_id: str,
        summary_text: str,
        custom_prompt: Optional[str] = None,
    ) -> GeneratedImage:
        """Ask the backend to generate one image and return the stored record."""
        try:
            request = GenerateImageRequest(
                entity_id=entity_id,
                summary_text=summary_text,
                custom_prompt=custom_prompt,
            )
        except ValidationError as exc:
            raise ImageApiError(f"Invalid request: {_validation_summary(exc)}") from exc

        response = self._request("POST", IMAGES_PATH, json=request.to_payload())
        data = self._decode(response)
        if not response.ok:
            message = _error_message(data, "Image generation failed", prefer_details=True)
            raise ImageApiError(message, response.status_code)

        image = data.get("image")
        if not image:
            raise ImageApiError("Image generation failed: no image in response", response.status_code)
        return GeneratedImage.from_payload(image)

    def delete_image(self, image_id: str) -> None:
        response = self._request("DELETE", f"{IMAGES_PATH}/{image_id}")
        if not response.ok:
            data = self._decode(response)
            raise ImageApiError(_error_message(data, "Failed to delete image"), response.status_code)

    def close(self) -> None:
        self._session.close()

    # Internal helpers ---------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ImageApiError(f"Request failed: {exc}") from exc

    def _decode(self, response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            if not response.ok:
                return {}
            raise ImageApiError("Invalid JSON in response", response.status_code) from exc
        return data if isinstance(data, dict) else {}


def _error_message(data: Dict[str, Any], fallback: str, prefer_details: bool = False) -> str:
    details = data.get("details") if prefer_details else None
    if isinstance(details, (dict, list)):
        return json.dumps(details)
    return str(details or data.get("error") or fallback)


def _validation_summary(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts)
