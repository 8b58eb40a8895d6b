"""Client-side state for the generated images of one journal entity.

``ImageGenerationState`` owns the image list, the busy flags and the last
error, and exposes ``load``/``generate``/``delete`` actions. It is meant to be
driven from a single asyncio event loop (a UI session); the blocking HTTP
calls of the client run in a worker thread.

Every request captures the current ``epoch``. Switching to another entity or
closing the state bumps it, so responses that arrive late are dropped
instead of leaking into the wrong entity's list.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from modules.services.errors import ImageApiError
from modules.services.image_records import GeneratedImage

logger = logging.getLogger(__name__)


class ImagesBackend(Protocol):
    """The subset of ``GeneratedImagesClient`` the state relies on."""

    def list_images(self, entity_id: str) -> List[GeneratedImage]: ...

    def generate_image(
        self,
        entity_id: str,
        summary_text: str,
        custom_prompt: Optional[str] = None,
    ) -> GeneratedImage: ...

    def delete_image(self, image_id: str) -> None: ...


class FailureKind(str, Enum):
    """Which action produced the current error."""

    LOAD = "load"
    GENERATE = "generate"
    DELETE = "delete"


@dataclass(slots=True, frozen=True)
class StateSnapshot:
    """Immutable view handed to listeners after every change."""

    entity_id: Optional[str]
    images: Tuple[GeneratedImage, ...]
    is_generating: bool
    is_loading: bool
    fetched: bool
    error: Optional[str]
    failure: Optional[FailureKind]


Listener = Callable[[StateSnapshot], None]
Notifier = Callable[[str, str], None]


def _describe(exc: Exception) -> str:
    if isinstance(exc, ImageApiError):
        return exc.message
    return str(exc) or exc.__class__.__name__


class ImageGenerationState:
    """Reactive container for one entity's generated images."""

    def __init__(self, client: ImagesBackend, notifier: Optional[Notifier] = None) -> None:
        self._client = client
        self._notifier = notifier
        self._listeners: List[Listener] = []
        self._entity_id: Optional[str] = None
        self._images: List[GeneratedImage] = []
        self._is_generating = False
        self._pending = 0
        self._fetched = False
        self._error: Optional[str] = None
        self._failure: Optional[FailureKind] = None
        self._epoch = 0
        self._closed = False

    # Read-only state ----------------------------------------------------------
    @property
    def entity_id(self) -> Optional[str]:
        return self._entity_id

    @property
    def images(self) -> Tuple[GeneratedImage, ...]:
        return tuple(self._images)

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def is_loading(self) -> bool:
        return self._pending > 0

    @property
    def fetched(self) -> bool:
        return self._fetched

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def failure(self) -> Optional[FailureKind]:
        return self._failure

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            entity_id=self._entity_id,
            images=tuple(self._images),
            is_generating=self._is_generating,
            is_loading=self.is_loading,
            fetched=self._fetched,
            error=self._error,
            failure=self._failure,
        )

    # Subscriptions ------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # Actions ------------------------------------------------------------------
    async def set_entity(self, entity_id: Optional[str]) -> None:
        """Track another entity: drop the current list and load the new one."""
        entity_id = entity_id or None
        if self._closed or entity_id == self._entity_id:
            return

        self._epoch += 1
        self._entity_id = entity_id
        self._images = []
        self._is_generating = False
        self._pending = 0
        self._fetched = False
        self._clear_error()
        self._emit()
        await self.load()

    async def load(self) -> None:
        """Replace the image list with the backend's list for the entity."""
        if self._closed:
            return
        entity_id = self._entity_id
        if entity_id is None:
            self._images = []
            self._fetched = False
            self._emit()
            return

        epoch = self._epoch
        self._pending += 1
        self._clear_error()
        self._emit()

        try:
            images = await asyncio.to_thread(self._client.list_images, entity_id)
        except Exception as exc:  # noqa: BLE001
            if not self._is_stale(epoch):
                logger.warning("Loading images for %s failed: %s", entity_id, _describe(exc))
                self._set_error(FailureKind.LOAD, _describe(exc))
                self._fetched = True
        else:
            if not self._is_stale(epoch):
                self._images = list(images)
                self._fetched = True
        finally:
            # also runs when the awaiting task is cancelled
            if not self._is_stale(epoch):
                self._pending -= 1
                self._emit()

    refetch = load

    async def generate(self, prompt: str, custom_prompt: Optional[str] = None) -> bool:
        """Request one new image; returns True when it was appended.

        A call while another generation is in flight, or without an entity,
        does nothing and returns False. Cancelling the awaiting task releases
        the in-flight guard.
        """
        entity_id = self._entity_id
        if self._closed or self._is_generating or entity_id is None:
            return False

        epoch = self._epoch
        self._is_generating = True
        self._clear_error()
        self._emit()

        message: Optional[str] = None
        try:
            image = await asyncio.to_thread(self._client.generate_image, entity_id, prompt, custom_prompt)
        except Exception as exc:  # noqa: BLE001
            message = _describe(exc)
            if not self._is_stale(epoch):
                logger.warning("Generating image for %s failed: %s", entity_id, message)
                self._set_error(FailureKind.GENERATE, message)
        else:
            if self._is_stale(epoch):
                logger.debug("Discarding image %s generated for stale entity %s", image.id, entity_id)
            else:
                self._images = [*self._images, image]
                # a load that failed meanwhile must not outlive this success
                self._clear_error()
        finally:
            if not self._is_stale(epoch):
                self._is_generating = False
                self._emit()

        if self._is_stale(epoch):
            return False
        if message is not None:
            self._notify(message, "error")
            return False
        self._notify("Image generated", "success")
        return True

    async def delete(self, image_id: str) -> bool:
        """Delete an image on the backend, then drop it from the list."""
        if self._closed or self._entity_id is None:
            return False

        epoch = self._epoch
        self._pending += 1
        self._clear_error()
        self._emit()

        message: Optional[str] = None
        try:
            await asyncio.to_thread(self._client.delete_image, image_id)
        except Exception as exc:  # noqa: BLE001
            message = _describe(exc)
            if not self._is_stale(epoch):
                logger.warning("Deleting image %s failed: %s", image_id, message)
                self._set_error(FailureKind.DELETE, message)
        else:
            if not self._is_stale(epoch):
                self._images = [image for image in self._images if image.id != image_id]
        finally:
            if not self._is_stale(epoch):
                self._pending -= 1
                self._emit()

        if self._is_stale(epoch):
            return False
        if message is not None:
            self._notify(message, "error")
            return False
        self._notify("Image deleted", "info")
        return True

    def close(self) -> None:
        """Discard all state; responses still in flight will be ignored."""
        self._closed = True
        self._epoch += 1
        self._images = []
        self._is_generating = False
        self._pending = 0
        self._listeners.clear()

    # Internal helpers ---------------------------------------------------------
    def _is_stale(self, epoch: int) -> bool:
        return epoch != self._epoch

    def _clear_error(self) -> None:
        self._error = None
        self._failure = None

    def _set_error(self, kind: FailureKind, message: str) -> None:
        self._error = message
        self._failure = kind

    def _emit(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _notify(self, message: str, level: str) -> None:
        if self._notifier is not None:
            self._notifier(message, level)
