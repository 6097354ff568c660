"""
Application state for one LOD check session.

The controller is an explicit state machine:

    IDLE --select--> STAGED --begin--> ANALYZING --ok--> COMPLETED
                       ^                   |
                       |                   +--error--> FAILED (image kept, retry allowed)
                       +--- select from any state

UI callbacks are turned into events and passed to dispatch(). Each analysis is
tagged with the generation it started in; selecting, clearing or resetting
bumps the generation so late responses from an older request are dropped.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from lod_checker.client import AnalysisClient
from lod_checker.ingest import ImageSource, encode_image
from lod_checker.models import AnalysisResult, EncodedImage, HistoryItem, LODLevel

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to analyze the model. Please check the image and try again."


class AppState(str, Enum):
    IDLE = "idle"
    STAGED = "staged"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


# ==========================
# Events
# ==========================

@dataclass(frozen=True)
class ImageSelected:
    image: EncodedImage


@dataclass(frozen=True)
class ImageCleared:
    pass


@dataclass(frozen=True)
class TargetLODChanged:
    level: LODLevel


@dataclass(frozen=True)
class ElementTypeChanged:
    text: str


@dataclass(frozen=True)
class ContextChanged:
    text: str


@dataclass(frozen=True)
class ResetRequested:
    pass


@dataclass(frozen=True)
class AnalysisTicket:
    """Snapshot of what one in-flight request was started with."""
    generation: int
    image: EncodedImage
    target_lod: LODLevel
    element_type: str
    context: str


class AnalysisController:
    def __init__(self, target_lod: LODLevel = LODLevel.LOD300, history_limit: int = 10,
                 clock: Callable[[], float] = time.time):
        self.state = AppState.IDLE
        self.image: Optional[EncodedImage] = None
        self.target_lod = LODLevel(target_lod)
        self.element_type = ""
        self.context = ""
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.history: List[HistoryItem] = []
        self.history_limit = history_limit
        self.generation = 0
        self._clock = clock

    # ---------- queries ----------

    @property
    def preview_url(self) -> Optional[str]:
        return self.image.data_url if self.image else None

    @property
    def is_loading(self) -> bool:
        return self.state is AppState.ANALYZING

    @property
    def can_analyze(self) -> bool:
        return self.image is not None and self.state in (AppState.STAGED, AppState.FAILED)

    # ---------- transitions ----------

    def dispatch(self, event) -> None:
        if isinstance(event, ImageSelected):
            self.select_image(event.image)
        elif isinstance(event, ImageCleared):
            self.clear_image()
        elif isinstance(event, TargetLODChanged):
            self.set_target_lod(event.level)
        elif isinstance(event, ElementTypeChanged):
            self.set_element_type(event.text)
        elif isinstance(event, ContextChanged):
            self.set_context(event.text)
        elif isinstance(event, ResetRequested):
            self.reset()
        else:
            raise TypeError(f"unknown event: {event!r}")

    def select_image(self, image: EncodedImage) -> None:
        self.generation += 1
        self.image = image
        self.result = None
        self.error = None
        self.state = AppState.STAGED
        logger.debug("image %s staged (generation %d)", image.digest, self.generation)

    def select_upload(self, source: ImageSource, mime_type: Optional[str] = None) -> EncodedImage:
        """Encode and stage an upload. ImageDecodeError leaves the state untouched."""
        image = encode_image(source, mime_type)
        self.select_image(image)
        return image

    def clear_image(self) -> None:
        if self.state not in (AppState.STAGED, AppState.FAILED):
            return
        self.generation += 1
        self.image = None
        self.error = None
        self.state = AppState.IDLE

    def set_target_lod(self, level: LODLevel) -> None:
        self.target_lod = LODLevel(level)

    def set_element_type(self, text: str) -> None:
        self.element_type = text or ""

    def set_context(self, text: str) -> None:
        self.context = text or ""

    def reset(self) -> None:
        """Back to IDLE. The target LOD is kept; everything else is cleared."""
        if self.state is AppState.IDLE:
            return
        self.generation += 1
        self.image = None
        self.result = None
        self.error = None
        self.element_type = ""
        self.context = ""
        self.state = AppState.IDLE

    def begin_analysis(self) -> Optional[AnalysisTicket]:
        """Move to ANALYZING and return a ticket, or None when no request should be issued."""
        if not self.can_analyze:
            return None
        self.error = None
        self.state = AppState.ANALYZING
        return AnalysisTicket(
            generation=self.generation,
            image=self.image,
            target_lod=self.target_lod,
            element_type=self.element_type,
            context=self.context,
        )

    def _is_current(self, ticket: AnalysisTicket) -> bool:
        return ticket.generation == self.generation and self.state is AppState.ANALYZING

    def complete(self, ticket: AnalysisTicket, result: AnalysisResult) -> bool:
        if not self._is_current(ticket):
            logger.info("discarding stale result for generation %d", ticket.generation)
            return False
        self.result = result
        self.state = AppState.COMPLETED
        self._remember(ticket, result)
        return True

    def fail(self, ticket: AnalysisTicket, exc: BaseException) -> bool:
        if not self._is_current(ticket):
            logger.info("discarding stale failure for generation %d: %s", ticket.generation, exc)
            return False
        logger.error("LOD analysis failed", exc_info=exc)
        self.error = GENERIC_ERROR
        self.state = AppState.FAILED
        return True

    def _remember(self, ticket: AnalysisTicket, result: AnalysisResult) -> None:
        if self.history_limit <= 0:
            return
        item = HistoryItem(
            id=uuid.uuid4().hex,
            timestamp=self._clock(),
            image_url=ticket.image.data_url,
            result=result,
            target_lod=ticket.target_lod,
        )
        self.history.insert(0, item)
        del self.history[self.history_limit:]

    async def run_analysis(self, client: AnalysisClient) -> Optional[AnalysisResult]:
        """Issue one request if allowed and apply its outcome unless it went stale."""
        ticket = self.begin_analysis()
        if ticket is None:
            return None
        try:
            result = await client.analyze(
                ticket.image.payload,
                ticket.target_lod,
                ticket.element_type or None,
                ticket.context or None,
                mime_type=ticket.image.mime_type,
            )
        except Exception as e:
            self.fail(ticket, e)
            return None
        return result if self.complete(ticket, result) else None
