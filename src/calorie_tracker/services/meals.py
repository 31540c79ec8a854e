"""Meal photo analysis and history."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError

from calorie_tracker.domain.analysis import MealAnalysis
from calorie_tracker.domain.errors import (
    AnalysisFailedError,
    AnalysisPendingError,
    InvalidInputError,
)
from calorie_tracker.domain.meals import MealRecord, StoredImage
from calorie_tracker.services.stats import MealRepository

_logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class MealAnalysisClient(Protocol):
    """Interface for the external meal analysis webhook."""

    async def analyze(
        self, image_bytes: bytes, filename: str, content_type: str
    ) -> object:
        """Send an image and return the decoded JSON response."""


class ImageStorage(Protocol):
    """Object storage for meal images."""

    def upload(self, path: str, content: bytes, content_type: str) -> StoredImage:
        """Upload an image and return its location."""


class MealHistoryRepository(MealRepository, Protocol):
    """Persistence interface for saved meals."""

    def create_meal(
        self, user_id: str, image_url: str, analysis: MealAnalysis
    ) -> MealRecord:
        """Insert a meal record and return it."""


@dataclass
class MealService:
    """Service that analyzes meal photos and saves them to history."""

    analysis_client: MealAnalysisClient
    image_storage: ImageStorage
    repository: MealHistoryRepository
    max_upload_bytes: int = 5 * 1024 * 1024

    async def analyze(
        self, image_bytes: bytes, filename: str, content_type: str | None = None
    ) -> MealAnalysis:
        """Analyze a meal photo via the webhook."""
        resolved_type = self._validate_image(image_bytes, content_type)
        try:
            raw = await self.analysis_client.analyze(
                image_bytes, filename, resolved_type
            )
        except AnalysisFailedError:
            raise
        except Exception as exc:
            raise AnalysisFailedError(f"Failed to analyze image: {exc}") from exc
        return parse_analysis(raw)

    def save_to_history(
        self,
        user_id: str,
        image_bytes: bytes,
        content_type: str | None,
        analysis: MealAnalysis,
    ) -> MealRecord:
        """Upload the meal image and record the analysis for the user."""
        resolved_type = self._validate_image(image_bytes, content_type)
        path = build_image_path(user_id, resolved_type)
        stored = self.image_storage.upload(path, image_bytes, resolved_type)
        meal = self.repository.create_meal(user_id, stored.public_url, analysis)
        _logger.info("Saved meal to history: user_id=%s meal_id=%s", user_id, meal.id)
        return meal

    def list_history(self, user_id: str) -> list[MealRecord]:
        """Return the user's saved meals, most recent first."""
        return self.repository.list_meals(user_id)

    def _validate_image(self, image_bytes: bytes, content_type: str | None) -> str:
        if not image_bytes:
            raise InvalidInputError("Image is empty")
        if len(image_bytes) > self.max_upload_bytes:
            raise InvalidInputError(
                f"Image exceeds the {self.max_upload_bytes} byte limit"
            )
        if content_type and not content_type.startswith("image/"):
            raise InvalidInputError(f"Unsupported content type: {content_type}")
        if content_type and content_type != "image/jpg":
            return content_type
        return _detect_mime_type(image_bytes)


def parse_analysis(payload: object) -> MealAnalysis:
    """Validate a webhook response into a meal analysis.

    The webhook answers either with a list of ``{"output": ...}`` entries or a
    single such object. A ``message`` without output means the workflow has
    not produced a result.
    """
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict) and "output" in payload:
        entries = [payload]
    elif isinstance(payload, dict) and "message" in payload:
        message = str(payload.get("message") or "")
        if "workflow" in message.lower():
            raise AnalysisPendingError(
                "Analysis is still processing. Please try again in a moment."
            )
        raise AnalysisFailedError(f"Unexpected API message: {message}")
    else:
        raise AnalysisFailedError("Unexpected API response structure")

    first = entries[0] if entries else None
    output = first.get("output") if isinstance(first, dict) else None
    if not isinstance(output, dict) or output.get("status") != "success":
        raise AnalysisFailedError("Invalid response: status is not success")
    try:
        return MealAnalysis.model_validate(output)
    except ValidationError as exc:
        _logger.warning("Meal analysis payload rejected: %s", exc)
        raise AnalysisFailedError(f"Invalid response format: {exc}") from exc


def build_image_path(user_id: str, content_type: str) -> str:
    """Return the storage path for a new meal image."""
    timestamp_ms = int(datetime.now(tz=UTC).timestamp() * 1000)
    extension = _EXTENSIONS.get(content_type, "jpg")
    return f"{user_id}/{timestamp_ms}.{extension}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "image/jpeg"
