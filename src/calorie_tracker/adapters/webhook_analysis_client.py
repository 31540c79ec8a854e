"""HTTP client for the meal analysis webhook."""

from dataclasses import dataclass

import httpx

from calorie_tracker.domain.errors import AnalysisFailedError
from calorie_tracker.services.meals import MealAnalysisClient


@dataclass
class HttpxMealAnalysisClient(MealAnalysisClient):
    """HTTPX-backed client posting meal photos as multipart uploads."""

    webhook_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 60.0

    @classmethod
    def create(
        cls, webhook_url: str, timeout_seconds: float = 60.0
    ) -> "HttpxMealAnalysisClient":
        """Create a webhook client with a managed httpx session."""
        return cls(
            webhook_url=webhook_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def analyze(
        self, image_bytes: bytes, filename: str, content_type: str
    ) -> object:
        """Post the image under the ``image`` field and decode the JSON reply."""
        response = await self.http_client.post(
            self.webhook_url,
            files={"image": (filename, image_bytes, content_type)},
            timeout=self.timeout_seconds,
        )
        if response.is_error:
            raise AnalysisFailedError(
                f"Failed to analyze image: {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise AnalysisFailedError("Analysis response is not JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
