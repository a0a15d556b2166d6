"""HTTP client for the external label analysis webhook."""

from dataclasses import dataclass

import httpx

from label_analyzer.services.analysis import AnalysisClient


@dataclass
class HttpxAnalysisClient(AnalysisClient):
    """HTTPX-backed analysis service client."""

    url: str
    timeout_seconds: float
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str, timeout_seconds: float) -> "HttpxAnalysisClient":
        """Create an analysis client with a managed httpx session."""
        return cls(
            url=url, timeout_seconds=timeout_seconds, http_client=httpx.AsyncClient()
        )

    async def request_analysis(self, message: str) -> object:
        """POST the label text and return the decoded JSON response."""
        response = await self.http_client.post(
            self.url,
            json={"message": message},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
