"""Client for the third-party image generation service."""

from __future__ import annotations

import logging

import httpx

from .errors import GenerationError, ValidationError

logger = logging.getLogger(__name__)


class GenerationClient:
    """Turn a text prompt into a temporary image URL.

    The service is called once per prompt with a JSON body and answers
    with ``{"images": [{"url": ...}, ...]}``. Only the first image is used.

    Args:
        endpoint: Service URL
        api_key: Key sent as ``Authorization: Key <api_key>``
        image_size: Image size preset
        num_inference_steps: Number of inference steps
        timeout: Request timeout in seconds, or None for no timeout
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        image_size: str = "square_hd",
        num_inference_steps: int = 50,
        timeout: float | None = None,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.image_size = image_size
        self.num_inference_steps = num_inference_steps
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Key {self.api_key}"
        return headers

    async def generate(self, prompt: str, client: httpx.AsyncClient | None = None) -> str:
        """Generate one image for ``prompt``.

        Args:
            prompt: Text prompt (must not be blank)
            client: Optional HTTP client; a short-lived one is created if omitted

        Returns:
            URL of the generated image

        Raises:
            ValidationError: If the prompt is blank (no request is made)
            GenerationError: If the service fails or returns no image URL
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")

        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as owned_client:
                return await self._request(owned_client, prompt)
        return await self._request(client, prompt)

    async def _request(self, client: httpx.AsyncClient, prompt: str) -> str:
        payload = {
            "prompt": prompt,
            "image_size": self.image_size,
            "num_inference_steps": self.num_inference_steps,
        }

        try:
            response = await client.post(self.endpoint, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Error in image generation: {e}")
            raise GenerationError(f"Failed to generate image: {e}", 502) from e

        if response.is_error:
            try:
                detail = response.json().get("error")
            except (ValueError, AttributeError):
                detail = None
            logger.error(f"Generation service returned {response.status_code}: {detail}")
            raise GenerationError(
                detail or "Failed to generate image from FAL AI", response.status_code
            )

        try:
            image_url = response.json()["images"][0]["url"]
        except (ValueError, KeyError, IndexError, TypeError):
            image_url = None

        if not image_url:
            raise GenerationError("No image URL in response from FAL AI", 500)

        logger.info(f"Generated image: {image_url}")
        return image_url
