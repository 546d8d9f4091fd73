"""OpenAI chat client for tutor answers."""

from __future__ import annotations

import base64
import io
import logging
from typing import TYPE_CHECKING, Any

from openai import AsyncOpenAI, OpenAIError
from PIL import Image, UnidentifiedImageError

from kumao_bot.errors import TutorError
from kumao_bot.tutor.prompts import IMAGE_INSTRUCTION, SYSTEM_PROMPT

if TYPE_CHECKING:
    from kumao_bot.config import OpenAIConfig

logger = logging.getLogger(__name__)

_DEFAULT_IMAGE_MIME = "image/jpeg"


def sniff_image_mime(data: bytes) -> str:
    """Return the MIME type Pillow detects for *data* (JPEG when unknown)."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return _DEFAULT_IMAGE_MIME
    return Image.MIME.get(fmt or "", _DEFAULT_IMAGE_MIME)


def image_data_url(data: bytes) -> str:
    mime = sniff_image_mime(data)
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class TutorClient:
    """Asks the chat model for an answer in the Kumao-sensei persona."""

    def __init__(self, config: OpenAIConfig, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
        )

    async def complete(self, messages: list[dict[str, Any]]) -> str:
        """Run one chat completion and return the answer text."""
        try:
            resp = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._config.temperature,
            )
        except OpenAIError as exc:
            msg = f"chat completion failed: {exc}"
            raise TutorError(msg) from exc

        content = resp.choices[0].message.content if resp.choices else None
        if not content or not content.strip():
            msg = "chat completion returned no content"
            raise TutorError(msg)
        logger.debug("Model answered chars=%d model=%s", len(content), self._config.model)
        return content

    async def ask_text(self, question: str) -> str:
        return await self.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": question},
            ]
        )

    async def ask_image(self, image: bytes) -> str:
        """Ask the model to solve the problem photographed in *image*."""
        return await self.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": IMAGE_INSTRUCTION},
                        {"type": "image_url", "image_url": {"url": image_data_url(image)}},
                    ],
                },
            ]
        )

    async def close(self) -> None:
        await self._client.close()
