"""Text-adventure demo: a pass-through to an external completion service."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from landing.config import settings
from landing.http_client import (
    AsyncCircuitBreaker,
    CircuitBreakerOpenError,
    async_http_client,
    request_with_retries,
)

logger = logging.getLogger(__name__)

NARRATOR_START_PROMPT = """You are the narrator of a fantasy text adventure.

Open a new adventure:
1. Set an exciting opening scene in a fantasy world
2. Describe sights, sounds and atmosphere vividly
3. Introduce intriguing characters, objects and places
4. Leave clear hints about what the player could do next

Write 3-4 paragraphs. Stay in the story: no remarks about being an AI or a game system."""

NARRATOR_ACTION_PROMPT = """You are the narrator of an ongoing fantasy text adventure.

Continue the story from the player's action:
1. Describe the consequences of the action
2. Keep consistent with the previous scene
3. Introduce new discoveries, challenges or characters
4. If the action makes no sense, describe what happens and hint at alternatives

Write 3-4 paragraphs with sensory detail. Never break the fourth wall."""

OPENING_REQUEST = (
    "Start a new fantasy adventure. The player begins standing at the entrance of an "
    "ancient, mysterious dungeon. Describe the scene vividly."
)

IMAGE_STYLE = (
    "Pixel art style, fantasy video game scene, retro RPG aesthetic, 16-bit graphics, "
    "detailed game environment, magical atmosphere, cinematic view, vibrant colors"
)
IMAGE_PROMPT_LIMIT = 500

# sizes accepted by the gpt-image-* models
GPT_IMAGE_SIZES = frozenset({"1024x1024", "1536x1024", "1024x1536", "auto"})

DEFAULT_START_STORY = "The adventure begins..."
DEFAULT_ACTION_STORY = "Something interesting happens..."

FALLBACK_START_STORY = (
    "You stand before an ancient stone dungeon entrance. Weathered vines climb the dark "
    "walls, and a mysterious blue light flickers from within. A weathered sign hangs nearby, "
    "but the words are worn away by time. The air is thick with the scent of adventure and "
    "danger. What do you do?"
)
FALLBACK_ACTION_STORY = (
    "As you take action, the dungeon seems to shift and change around you. Strange whispers "
    "echo through the corridors, and you sense that powerful magic is at work. You press "
    "forward, deeper into the unknown..."
)


class AdventureError(RuntimeError):
    """Raised when the generation service cannot produce a scene."""


class NarrativeBackend(Protocol):
    async def generate_narrative(self, prompt: str, system: str) -> str: ...

    async def generate_image(self, prompt: str) -> bytes: ...


OPENAI_CIRCUIT_BREAKER = AsyncCircuitBreaker.from_settings("openai")


class OpenAIBackend:
    """Chat completions and image generation over an OpenAI-compatible HTTP API."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        image_model: str | None = None,
        image_size: str | None = None,
        breaker: AsyncCircuitBreaker | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = base_url or settings.OPENAI_BASE
        self.model = model or settings.OPENAI_MODEL
        self.image_model = image_model or settings.OPENAI_IMAGE_MODEL
        self.image_size = image_size or settings.ADVENTURE_IMAGE_SIZE
        self.breaker = breaker or OPENAI_CIRCUIT_BREAKER

    async def _post(self, url: str, body: dict) -> dict:
        if not self.api_key:
            raise AdventureError("OpenAI API key is not configured")
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            async with async_http_client(base_url=self.base_url, headers=headers) as client:
                response = await request_with_retries(client, "POST", url, breaker=self.breaker, json=body)
                response.raise_for_status()
                return response.json()
        except CircuitBreakerOpenError as exc:
            raise AdventureError("Generation service is temporarily unavailable") from exc
        except httpx.HTTPError as exc:
            raise AdventureError(f"Generation request failed: {exc}") from exc
        except ValueError as exc:
            raise AdventureError(f"Generation service returned invalid JSON: {exc}") from exc

    async def generate_narrative(self, prompt: str, system: str) -> str:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.9,
        }
        data = await self._post("/chat/completions", body)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return (content or "").strip()

    def _image_size(self) -> str:
        if self.image_model.startswith("gpt-image") and self.image_size not in GPT_IMAGE_SIZES:
            logger.warning("image size %s unsupported by %s, using auto", self.image_size, self.image_model)
            return "auto"
        return self.image_size

    async def generate_image(self, prompt: str) -> bytes:
        body: dict = {"model": self.image_model, "prompt": prompt, "size": self._image_size(), "n": 1}
        if self.image_model.startswith("dall-e"):
            body["response_format"] = "b64_json"
        data = await self._post("/images/generations", body)
        try:
            item = data["data"][0]
            encoded = item.get("b64_json") or item.get("base64")
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise AdventureError("Image response has no data") from exc
        if not encoded:
            raise AdventureError("Image response has no base64 payload")
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AdventureError("Image payload is not valid base64") from exc


@dataclass
class Scene:
    story: str
    image_url: str = ""

    def as_dict(self) -> dict:
        return {"success": True, "story": self.story, "imageUrl": self.image_url}


def image_prompt(story: str) -> str:
    return f"{story[:IMAGE_PROMPT_LIMIT]}. {IMAGE_STYLE}."


def image_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


async def _illustrate(backend: NarrativeBackend, story: str) -> str:
    if not settings.ADVENTURE_IMAGES_ENABLED:
        return ""
    return image_data_url(await backend.generate_image(image_prompt(story)))


async def start_adventure(backend: NarrativeBackend) -> Scene:
    story = await backend.generate_narrative(OPENING_REQUEST, NARRATOR_START_PROMPT) or DEFAULT_START_STORY
    return Scene(story, await _illustrate(backend, story))


async def continue_adventure(backend: NarrativeBackend, command: str, previous_scene: str) -> Scene:
    prompt = (
        f"Previous scene: {previous_scene}\n\n"
        f"Player action: {command}\n\n"
        "Continue the story based on this action. Describe what happens next."
    )
    story = await backend.generate_narrative(prompt, NARRATOR_ACTION_PROMPT) or DEFAULT_ACTION_STORY
    return Scene(story, await _illustrate(backend, story))


def get_backend() -> NarrativeBackend:
    return OpenAIBackend()


__all__ = [
    "AdventureError",
    "FALLBACK_ACTION_STORY",
    "FALLBACK_START_STORY",
    "NarrativeBackend",
    "OpenAIBackend",
    "Scene",
    "continue_adventure",
    "get_backend",
    "image_prompt",
    "start_adventure",
]
