"""Image agent: submits a text-to-image job and streams the result as HTML."""

from __future__ import annotations

import asyncio
import html
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests
from loguru import logger

from agent_gateway.agents.base import Agent
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import ImageGenerationError
from agent_gateway.streaming.channel import EventChannel
from agent_gateway.streaming.progress import ProgressReporter

ASPECT_DIMENSIONS: dict[str, tuple[int, int]] = {
    "16:9": (1024, 576),
    "9:16": (576, 1024),
    "4:3": (1024, 768),
    "3:2": (960, 640),
    "1:1": (1024, 1024),
}
DEFAULT_DIMENSIONS = (1024, 1024)
TOTAL_STEPS = 2


def dimensions_for(aspect: str | None) -> tuple[int, int]:
    """Width and height for an aspect ratio tag; unknown tags fall back to square."""
    return ASPECT_DIMENSIONS.get((aspect or "").strip(), DEFAULT_DIMENSIONS)


@dataclass(slots=True, frozen=True)
class GeneratedImage:
    filename: str
    subfolder: str = ""
    kind: str = "output"


class ImageBackend(ABC):
    """Asynchronous text-to-image service: submit a job, then poll it."""

    @abstractmethod
    def submit(self, prompt: str, width: int, height: int) -> str:
        """Queue a job and return its id."""

    @abstractmethod
    def poll(self, job_id: str) -> list[GeneratedImage] | None:
        """Return the images of a finished job, or None while it is running."""

    @abstractmethod
    def image_url(self, image: GeneratedImage) -> str:
        """Public URL of a generated image."""


class ComfyImageBackend(ImageBackend):
    """Backend for a ComfyUI server (``/prompt``, ``/history``, ``/view``)."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.base_url = settings.image_api_url.rstrip("/")
        self.client_id = settings.image_client_id
        self.timeout = settings.oracle_timeout_seconds

    def submit(self, prompt: str, width: int, height: int) -> str:
        payload = {"prompt": build_workflow(prompt, width, height), "client_id": self.client_id}
        body = self._request("POST", f"{self.base_url}/prompt", json=payload)
        job_id = body.get("prompt_id") or body.get("promptId") or body.get("id")
        if not job_id:
            raise ImageGenerationError("Image backend response missing prompt_id")
        return str(job_id)

    def poll(self, job_id: str) -> list[GeneratedImage] | None:
        body = self._request("GET", f"{self.base_url}/history/{job_id}")
        images = collect_images(body.get(job_id, body))
        return images or None

    def image_url(self, image: GeneratedImage) -> str:
        query = urlencode({"filename": image.filename, "subfolder": image.subfolder, "type": image.kind})
        return f"{self.base_url}/view?{query}"

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            reply = requests.request(method, url, timeout=self.timeout, **kwargs)
            reply.raise_for_status()
            body = reply.json()
        except requests.exceptions.RequestException as e:
            logger.error("Image backend error: {}", e)
            raise ImageGenerationError(f"Image backend request failed: {e}") from e
        except ValueError as e:
            raise ImageGenerationError(f"Image backend returned invalid JSON: {e}") from e
        return body if isinstance(body, dict) else {}


def build_workflow(prompt: str, width: int, height: int) -> dict[str, Any]:
    """Minimal text-to-image workflow graph."""
    return {
        "1": {"class_type": "CheckpointLoaderSimple", "inputs": {"ckpt_name": "model.safetensors"}},
        "2": {"class_type": "CLIPTextEncode", "inputs": {"text": prompt, "clip": ["1", 1]}},
        "3": {"class_type": "ConditioningZeroOut", "inputs": {"conditioning": ["2", 0]}},
        "4": {"class_type": "EmptySD3LatentImage", "inputs": {"width": width, "height": height, "batch_size": 1}},
        "5": {
            "class_type": "KSampler",
            "inputs": {
                "seed": 0,
                "steps": 4,
                "cfg": 1,
                "sampler_name": "res_multistep",
                "scheduler": "simple",
                "denoise": 1,
                "model": ["1", 0],
                "positive": ["2", 0],
                "negative": ["3", 0],
                "latent_image": ["4", 0],
            },
        },
        "6": {"class_type": "VAEDecode", "inputs": {"samples": ["5", 0], "vae": ["1", 2]}},
        "7": {"class_type": "SaveImage", "inputs": {"filename_prefix": "agent-gateway", "images": ["6", 0]}},
    }


def collect_images(history: Any) -> list[GeneratedImage]:
    """Walk a job history payload and collect every ``images`` entry."""
    found: list[GeneratedImage] = []

    def visit(value: Any) -> None:
        if isinstance(value, list):
            for entry in value:
                visit(entry)
        elif isinstance(value, dict):
            for image in value.get("images") or []:
                if isinstance(image, dict) and image.get("filename"):
                    found.append(
                        GeneratedImage(
                            filename=str(image["filename"]),
                            subfolder=str(image.get("subfolder") or ""),
                            kind=str(image.get("type") or "output"),
                        )
                    )
            for key, child in value.items():
                if key != "images":
                    visit(child)

    if isinstance(history, dict):
        visit(history.get("outputs", history))
    return found


def render_images_html(urls: list[str], prompt: str) -> str:
    items = [
        '<div style="margin:12px 0;">'
        f'<img src="{html.escape(url)}" alt="Generated image" '
        'style="max-width:100%;height:auto;border-radius:8px;border:1px solid #ddd;" />'
        f'<div style="margin-top:6px;"><a href="{html.escape(url)}" target="_blank" rel="noopener" download>Download</a></div>'
        "</div>"
        for url in urls
    ]
    plural = "s" if len(urls) > 1 else ""
    summary = f"Generated {len(urls)} image{plural} for: {html.escape(prompt)}"
    return (
        "<details open>"
        '<summary style="cursor:pointer;font-weight:bold;padding:8px;">'
        f"{summary}</summary>"
        '<div style="padding:12px;border-left:3px solid #ddd;margin-left:4px;">'
        + "\n".join(items)
        + "</div></details>"
    )


class ImageAgent(Agent):
    """Generates images from the message text."""

    name = "agentImage"
    description = "Generates an image from a text prompt"

    def __init__(self, backend: ImageBackend | None = None, settings: Settings | None = None) -> None:
        super().__init__(settings=settings)
        self.backend = backend or ComfyImageBackend(settings=self.settings)

    async def execute(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        token = channel.token
        prompt = message.strip()
        width, height = dimensions_for(options.get("aspect"))
        reporter = ProgressReporter(channel.emit, total=TOTAL_STEPS)
        reporter.started("開始繪圖")

        reporter.processing("提交繪圖任務", "正在提交繪圖任務...")
        job_id = await asyncio.to_thread(self.backend.submit, prompt, width, height)
        reporter.completed("提交繪圖任務", "繪圖任務已提交")
        token.raise_if_cancelled()

        reporter.processing("生成圖片中", "正在生成圖片，請稍候...")
        images = await self._wait_for_images(job_id, channel)
        reporter.completed("生成圖片中", "圖片已生成")

        urls = [self.backend.image_url(image) for image in images]
        self.stream_text(channel, render_images_html(urls, prompt))
        reporter.finished("圖片生成完成")

    async def _wait_for_images(self, job_id: str, channel: EventChannel) -> list[GeneratedImage]:
        for attempt in range(1, self.settings.image_poll_attempts + 1):
            channel.token.raise_if_cancelled()
            images = await asyncio.to_thread(self.backend.poll, job_id)
            if images:
                logger.info("[{}] job {} finished after {} polls", self.name, job_id, attempt)
                return images
            await asyncio.sleep(self.settings.image_poll_delay_seconds)
        raise ImageGenerationError("Timed out waiting for generated images")
