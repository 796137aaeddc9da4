"""
Ollama Client for Local LLM Integration
=======================================

Text and vision generation against an Ollama server.

Key Features:
- Text completion for the RAG generator
- Image analysis with a vision model
- Image normalisation (bytes, files, data URLs, http URLs)
- Model listing
"""

import asyncio
import base64
import binascii
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import requests

from exam_rag.core.exceptions import GenerationError

logger = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, str, os.PathLike]

SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
MAX_IMAGE_BYTES = 10 * 1024 * 1024

DEFAULT_IMAGE_PROMPT = (
    "Describe this image in detail for a student. Transcribe any text, equations "
    "or labels it contains and explain what the diagram or picture shows."
)


@dataclass
class OllamaResponse:
    """Response from Ollama API."""
    content: str
    model: str
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    eval_count: Optional[int] = None


def _sniff_image_type(data: bytes) -> Optional[str]:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def _check_image_bytes(data: bytes, mime_type: Optional[str] = None) -> bytes:
    mime_type = mime_type or _sniff_image_type(data)
    if mime_type not in SUPPORTED_IMAGE_TYPES:
        raise GenerationError(
            f"Unsupported image format: {mime_type or 'unknown'}. "
            f"Supported formats: {', '.join(SUPPORTED_IMAGE_TYPES)}"
        )
    if len(data) > MAX_IMAGE_BYTES:
        raise GenerationError("Image size too large. Please use an image smaller than 10MB.")
    return data


def encode_image(image: ImageInput, timeout: int = 30) -> str:
    """
    Normalise an image to the base64 string Ollama expects.

    Args:
        image: Raw bytes, a file path, a ``data:image/...`` URL, an
            http(s) URL or an already base64-encoded string
        timeout: Timeout for fetching http(s) URLs

    Returns:
        Base64 encoded image bytes

    Raises:
        GenerationError: Unsupported format, oversized image or unreadable input
    """
    if isinstance(image, (bytes, bytearray)):
        data = _check_image_bytes(bytes(image))
        return base64.b64encode(data).decode("ascii")

    if isinstance(image, os.PathLike):
        image = os.fspath(image)

    if not isinstance(image, str) or not image:
        raise GenerationError("Image must be bytes, a path, a URL or a base64 string")

    if image.startswith("data:image/"):
        header, _, payload = image.partition(",")
        mime_type = header[len("data:"):].split(";")[0]
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise GenerationError(f"Failed to process image: {e}")
        _check_image_bytes(data, mime_type)
        return payload

    if image.startswith(("http://", "https://")):
        try:
            response = requests.get(image, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"Failed to fetch image: {e}")
        mime_type = response.headers.get("Content-Type", "").split(";")[0] or None
        data = _check_image_bytes(response.content, mime_type)
        return base64.b64encode(data).decode("ascii")

    if os.path.isfile(image):
        with open(image, "rb") as f:
            data = _check_image_bytes(f.read())
        return base64.b64encode(data).decode("ascii")

    try:
        data = base64.b64decode(image, validate=True)
    except (binascii.Error, ValueError):
        raise GenerationError("Image string is neither a file, a URL nor valid base64")
    _check_image_bytes(data)
    return image


class OllamaClient:
    """
    Client for interacting with Ollama language and vision models.

    Blocking HTTP calls run in a worker thread for the async methods
    the RAG pipeline awaits.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        default_model: str = "llama3.1:latest",
        vision_model: str = "llava:latest",
        timeout: int = 120,
        temperature: float = 0.3,
        auto_test_connection: bool = False
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama server URL
            default_model: Default text model
            vision_model: Model used for image analysis
            timeout: Request timeout in seconds
            temperature: Default sampling temperature
            auto_test_connection: Whether to test connection on init
        """
        self.base_url = base_url.rstrip('/')
        self.default_model = default_model
        self.vision_model = vision_model
        self.timeout = timeout
        self.temperature = temperature

        if auto_test_connection:
            self._test_connection()

    def _test_connection(self) -> bool:
        """Test connection to Ollama server."""
        available_models = self.list_models()
        if not available_models:
            logger.error("Cannot reach Ollama or no models installed")
            logger.info("Make sure Ollama is running: ollama serve")
            return False

        logger.info(f"Connected to Ollama. Available models: {available_models}")
        for model in (self.default_model, self.vision_model):
            if model not in available_models:
                logger.warning(f"Model '{model}' not found. Consider: ollama pull {model}")
        return True

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        images: Optional[List[str]] = None
    ) -> OllamaResponse:
        """
        Generate response using Ollama.

        Args:
            prompt: User prompt
            model: Model name (uses default if None)
            system: System prompt
            temperature: Sampling temperature (client default if None)
            max_tokens: Maximum tokens to generate
            images: Base64 encoded images for vision models

        Returns:
            OllamaResponse object

        Raises:
            GenerationError: On timeouts, connection failures and non-200 replies
        """
        model = model or self.default_model

        data: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature if temperature is None else temperature,
            }
        }

        if system:
            data["system"] = system
        if max_tokens:
            data["options"]["num_predict"] = max_tokens
        if images:
            data["images"] = images

        try:
            logger.debug(f"Sending request to Ollama: {model}")
            start_time = time.time()

            response = requests.post(
                f"{self.base_url}/api/generate",
                json=data,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.error("Ollama request timeout")
            raise GenerationError("Ollama request timeout", model=model)
        except requests.exceptions.RequestException as e:
            logger.error(f"Ollama request failed: {e}")
            raise GenerationError(f"Ollama request failed: {e}", model=model)

        if response.status_code != 200:
            logger.error(f"Ollama API error: {response.status_code} - {response.text}")
            raise GenerationError(
                f"Ollama API error: {response.status_code}",
                model=model,
                status_code=response.status_code,
            )

        result = response.json()
        logger.debug(f"Ollama response received in {time.time() - start_time:.2f}s")

        return OllamaResponse(
            content=result.get('response', ''),
            model=model,
            total_duration=result.get('total_duration'),
            load_duration=result.get('load_duration'),
            prompt_eval_count=result.get('prompt_eval_count'),
            eval_count=result.get('eval_count')
        )

    async def complete(self, prompt: str) -> str:
        """Text completion with the default model."""
        response = await asyncio.to_thread(self.generate, prompt)
        return response.content

    async def analyze_image(self, image: ImageInput, prompt: str = DEFAULT_IMAGE_PROMPT) -> str:
        """Describe an image with the vision model."""
        encoded = await asyncio.to_thread(encode_image, image, self.timeout)
        response = await asyncio.to_thread(
            self.generate,
            prompt,
            model=self.vision_model,
            images=[encoded],
        )
        return response.content

    def list_models(self) -> List[str]:
        """List available models."""
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=10)
            if response.status_code == 200:
                models = response.json().get('models', [])
                return [model['name'] for model in models]
            else:
                logger.error(f"Failed to list models: {response.status_code}")
                return []
        except requests.exceptions.RequestException as e:
            logger.error(f"Error listing models: {e}")
            return []

    def health_check(self) -> Dict[str, Any]:
        """Report reachability and which configured models are installed."""
        models = self.list_models()
        return {
            "reachable": bool(models),
            "text_model": self.default_model,
            "text_model_available": self.default_model in models,
            "vision_model": self.vision_model,
            "vision_model_available": self.vision_model in models,
        }
