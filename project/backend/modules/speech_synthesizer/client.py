"""
Speech synthesis client.

Calls the Smallest.ai "waves" text-to-speech API and probes the duration of
the returned audio with ffprobe.
"""
import asyncio
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx

from shared.config import settings
from shared.errors import ConfigError, SynthesisError
from shared.logging import get_logger
from shared.models.scene import Speaker

logger = get_logger("speech_synthesizer.client")


class SmallestAISynthesizer:
    """Text-to-speech over HTTP, one request per narration."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        sample_rate: Optional[int] = None,
        speed: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize synthesizer.

        Args:
            api_key: Bearer token (defaults to SMALLEST_API_KEY)
            base_url: API base URL (defaults to TTS_BASE_URL)
            sample_rate: Output sample rate in Hz
            speed: Speaking rate multiplier
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used by tests

        Raises:
            ConfigError: If no API key is available
        """
        self.api_key = api_key or settings.smallest_api_key
        if not self.api_key:
            raise ConfigError("SMALLEST_API_KEY is required for speech synthesis")
        self.base_url = (base_url or settings.tts_base_url).rstrip("/")
        self.sample_rate = sample_rate or settings.tts_sample_rate
        self.speed = speed if speed is not None else settings.tts_speed
        self.timeout = timeout or settings.tts_timeout_seconds
        self._transport = transport

    @property
    def voice_settings(self) -> Dict[str, Any]:
        """Request parameters that shape the audio besides text and speaker."""
        return {"sample_rate": self.sample_rate, "speed": self.speed}

    async def synthesize(self, text: str, speaker: Speaker) -> bytes:
        """
        Synthesize narration for one speaker.

        Args:
            text: Narration text
            speaker: Speaker whose voice and model are used

        Returns:
            WAV bytes (with header)

        Raises:
            SynthesisError: On HTTP failure, non-2xx status, or empty body
        """
        url = f"{self.base_url}/{speaker.model}/get_speech"
        payload = {
            "text": text.strip(),
            "voice_id": speaker.voice,
            "sample_rate": self.sample_rate,
            "speed": self.speed,
            "add_wav_header": True,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise SynthesisError(f"Speech API request failed: {e}") from e

        if response.status_code >= 400:
            raise SynthesisError(
                f"Speech API error: {response.status_code} {response.reason_phrase} - {response.text[:300]}"
            )

        audio = response.content
        if not audio:
            raise SynthesisError("Received empty audio buffer from speech API")

        logger.debug(
            f"Synthesized {len(audio)} bytes for speaker {speaker.id}",
            extra={"speaker": speaker.id, "size": len(audio), "model": speaker.model}
        )
        return audio

    async def probe_duration(self, audio_path: Union[str, Path]) -> float:
        """
        Duration of an audio file in seconds.

        Returns 0.0 when ffprobe fails, which the compositor treats as
        "no audio" for the scene.
        """
        return await probe_media_duration(audio_path)


async def probe_media_duration(media_path: Union[str, Path], timeout: float = 10) -> float:
    """
    Get media duration using ffprobe.

    Args:
        media_path: Path to audio or video file
        timeout: Seconds to wait before ffprobe is killed

    Returns:
        Duration in seconds, 0.0 if it cannot be determined
    """
    cmd = [
        settings.ffprobe_bin,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(media_path)
    ]
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        logger.warning(f"ffprobe unavailable for {media_path}: {e}", extra={"media_path": str(media_path)})
        return 0.0

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning(f"ffprobe timed out after {timeout}s for {media_path}", extra={"media_path": str(media_path)})
        return 0.0

    if process.returncode != 0:
        logger.warning(
            f"ffprobe failed for {media_path}: {stderr.decode(errors='replace')[:300]}",
            extra={"media_path": str(media_path), "returncode": process.returncode}
        )
        return 0.0

    try:
        duration = float(stdout.decode().strip())
    except ValueError:
        logger.warning(f"Unparseable duration for {media_path}: {stdout!r}", extra={"media_path": str(media_path)})
        return 0.0
    return max(duration, 0.0)
