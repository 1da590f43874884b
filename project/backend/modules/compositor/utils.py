"""
Utility functions for compositor module.

FFmpeg command execution and availability checks.
"""
import asyncio
import shutil
from typing import List, Optional

from shared.config import settings
from shared.errors import CompositionError
from shared.logging import get_logger

logger = get_logger("compositor.utils")


def check_ffmpeg_available() -> bool:
    """
    Check if FFmpeg is installed and available in PATH.

    Returns:
        True if FFmpeg is available, False otherwise
    """
    return shutil.which(settings.ffmpeg_bin) is not None


async def run_ffmpeg_command(
    cmd: List[str],
    timeout: int = 300,
    label: Optional[str] = None
) -> None:
    """
    Run an FFmpeg command once.

    Args:
        cmd: FFmpeg command as list of strings
        timeout: Timeout in seconds (default: 300)
        label: Short description for logs

    Raises:
        CompositionError: If the command exits non-zero, times out, or cannot start
    """
    logger.info(
        f"Running FFmpeg command ({label or 'ffmpeg'}): {' '.join(cmd)}",
        extra={"command": cmd, "label": label}
    )

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise CompositionError(f"FFmpeg could not be started: {e}") from e

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise CompositionError(f"FFmpeg command timeout after {timeout}s") from e

    if process.returncode != 0:
        error_msg = stderr.decode(errors="replace") if stderr else "Unknown FFmpeg error"
        logger.error(
            f"FFmpeg command failed: {error_msg[-500:]}",
            extra={"error": error_msg[-2000:], "command": cmd, "returncode": process.returncode}
        )
        raise CompositionError(f"FFmpeg command failed (exit {process.returncode}): {error_msg[-500:]}")
