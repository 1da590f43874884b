"""
Speech synthesizer module.

Turns scene narration into audio through an external text-to-speech API.
"""

from modules.speech_synthesizer.client import SmallestAISynthesizer, probe_media_duration

__all__ = ["SmallestAISynthesizer", "probe_media_duration"]
