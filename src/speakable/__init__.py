"""
speakable: Discord chat markup to plain text for TTS narration.

Components:
- grammar: Discord markdown + platform link matchers → AST
- renderer: AST → speakable text (mentions resolved, markup dropped)
- segments: adaptive-granularity timestamp reading
"""

from speakable.config import ConfigError, SpeakableConfig, load_config
from speakable.context import PycordGuild, ResolutionContext, StaticGuild
from speakable.renderer import Renderer, render_speakable_text

__version__ = "0.1.0"
__all__ = [
    "ConfigError",
    "PycordGuild",
    "Renderer",
    "ResolutionContext",
    "SpeakableConfig",
    "StaticGuild",
    "load_config",
    "render_speakable_text",
]
