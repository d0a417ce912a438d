"""Narration pipeline.

Stages run strictly in order for one report:

1. `script` – translate the report into a Darija script (Bedrock).
2. `synthesis` – speak the script (ElevenLabs) and upload the MP3 (S3).
3. `orchestrator` – sequence both stages and patch the stored report.

`capability` exposes the same stages to the report assembler for in-line use.
"""

from .capability import LiveNarration, NarrationCapability, NoOpNarration
from .orchestrator import NarrationOrchestrator, audio_filename
from .script import (
    CLOSING_BLESSING,
    OPENING_GREETING,
    SEVERITY_TERMS,
    ScriptTranslator,
    build_script_prompt,
    opening_greeting,
)
from .synthesis import AUDIO_PREFIX, VOICE_SETTINGS, AudioSynthesizer
from .types import (
    DEFAULT_ADDRESSEE,
    NarrationInput,
    NarrationResult,
    NarrationTrigger,
    SynthesisResult,
)

__all__ = [
    "AUDIO_PREFIX",
    "AudioSynthesizer",
    "CLOSING_BLESSING",
    "DEFAULT_ADDRESSEE",
    "LiveNarration",
    "NarrationCapability",
    "NarrationInput",
    "NarrationOrchestrator",
    "NarrationResult",
    "NarrationTrigger",
    "NoOpNarration",
    "OPENING_GREETING",
    "SEVERITY_TERMS",
    "ScriptTranslator",
    "SynthesisResult",
    "VOICE_SETTINGS",
    "audio_filename",
    "build_script_prompt",
    "opening_greeting",
]
