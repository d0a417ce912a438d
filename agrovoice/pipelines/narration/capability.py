"""Narration capability injected into the report assembler.

``NoOpNarration`` is the default for report generation: narration is
deferred to a separate trigger so the report response never waits on the
script model or the TTS provider. ``LiveNarration`` narrates in-line.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .script import ScriptTranslator
from .synthesis import AudioSynthesizer
from .types import NarrationInput


class NarrationCapability(ABC):
    enabled: bool = True

    @abstractmethod
    async def script(self, narration_input: NarrationInput) -> str:
        ...

    @abstractmethod
    async def audio(self, script: str, *, filename: str) -> str:
        ...


class NoOpNarration(NarrationCapability):
    enabled = False

    async def script(self, narration_input: NarrationInput) -> str:
        return ""

    async def audio(self, script: str, *, filename: str) -> str:
        return ""


class LiveNarration(NarrationCapability):
    def __init__(self, translator: ScriptTranslator, synthesizer: AudioSynthesizer) -> None:
        self._translator = translator
        self._synthesizer = synthesizer

    async def script(self, narration_input: NarrationInput) -> str:
        return await self._translator.translate(narration_input)

    async def audio(self, script: str, *, filename: str) -> str:
        result = await self._synthesizer.synthesize(script, filename=filename)
        return result.audio_url


__all__ = ["NarrationCapability", "NoOpNarration", "LiveNarration"]
