"""Service layer helpers for external integrations."""

from .elevenlabs import ElevenLabsClient, get_elevenlabs_client
from .llm_client import BedrockLlmClient, get_bedrock_client
from .openai_client import OpenAIJsonClient, get_openai_client
from .report_repository import SqlAlchemyReportStore, get_report_store
from .storage import S3ArtifactStore, get_artifact_store

__all__ = [
    "BedrockLlmClient",
    "get_bedrock_client",
    "ElevenLabsClient",
    "get_elevenlabs_client",
    "OpenAIJsonClient",
    "get_openai_client",
    "S3ArtifactStore",
    "get_artifact_store",
    "SqlAlchemyReportStore",
    "get_report_store",
]
