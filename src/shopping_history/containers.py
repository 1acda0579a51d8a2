"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from shopping_history.adapters.file_storage_slot import FileStorageSlot
from shopping_history.adapters.gemini_client import HttpxGeminiClient
from shopping_history.adapters.openai_client import OpenAIInferenceClient
from shopping_history.adapters.supabase_storage_slot import SupabaseStorageSlot
from shopping_history.config import Settings
from shopping_history.services.analysis import AnalysisService
from shopping_history.services.cache import InMemoryCache
from shopping_history.services.extraction import ExtractionService
from shopping_history.services.guards import InFlightGuard
from shopping_history.services.images import ImagePreprocessor
from shopping_history.services.inference import InferenceClient
from shopping_history.services.records import RecordStore, StorageSlot
from shopping_history.services.scans import ScanService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    scan_service: ScanService
    analysis_service: AnalysisService
    scan_guard: InFlightGuard
    analysis_guard: InFlightGuard
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    slot = _build_storage_slot(resolved_settings)
    inference_client, close_inference = _build_inference_client(resolved_settings)
    record_store = RecordStore(slot)
    record_store.load()
    return assemble_container(
        resolved_settings,
        record_store=record_store,
        inference_client=inference_client,
        close_resources=close_inference,
    )


def assemble_container(
    settings: Settings,
    *,
    record_store: RecordStore,
    inference_client: InferenceClient,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Wire services around an already-built store and inference client."""
    scan_service = ScanService(
        preprocessor=ImagePreprocessor(
            max_dimension=settings.max_image_dimension,
            quality=settings.image_quality,
        ),
        extraction_service=ExtractionService(inference_client),
        record_store=record_store,
        drafts=InMemoryCache(),
        draft_ttl_seconds=settings.draft_ttl_seconds,
    )
    return AppContainer(
        settings=settings,
        record_store=record_store,
        scan_service=scan_service,
        analysis_service=AnalysisService(inference_client),
        scan_guard=InFlightGuard("scan"),
        analysis_guard=InFlightGuard("analysis"),
        close_resources=close_resources,
    )


def _build_storage_slot(settings: Settings) -> StorageSlot:
    match settings.storage_backend:
        case "file":
            return FileStorageSlot.create(settings.storage_dir, settings.storage_key)
        case "supabase":
            if not settings.supabase_url or not settings.supabase_service_key:
                raise ValueError(
                    "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                    "for the supabase storage backend"
                )
            client = create_client(settings.supabase_url, settings.supabase_service_key)
            return SupabaseStorageSlot(
                client=client, key=settings.storage_key, table=settings.supabase_table
            )
        case _:
            raise ValueError(
                f"Unknown storage backend: {settings.storage_backend!r} "
                "(choose file or supabase)"
            )


def _build_inference_client(
    settings: Settings,
) -> tuple[InferenceClient, Callable[[], Awaitable[None]]]:
    match settings.inference_backend:
        case "openai":
            if not settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY is required for the openai backend")
            openai_client = OpenAIInferenceClient.create(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                reasoning_effort=settings.openai_reasoning_effort,
                store=settings.openai_store,
            )

            async def close_openai() -> None:
                await openai_client.client.close()

            return openai_client, close_openai
        case "gemini":
            if not settings.gemini_api_key:
                raise ValueError("GEMINI_API_KEY is required for the gemini backend")
            gemini_client = HttpxGeminiClient.create(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                base_url=settings.gemini_base_url,
            )
            return gemini_client, gemini_client.close
        case _:
            raise ValueError(
                f"Unknown inference backend: {settings.inference_backend!r} "
                "(choose openai or gemini)"
            )
