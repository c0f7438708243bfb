from fastapi import Depends

from examprep.clients.gemini_client import GeminiTextGenerator
from examprep.clients.storage_client import StorageClient
from examprep.config import config
from examprep.exceptions import ConfigurationError
from examprep.services.chat_service import ExamChatService
from examprep.services.extraction_service import TextExtractionService
from examprep.services.paper_repository import PaperRepository
from examprep.services.pdf_text_service import PdfTextExtractor

MISSING_CREDENTIALS = "Server configuration error. Missing database credentials."
MISSING_STORAGE = "Server configuration error. Missing storage credentials."


def get_paper_repository():
    """Record store dependency; fails with 500 when the database is not configured"""
    if not config.DATABASE_URL:
        raise ConfigurationError(MISSING_CREDENTIALS)
    return PaperRepository(config.DATABASE_URL)


def get_optional_paper_repository():
    if not config.DATABASE_URL:
        return None
    return PaperRepository(config.DATABASE_URL)


def get_storage_client():
    if not config.STORAGE_URL or not config.STORAGE_SERVICE_KEY:
        raise ConfigurationError(MISSING_STORAGE)
    return StorageClient(config.STORAGE_URL, config.STORAGE_SERVICE_KEY, config.STORAGE_TIMEOUT)


def get_pdf_extractor():
    return PdfTextExtractor()


def get_text_generator():
    return GeminiTextGenerator()


def get_extraction_service(
    repository=Depends(get_paper_repository),
    storage=Depends(get_storage_client),
    extractor=Depends(get_pdf_extractor),
) -> TextExtractionService:
    return TextExtractionService(repository, storage, extractor)


def get_chat_service(
    generator=Depends(get_text_generator),
    repository=Depends(get_optional_paper_repository),
) -> ExamChatService:
    return ExamChatService(generator, api_key=config.GEMINI_API_KEY, repository=repository)
