import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from examprep.api.dependencies import get_extraction_service
from examprep.exceptions import ExamPrepError
from examprep.models.paper import ExtractionRequest, ExtractionResponse
from examprep.services.extraction_service import TextExtractionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/extract-pdf-text", response_model=ExtractionResponse)
def extract_pdf_text(
    request: ExtractionRequest,
    service: TextExtractionService = Depends(get_extraction_service),
):
    """
    Extract text from a paper's PDF and marking scheme.
    Responds 200 when any text was extracted and 500 when none was.
    """
    try:
        result = service.extract(request.paper_id)
    except ExamPrepError:
        raise
    except Exception as e:
        logger.error("Error in extract-pdf-text: %s", e)
        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred during PDF text extraction",
                "details": str(e),
            },
        )

    return JSONResponse(
        status_code=200 if result.success else 500,
        content=result.model_dump(by_alias=True),
    )
