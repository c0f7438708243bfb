from fastapi import APIRouter, Depends
from examprep.api.dependencies import get_paper_repository
from examprep.exceptions import NotFoundError
from examprep.models.paper import PaperContext
from examprep.services.context_service import build_paper_context

router = APIRouter()


@router.get("/papers/{paper_id}/extraction", response_model=PaperContext)
def paper_extraction(paper_id: str, repository=Depends(get_paper_repository)):
    """Extraction status of a paper plus the context to send with chat questions"""
    paper = repository.get_paper(paper_id)
    if paper is None:
        raise NotFoundError("Exam paper not found")
    return build_paper_context(paper)
