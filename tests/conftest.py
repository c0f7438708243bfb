"""Shared fixtures: stub collaborators and a TestClient wired to them."""

import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("GEMINI_API_KEY", "test-key")

from examprep.api import dependencies
from examprep.app import app
from examprep.config import config
from examprep.models.paper import Paper
from examprep.services.paper_repository import InMemoryPaperRepository
from stubs import STRUCTURED_REPLY, StubExtractor, StubGenerator, StubStorage


@pytest.fixture
def paper():
    return Paper(
        id="paper-1",
        paper_file_url="2023/maths/paper1.pdf",
        marking_scheme_file_url="2023/maths/paper1-ms.pdf",
        title="Mathematics Paper 1",
        year=2023,
        paper_number="1",
    )


@pytest.fixture
def repository(paper):
    return InMemoryPaperRepository(papers=[paper])


@pytest.fixture
def storage():
    return StubStorage()


@pytest.fixture
def extractor():
    return StubExtractor()


@pytest.fixture
def generator():
    return StubGenerator(reply=STRUCTURED_REPLY)


@pytest.fixture
def structured_reply():
    return STRUCTURED_REPLY


@pytest.fixture
def client(monkeypatch, repository, storage, extractor, generator):
    """TestClient with every external collaborator replaced by a stub."""
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    app.dependency_overrides[dependencies.get_paper_repository] = lambda: repository
    app.dependency_overrides[dependencies.get_optional_paper_repository] = lambda: repository
    app.dependency_overrides[dependencies.get_storage_client] = lambda: storage
    app.dependency_overrides[dependencies.get_pdf_extractor] = lambda: extractor
    app.dependency_overrides[dependencies.get_text_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
