"""
Shared fixtures for the BuildOps backend tests.
"""

import base64

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from buildops.bootstrap import bootstrap
from buildops.core.config import Settings
from buildops.core.domain.ports import UploadedFile
from buildops.main import create_app


@pytest.fixture
def settings():
    """Default settings; any local .env file is ignored."""
    return Settings(env_file=None)


@pytest.fixture
def container(settings):
    """A freshly wired application."""
    return bootstrap(settings)


@pytest.fixture
def quote_request():
    """Arguments for a valid quote request."""
    return {
        "customer_name": "Alice",
        "email": "alice@example.com",
        "phone": "555-123-4567",
        "service_type": "painting",
        "description": "Repaint the front office and the hallway",
    }


@pytest.fixture
def application_request():
    """Arguments for a valid job application."""
    return {
        "applicant_name": "Bob Builder",
        "email": "bob@example.com",
        "phone": "(415) 555-2671",
        "experience_level": "experienced",
        "experience_description": "Eight years of commercial concrete and framing work",
    }


@pytest.fixture
def photo():
    return UploadedFile(filename="front.jpg", content_type="image/jpeg", content=b"\xff\xd8photo")


@pytest.fixture
def resume():
    return UploadedFile(
        filename="resume.pdf", content_type="application/pdf", content=b"%PDF-1.4 resume"
    )


@pytest.fixture
def encoded_photo():
    """A photo as the API expects it: inline base64."""
    return {
        "filename": "front.jpg",
        "content_type": "image/jpeg",
        "content": base64.b64encode(b"\xff\xd8photo").decode("ascii"),
    }


@pytest.fixture
def app(container):
    return create_app(container)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client bound to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
