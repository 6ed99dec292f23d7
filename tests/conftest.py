"""Pytest configuration and fixtures."""

import json
import logging

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

TOKEN_URL = "https://oauth2.example.test/token"


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def service_account(private_key_pem) -> dict:
    return {
        "type": "service_account",
        "project_id": "test-project",
        "private_key_id": "key-123",
        "private_key": private_key_pem,
        "client_email": "suggestions@test-project.iam.gserviceaccount.com",
    }


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, service_account):
    """Set up test environment variables."""
    monkeypatch.setenv("AUTH_GOOGLE_CREDENTIALS_JSON", json.dumps(service_account))
    monkeypatch.setenv("AUTH_GOOGLE_TOKEN_URL", TOKEN_URL)
    monkeypatch.setenv("EMBED_DIMENSION", "768")
    monkeypatch.setenv("RAG_QDRANT_BASE_URL", "http://qdrant.test:6333")
    monkeypatch.setenv("RAG_QDRANT_COLLECTION", "chunks")
    monkeypatch.setenv("RAG_SUPABASE_BASE_URL", "https://db.supabase.test")
    monkeypatch.setenv("RAG_SUPABASE_API_KEY", "service-role-key")
    monkeypatch.setenv("PROJECT_SUPABASE_BASE_URL", "https://db.supabase.test")
    monkeypatch.setenv("PROJECT_SUPABASE_API_KEY", "service-role-key")
    monkeypatch.setenv("API_SERVER_API_KEY", "test-api-key")
    for key in ("RAG_MATCH_THRESHOLD", "RAG_MATCH_COUNT", "RAG_NAMESPACES", "SUGGESTIONS_DEADLINE_SECONDS",
                "SUGGESTIONS_SKIP_WITHOUT_EVIDENCE", "EMBED_VERTEX_PROJECT_ID", "LLM_VERTEX_PROJECT_ID"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers={"Content-Type": "application/json"})
