import pytest

from poll.infra.backend_factory import build_backend
from poll.infra.Document_Store import InMemoryDocumentStore
from poll.infra.Poll_Backend import LocalBackend, RemoteBackend
from poll.infra.Remote_Document_Store import RemoteDocumentStore
from poll.utilities import config


def test_local_backend_uses_given_file(tmp_path):
    backend = build_backend("local", store_file=tmp_path / "store.json")
    assert isinstance(backend, LocalBackend)
    assert backend.storage.path == tmp_path / "store.json"


def test_memory_backend():
    backend = build_backend("memory")
    assert isinstance(backend, RemoteBackend)
    assert isinstance(backend.store, InMemoryDocumentStore)


def test_remote_backend_needs_url(monkeypatch):
    monkeypatch.setattr(config, "FIREBASE_DATABASE_URL", "")
    with pytest.raises(ValueError):
        build_backend("remote")


def test_remote_backend_from_config(monkeypatch):
    monkeypatch.setattr(config, "FIREBASE_DATABASE_URL", "https://poll-test.example.com/")
    monkeypatch.setattr(config, "FIREBASE_AUTH", "")
    backend = build_backend("remote")
    assert isinstance(backend.store, RemoteDocumentStore)
    assert backend.store.base_url == "https://poll-test.example.com"
    backend.close()


def test_default_kind_comes_from_config(monkeypatch):
    monkeypatch.setattr(config, "POLL_BACKEND", "memory")
    assert isinstance(build_backend().store, InMemoryDocumentStore)


def test_unknown_kind():
    with pytest.raises(ValueError):
        build_backend("sqlite")
