import pytest

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort, require_capability
from tests.fakes import FakeEcm


def test_lookup_returns_none_for_unregistered_capability():
    registry = CapabilityRegistry()
    assert registry.lookup(CapabilityKind.CONTENT) is None
    assert registry.search() is None
    assert registry.available() == set()


def test_register_and_unregister_capability():
    provider = FakeEcm()
    registry = CapabilityRegistry({CapabilityKind.SEARCH: provider})
    assert registry.search() is provider
    assert registry.available() == {CapabilityKind.SEARCH}

    registry.unregister(CapabilityKind.SEARCH)
    assert registry.search() is None


def test_register_rejects_object_without_contract():
    registry = CapabilityRegistry()
    with pytest.raises(TypeError):
        registry.register(CapabilityKind.PERMISSION, object())


def test_require_capability_raises_when_missing():
    with pytest.raises(Exception) as exc:
        require_capability(None, CapabilityKind.CONTENT, "upload_content")
    assert exc.value.status_code == 424
    payload = exc.value.detail
    assert payload["code"] == "capability_unavailable"
    assert payload["detail"]["capability"] == "content"
    assert payload["detail"]["operation"] == "upload_content"


def test_require_capability_returns_port():
    provider = FakeEcm()
    assert require_capability(provider, CapabilityKind.CONTENT, "upload_content") is provider


async def test_best_effort_swallows_provider_failure():
    provider = FakeEcm(failing={"remove_from_index"})
    outcome = await best_effort(CapabilityKind.SEARCH, "remove_from_index", lambda: provider.remove_from_index("d1"))
    assert outcome.ok is False
    assert "remove_from_index failed" in outcome.error
    assert provider.operations() == ["remove_from_index"]


async def test_best_effort_keeps_call_result():
    provider = FakeEcm()

    async def _store():
        return await provider.store_content("d1", b"abc", "text/plain")

    outcome = await best_effort(CapabilityKind.CONTENT, "store_content", _store)
    assert outcome.ok is True
    assert outcome.value == "fake://content/d1"
