import sys
from types import SimpleNamespace

import pytest
import requests

import llm_client
import llm_loader
from errors import LLMError
from llm_client import HttpChatClient, TransformersChatClient, build_llm_client

MESSAGES = [{"role": "user", "content": "hi"}]


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.payload


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def install(response):
        def fake_post(url, json=None, headers=None, timeout=None):
            calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(llm_client.requests, "post", fake_post)
        return calls

    return install


def test_chat_returns_message_content(captured):
    calls = captured(FakeResponse({"choices": [{"message": {"content": "  hello  "}}]}))
    client = HttpChatClient(api_base="http://llm:8000/v1/", model="m", timeout=5)

    assert client.chat(MESSAGES) == "hello"
    assert calls[0]["url"] == "http://llm:8000/v1/chat/completions"
    assert calls[0]["json"]["model"] == "m"
    assert "response_format" not in calls[0]["json"]
    assert calls[0]["timeout"] == 5


def test_json_mode_requests_json_object(captured):
    calls = captured(FakeResponse({"choices": [{"message": {"content": "{}"}}]}))
    HttpChatClient(api_base="http://llm", api_key="k").chat(MESSAGES, json_mode=True)
    assert calls[0]["json"]["response_format"] == {"type": "json_object"}
    assert calls[0]["headers"]["Authorization"] == "Bearer k"


def test_completion_style_payload(captured):
    captured(FakeResponse({"choices": [{"text": "legacy"}]}))
    assert HttpChatClient(api_base="http://llm").chat(MESSAGES) == "legacy"


def test_http_error_raises_llm_error(captured):
    captured(FakeResponse({}, status_code=503))
    with pytest.raises(LLMError, match="503"):
        HttpChatClient(api_base="http://llm").chat(MESSAGES)


def test_network_error_raises_llm_error(captured):
    captured(requests.ConnectionError("connection refused"))
    with pytest.raises(LLMError, match="connection refused"):
        HttpChatClient(api_base="http://llm").chat(MESSAGES)


def test_unexpected_payload_raises_llm_error(captured):
    captured(FakeResponse({"result": "?"}))
    with pytest.raises(LLMError, match="Unexpected response format"):
        HttpChatClient(api_base="http://llm").chat(MESSAGES)


@pytest.mark.parametrize("payload", [
    {"choices": None},
    {"choices": [{"text": None}]},
    {"choices": [{"message": None}]},
    ["not", "an", "object"],
])
def test_malformed_payload_raises_llm_error(captured, payload):
    captured(FakeResponse(payload))
    with pytest.raises(LLMError, match="Unexpected response format"):
        HttpChatClient(api_base="http://llm").chat(MESSAGES)


def test_build_llm_client():
    assert isinstance(build_llm_client("http"), HttpChatClient)
    assert isinstance(build_llm_client("transformers"), TransformersChatClient)
    with pytest.raises(ValueError):
        build_llm_client("carrier-pigeon")


class FakeModelClass:
    """Stands in for AutoModelForCausalLM; fails for the device maps listed in `failing`."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.device_maps = []

    def from_pretrained(self, name, dtype=None, device_map=None, trust_remote_code=False):
        self.device_maps.append(device_map)
        if device_map in self.failing:
            raise RuntimeError(f"CUDA out of memory on {device_map}")
        return SimpleNamespace(eval=lambda: None, dtype=dtype)


@pytest.fixture
def gpu_backend(monkeypatch):
    torch = SimpleNamespace(float16="float16", float32="float32",
                            cuda=SimpleNamespace(is_available=lambda: True))
    tokenizer_class = SimpleNamespace(from_pretrained=lambda name, trust_remote_code=False: "tokenizer")

    def install(model_class):
        monkeypatch.setattr(llm_loader, "_import_backend", lambda: (torch, tokenizer_class, model_class))
        monkeypatch.setattr(llm_loader, "_accelerate_installed", lambda: True)
        return model_class

    return install


def test_load_llm_uses_gpu_when_available(gpu_backend):
    model_class = gpu_backend(FakeModelClass())
    tokenizer, model = llm_loader.load_llm("tiny")
    assert tokenizer == "tokenizer"
    assert model.dtype == "float16"
    assert model_class.device_maps == ["auto"]


def test_load_llm_retries_failed_gpu_load_on_cpu(gpu_backend):
    model_class = gpu_backend(FakeModelClass(failing={"auto"}))
    _, model = llm_loader.load_llm("tiny")
    assert model_class.device_maps == ["auto", "cpu"]
    assert model.dtype == "float32"


def test_load_llm_cpu_failure_raises_llm_error(gpu_backend):
    gpu_backend(FakeModelClass(failing={"auto", "cpu"}))
    with pytest.raises(LLMError, match="on CPU"):
        llm_loader.load_llm("tiny")


def test_load_llm_without_accelerate_goes_straight_to_cpu(gpu_backend, monkeypatch):
    model_class = gpu_backend(FakeModelClass())
    monkeypatch.setattr(llm_loader, "_accelerate_installed", lambda: False)
    llm_loader.load_llm("tiny")
    assert model_class.device_maps == ["cpu"]


def test_missing_torch_raises_llm_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "torch", None)
    with pytest.raises(LLMError, match="pip install"):
        llm_loader.load_llm("tiny")


def test_local_load_failure_raises_llm_error(monkeypatch):
    def broken(model_name, force_cpu=False):
        raise RuntimeError("Failed to load the model on CPU")

    monkeypatch.setattr(llm_loader, "load_llm", broken)
    with pytest.raises(LLMError, match="Failed to load the model on CPU"):
        TransformersChatClient(model_name="tiny").chat(MESSAGES)


def test_local_generation_failure_raises_llm_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "torch", None)
    client = TransformersChatClient(model_name="tiny")
    client._tokenizer, client._model = object(), object()
    with pytest.raises(LLMError, match="Local generation failed"):
        client.chat(MESSAGES)
