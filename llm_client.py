# llm_client.py
"""
Chat-completion clients used by the generator and the narrator.

Every client exposes chat(messages, json_mode=False) -> str where messages is a
list of {"role": "system" | "user", "content": str}.
"""
import logging

import requests

import config
import llm_loader
from errors import LLMError

logger = logging.getLogger(__name__)


class HttpChatClient:
    """Talks to an HTTP server exposing an OpenAI-compatible /chat/completions endpoint."""

    def __init__(self, api_base: str = None, model: str = None, api_key: str = None, timeout: int = None):
        self.api_base = api_base or config.LLM_API_BASE
        self.model = model or config.LLM_MODEL
        self.api_key = api_key or config.LLM_API_KEY
        self.timeout = timeout or config.LLM_TIMEOUT

    def chat(self, messages, json_mode: bool = False, temperature: float = 0.0, max_tokens: int = 1024) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.api_base.rstrip('/')}/chat/completions"
        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            j = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise LLMError(f"Model request failed: {e}") from e

        return _reply_text(j)


def _reply_text(payload) -> str:
    """Chat-style choices[0].message.content, then completion-style text fields."""
    choices = payload.get("choices") if isinstance(payload, dict) else None
    first = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], dict) else {}
    message = first.get("message")

    for candidate in (
        message.get("content") if isinstance(message, dict) else None,
        first.get("text"),
        payload.get("text") if isinstance(payload, dict) else None,
    ):
        if isinstance(candidate, str):
            return candidate.strip()
    raise LLMError("Unexpected response format from model server")


class TransformersChatClient:
    """Runs a local HuggingFace model. The model is loaded on first use."""

    def __init__(self, model_name: str = None, force_cpu: bool = False, max_new_tokens: int = 256):
        self.model_name = model_name or config.LLM_LOCAL_MODEL
        self.force_cpu = force_cpu
        self.max_new_tokens = max_new_tokens
        self._tokenizer = None
        self._model = None

    def _load(self):
        if self._model is None:
            try:
                self._tokenizer, self._model = llm_loader.load_llm(self.model_name, force_cpu=self.force_cpu)
            except LLMError:
                raise
            except Exception as e:
                raise LLMError(f"Failed to load local model {self.model_name}: {e}") from e
        return self._tokenizer, self._model

    def chat(self, messages, json_mode: bool = False, temperature: float = 0.1) -> str:
        # json_mode is carried by the prompt itself; local generation has no response_format
        tokenizer, model = self._load()
        try:
            import torch

            text = tokenizer.apply_chat_template(
                messages,
                tokenize=False,
                add_generation_prompt=True
            )
            inputs = tokenizer(text, return_tensors="pt").to(model.device)

            with torch.no_grad():
                output = model.generate(
                    **inputs,
                    max_new_tokens=self.max_new_tokens,
                    do_sample=temperature > 0,
                    temperature=temperature,
                    top_p=0.9
                )
            reply = tokenizer.decode(
                output[0][inputs["input_ids"].shape[-1]:],
                skip_special_tokens=True
            )
        except Exception as e:
            raise LLMError(f"Local generation failed: {e}") from e

        return (reply or "").strip()


def build_llm_client(backend: str = None):
    backend = (backend or config.LLM_BACKEND).lower()
    if backend == "http":
        return HttpChatClient()
    if backend == "transformers":
        return TransformersChatClient()
    raise ValueError(f"Unsupported LLM backend: {backend}")


if __name__ == "__main__":
    client = build_llm_client()
    msgs = [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "Say hello in one sentence."},
    ]
    print(client.chat(msgs))
