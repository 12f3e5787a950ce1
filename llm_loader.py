# Local HuggingFace chat model for the "transformers" backend.
# Every failure here surfaces as LLMError so a turn can record it.

import logging

import config
from errors import LLMError

logger = logging.getLogger(__name__)

INSTALL_HINT = "Install the local backend with: pip install '.[local]'"


def _import_backend():
    try:
        import torch
        from transformers import AutoModelForCausalLM, AutoTokenizer
    except ImportError as e:
        raise LLMError(f"Local model backend unavailable ({e.name or e}). {INSTALL_HINT}") from e
    return torch, AutoTokenizer, AutoModelForCausalLM


def _accelerate_installed() -> bool:
    try:
        import accelerate  # noqa: F401
    except ImportError:
        return False
    return True


def pick_device(torch, force_cpu: bool = False):
    """(dtype, device_map) for this machine.

    GPU placement needs CUDA and `accelerate` (device_map="auto"); anything
    else runs in float32 on CPU.
    """
    if force_cpu or not torch.cuda.is_available():
        return torch.float32, "cpu"
    if not _accelerate_installed():
        logger.warning("CUDA is available but `accelerate` is not installed; loading on CPU")
        return torch.float32, "cpu"
    return torch.float16, "auto"


def load_llm(model_name: str = None, force_cpu: bool = False):
    """Load (tokenizer, model) for `model_name`, defaulting to LLM_LOCAL_MODEL.

    A failed GPU load is retried once on CPU before giving up.
    """
    model_name = model_name or config.LLM_LOCAL_MODEL
    torch, AutoTokenizer, AutoModelForCausalLM = _import_backend()

    try:
        tokenizer = AutoTokenizer.from_pretrained(model_name, trust_remote_code=True)
    except Exception as e:
        raise LLMError(f"Failed to load tokenizer for {model_name}: {e}") from e

    dtype, device_map = pick_device(torch, force_cpu)
    logger.info("Loading %s on %s", model_name, device_map)
    try:
        model = AutoModelForCausalLM.from_pretrained(
            model_name, dtype=dtype, device_map=device_map, trust_remote_code=True
        )
    except Exception as e:
        if device_map == "cpu":
            raise LLMError(f"Failed to load {model_name} on CPU: {e}") from e
        logger.warning("GPU load of %s failed (%s); retrying on CPU", model_name, e)
        try:
            model = AutoModelForCausalLM.from_pretrained(
                model_name, dtype=torch.float32, device_map="cpu", trust_remote_code=True
            )
        except Exception as cpu_error:
            raise LLMError(f"Failed to load {model_name} on CPU: {cpu_error}") from cpu_error

    model.eval()
    return tokenizer, model
