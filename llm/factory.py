from .base import LLM
from .ollama import OllamaLLM


def is_local_endpoint(endpoint: str) -> bool:
    return endpoint.startswith("http://localhost") or endpoint.startswith("http://127.0.0.1")


def make_llm(
    backend: str = "ollama",
    model: str = "tinyllama",
    endpoint: str = "http://localhost:11434",
    offline: bool = True,
    keep_alive: str | None = None,
) -> LLM:
    backend = (backend or "ollama").lower()

    # Offline guard: only allow localhost endpoints
    if offline and not is_local_endpoint(endpoint):
        raise RuntimeError(f"Offline mode: refusing non-local endpoint: {endpoint}")

    if backend == "ollama":
        return OllamaLLM(model=model, endpoint=endpoint, keep_alive=keep_alive)

    raise RuntimeError(f"Unsupported backend: {backend}")


def make_llm_from_config(cfg: dict) -> LLM:
    llm_cfg = cfg.get("llm", {}) or {}
    return make_llm(
        backend=llm_cfg.get("backend", "ollama"),
        model=llm_cfg.get("model", "tinyllama"),
        endpoint=llm_cfg.get("endpoint", "http://localhost:11434"),
        offline=bool(llm_cfg.get("offline", True)),
        keep_alive=llm_cfg.get("keep_alive"),
    )
