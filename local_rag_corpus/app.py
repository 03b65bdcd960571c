from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .answer.extract import CONTEXT_CHARS, CONTEXT_SEPARATOR, TRUNCATION_MARKER, build_context
from .index.corpus import CorpusContext, save_corpus
from .index.schema import DocumentResult, IngestReport
from .ingest.chunk import MIN_FLUSH_CHARS, TARGET_CHARS, assemble_chunks
from .ingest.clean import split_paragraphs
from .ingest.layout import LINE_TOLERANCE
from .ingest.md_txt import parse_md_or_txt
from .ingest.pdf import parse_pdf
from .retrieve.keyword import TOP_N, extract_keywords
from .utils.log import Logger

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".md", ".txt"}

DEFAULT_SYSTEM_PROMPT = (
    "You are a friendly, helpful and concise assistant. Base your response strictly on the "
    "provided context, which is prefixed with 'CONTEXT: '. If the context does not contain "
    "the answer, say that you do not have information on that topic. Do not make up answers."
)

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "corpus_path": "data/corpus.json",
        "log_dir": "logs",
    },
    "ingest": {
        "extensions": [".pdf"],
        "target_chars": TARGET_CHARS,
        "min_flush_chars": MIN_FLUSH_CHARS,
        "line_tolerance": LINE_TOLERANCE,
        "workers": 4,
    },
    "retrieval": {
        "top_n": TOP_N,
        "context_chars": CONTEXT_CHARS,
        "separator": CONTEXT_SEPARATOR,
        "truncation_marker": TRUNCATION_MARKER,
    },
    "llm": {
        "backend": "ollama",
        "model": "tinyllama",
        "endpoint": "http://localhost:11434",
        "offline": True,
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if v is None and isinstance(out.get(k), dict):
            # "ingest:" with every key commented out
            v = {}
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def validate_config(cfg: dict) -> dict:
    for section in DEFAULT_CONFIG:
        if not isinstance(cfg.get(section), dict):
            raise ValueError(f"config section '{section}' must be a mapping")
    try:
        return _check_values(cfg)
    except TypeError as e:
        raise ValueError(f"config value has the wrong type: {e}") from e


def _check_values(cfg: dict) -> dict:
    ing = cfg["ingest"]
    ret = cfg["retrieval"]
    if int(ing["min_flush_chars"]) < 0:
        raise ValueError("ingest.min_flush_chars must be >= 0")
    if int(ing["target_chars"]) <= int(ing["min_flush_chars"]):
        raise ValueError("ingest.target_chars must be greater than ingest.min_flush_chars")
    if float(ing["line_tolerance"]) < 0:
        raise ValueError("ingest.line_tolerance must be >= 0")
    if int(ing["workers"]) < 1:
        raise ValueError("ingest.workers must be >= 1")
    if not ing["extensions"]:
        raise ValueError("ingest.extensions must list at least one suffix")
    if int(ret["top_n"]) <= 0:
        raise ValueError("retrieval.top_n must be positive")
    if int(ret["context_chars"]) <= 0:
        raise ValueError("retrieval.context_chars must be positive")
    return cfg


def load_config(path: str | Path | None = None) -> dict:
    """Defaults deep-merged with the YAML file at `path` (if it exists)."""
    cfg = deepcopy(DEFAULT_CONFIG)
    if path is not None:
        p = Path(path)
        if p.is_file():
            with open(p, "r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"Config {p} is not valid YAML: {e}") from e
            if not isinstance(data, dict):
                raise ValueError(f"Config {p} must be a YAML mapping")
            cfg = _deep_merge(cfg, data)
        else:
            logger.info("Config %s not found; using defaults", p)
    return validate_config(cfg)


def discover_documents(root: Path, extensions: Iterable[str]) -> List[Path]:
    exts = {e.lower() if e.startswith(".") else "." + e.lower() for e in extensions}
    return sorted(p for p in Path(root).rglob("*") if p.is_file() and p.suffix.lower() in exts)


def extract_text(path: Path, cfg: dict) -> str:
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return parse_pdf(path, tolerance=float(cfg["ingest"]["line_tolerance"]))
    if suffix in TEXT_SUFFIXES:
        return parse_md_or_txt(path)
    raise ValueError(f"Unsupported document type: {suffix}")


def _doc_key(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.name


def ingest_document(path: Path, root: Path, cfg: dict) -> DocumentResult:
    """
    Reconstruct -> segment -> assemble for one document. Decode failures are
    returned as a failed DocumentResult, never raised.
    """
    path = Path(path)
    key = _doc_key(path, Path(root))
    try:
        text = extract_text(path, cfg)
    except Exception as e:
        logger.warning("Skipping %s: %s", key, e)
        return DocumentResult(
            path=str(path), source_file=path.name, error=f"{type(e).__name__}: {e}"
        )

    paragraphs = split_paragraphs(text)
    chunks = assemble_chunks(
        paragraphs,
        path.name,
        target_chars=int(cfg["ingest"]["target_chars"]),
        min_flush_chars=int(cfg["ingest"]["min_flush_chars"]),
        doc_key=key,
    )
    logger.info("%s -> %d paragraphs, %d chunks", key, len(paragraphs), len(chunks))
    return DocumentResult(path=str(path), source_file=path.name, chunks=chunks)


def ingest_path(data_dir: Path, cfg: dict, workers: Optional[int] = None) -> IngestReport:
    """
    Full rebuild: ingest every document under `data_dir` and write the corpus
    file once. Each worker hands back its own DocumentResult; results are
    merged in traversal order after all of them finish.
    """
    data_dir = Path(data_dir).resolve()
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Document directory not found: {data_dir}")
    corpus_path = Path(cfg["app"]["corpus_path"]).resolve()
    log = Logger(Path(cfg["app"]["log_dir"]) / "ingest.log.jsonl")

    files = discover_documents(data_dir, cfg["ingest"]["extensions"])
    n_workers = max(1, int(workers or cfg["ingest"]["workers"]))
    logger.info("Found %d documents under %s (workers=%d)", len(files), data_dir, n_workers)

    t0 = time.perf_counter()
    if n_workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            results = list(pool.map(lambda f: ingest_document(f, data_dir, cfg), files))
    else:
        results = [ingest_document(f, data_dir, cfg) for f in files]

    report = IngestReport(documents=results, corpus_path=str(corpus_path))
    for d in report.failed:
        log.write({"event": "parse_error", "file": d.path, "error": d.error})

    save_corpus(report.chunks, corpus_path)
    log.write(
        {
            "event": "ingest_complete",
            **report.summary(),
            "corpus_path": str(corpus_path),
            "elapsed_ms": int((time.perf_counter() - t0) * 1000),
        }
    )
    return report


def retrieve_context(
    question: str,
    context: CorpusContext,
    cfg: dict,
    top_n: Optional[int] = None,
    max_chars: Optional[int] = None,
) -> str:
    ret = cfg["retrieval"]
    return context.retrieve(
        question,
        top_n=int(top_n if top_n is not None else ret["top_n"]),
        max_chars=int(max_chars if max_chars is not None else ret["context_chars"]),
        separator=str(ret["separator"]),
        truncation_marker=str(ret["truncation_marker"]),
    )


def query_text(
    question: str,
    cfg: dict,
    context: Optional[CorpusContext] = None,
    top_n: Optional[int] = None,
    max_chars: Optional[int] = None,
) -> dict:
    """
    Keyword retrieval -> budgeted context, plus a trace of what was picked.
    Loads the corpus from config when no context is passed in.
    """
    t0 = time.perf_counter()
    if context is None:
        context = CorpusContext.load(cfg["app"]["corpus_path"])

    ret = cfg["retrieval"]
    n = int(top_n if top_n is not None else ret["top_n"])
    budget = int(max_chars if max_chars is not None else ret["context_chars"])

    ranked = context.rank(question, n)
    text, used = build_context(
        [s.chunk for s in ranked],
        max_chars=budget,
        separator=str(ret["separator"]),
        truncation_marker=str(ret["truncation_marker"]),
    )
    used_ids = {c.id for c in used}

    trace = {
        "keywords": sorted(extract_keywords(question)),
        "ranked": [
            {"id": s.chunk.id, "source_file": s.chunk.source_file, "score": s.score}
            for s in ranked
        ],
        "used_ids": [s.chunk.id for s in ranked if s.chunk.id in used_ids],
        "corpus_chunks": len(context),
        "top_n": n,
        "context_chars": budget,
        "total_ms": int((time.perf_counter() - t0) * 1000),
    }
    Logger(Path(cfg["app"]["log_dir"]) / "queries.log.jsonl").write(
        {"question": question, "context_len": len(text), "trace": trace}
    )
    return {"question": question, "context": text, "trace": trace}
