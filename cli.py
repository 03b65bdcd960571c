#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from local_rag_corpus.app import ingest_path, load_config, query_text
from local_rag_corpus.index.corpus import CorpusContext
from local_rag_corpus.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="local-rag-corpus",
        description="Build a keyword-searchable chunk corpus from PDFs and serve grounded context.",
    )
    # Global logging flags
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logs (to stderr).")
    parser.add_argument("--quiet", "-q", action="store_true", help="Reduce logs to WARN and above.")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines (stderr).")
    parser.add_argument("--config", type=str, default="config.yaml")

    sub = parser.add_subparsers(dest="cmd", required=True)

    # -----------------------
    # ingest
    # -----------------------
    p_ing = sub.add_parser("ingest", help="Rebuild the corpus from a folder of documents")
    p_ing.add_argument("path", type=str, help="Folder scanned recursively for documents")
    p_ing.add_argument("--workers", type=int, default=None, help="Parallel documents (default from config)")

    # -----------------------
    # query
    # -----------------------
    p_q = sub.add_parser("query", help="Print the retrieved context for a question")
    p_q.add_argument("question", type=str, help="Your question string")
    p_q.add_argument("--k", type=int, default=None, help="Max chunks in the context (default from config)")
    p_q.add_argument(
        "--max-context-chars", type=int, default=None, help="Context budget in characters (default from config)"
    )
    p_q.add_argument("--show-trace", action="store_true", help="Also print keywords and chunk scores")
    p_q.add_argument(
        "--synthesize", action="store_true", help="Hand the context to the local LLM and print its answer"
    )

    # -----------------------
    # serve
    # -----------------------
    p_s = sub.add_parser("serve", help="Load the corpus once and serve the HTTP API")
    p_s.add_argument("--host", type=str, default="127.0.0.1")
    p_s.add_argument("--port", type=int, default=5000)
    return parser


def _cmd_ingest(args, cfg) -> int:
    data_path = Path(args.path)
    logger.info("Starting ingest: %s", data_path.resolve())
    report = ingest_path(data_path, cfg, workers=args.workers)
    for d in report.documents:
        if d.ok:
            print(f"[OK]    {d.source_file} -> {len(d.chunks)} chunks")
        else:
            print(f"[ERROR] {d.source_file}: {d.error}")
    s = report.summary()
    print(
        f"\nDONE. {s['chunks']} chunks from {s['succeeded']}/{s['documents']} documents "
        f"saved to: {report.corpus_path}"
    )
    return 0


def _cmd_query(args, cfg) -> int:
    context = CorpusContext.load(cfg["app"]["corpus_path"])
    res = query_text(args.question, cfg, context=context, top_n=args.k, max_chars=args.max_context_chars)

    print("\n=== CONTEXT ===")
    print(res["context"] or "(no matching chunks)")

    if args.show_trace:
        trace = res["trace"]
        print("\n=== TRACE ===")
        print(f"keywords: {trace['keywords']}")
        for r in trace["ranked"]:
            mark = "*" if r["id"] in trace["used_ids"] else " "
            print(f"{mark} {r['score']:>3}  {r['source_file']}  {r['id']}")

    if args.synthesize:
        from llm.factory import make_llm_from_config
        from llm.prompt import answer_question

        llm = make_llm_from_config(cfg)
        answer = answer_question(llm, args.question, res["context"], cfg["llm"]["system_prompt"])
        print("\n=== ANSWER ===")
        print(answer)
    return 0


def _cmd_serve(args, cfg) -> int:
    import uvicorn

    from web.app import create_app

    # Loaded once for the life of the process; handlers only read it.
    context = CorpusContext.load(cfg["app"]["corpus_path"])
    app = create_app(context, cfg)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # ----- logging setup -----
    if args.verbose and args.quiet:
        print("Cannot use --verbose and --quiet together.", file=sys.stderr)
        return 2
    if args.verbose:
        setup_logging(level="DEBUG", json_logs=args.log_json)
    elif args.quiet:
        setup_logging(level="WARNING", json_logs=args.log_json)
    else:
        setup_logging(level=None, json_logs=args.log_json)
    logger.debug("CLI args parsed: %s", vars(args))

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error("Invalid config %s: %s", args.config, e)
        return 2

    handlers = {"ingest": _cmd_ingest, "query": _cmd_query, "serve": _cmd_serve}
    try:
        return handlers[args.cmd](args, cfg)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2
    except Exception as e:
        logger.exception("%s failed: %s", args.cmd, e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
