# src/signature_extractor/cli.py
"""
Signature region extractor.
Crops the most signature-like region of a PDF page or page image.
"""

import argparse
import json
import logging
from pathlib import Path

from .batch import collect_inputs, run_batch
from .classify import http_classifier
from .config import debug_dir_from_settings, load_debug_settings, load_parameters


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Extract the handwritten signature region of a document page.")
    ap.add_argument("inputs", nargs="+", help="PDF/image paths, globs or directories")
    ap.add_argument("--out", "-o", default="out/signature",
                    help="Output directory for crops and the JSON summary (default: out/signature)")
    ap.add_argument("--page", type=int, default=-1,
                    help="0-based page index of PDFs, -1 = last page (default: -1)")
    ap.add_argument("--config", default="config.toml",
                    help="Path to config.toml (default: ./config.toml)")
    ap.add_argument("--workers", type=int, default=1,
                    help="Documents processed in parallel (default: 1)")
    ap.add_argument("--debug-dir", help="Write mask/overlay debug images here")
    ap.add_argument("--classify-url",
                    help="Base URL of the signature classifier; crops are POSTed to <url>/predict")
    ap.add_argument("--classify-timeout", type=float, default=30.0,
                    help="Classifier request timeout in seconds (default: 30)")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    params = load_parameters(args.config)
    debug_dir = args.debug_dir or debug_dir_from_settings(load_debug_settings(args.config))

    classifier = None
    if args.classify_url:
        classifier = http_classifier(args.classify_url, timeout=args.classify_timeout)

    files = collect_inputs(args.inputs)
    if not files:
        print("No input files found.")
        return 1

    summary_path = run_batch(
        files, Path(args.out), params,
        page_index=args.page, workers=max(1, args.workers),
        classifier=classifier, debug_dir=debug_dir,
    )
    summary = json.loads(summary_path.read_text(encoding="utf-8"))

    for r in summary["files"]:
        if r.get("error"):
            print(f"{r['file']}: ERROR - {r['error']}")
        else:
            rect = r["page_rect"]
            print(f"{r['file']} -> {r['strategy']}"
                  f"{' (low confidence)' if r['low_confidence'] else ''} "
                  f"box=({rect['x0']},{rect['y0']})-({rect['x1']},{rect['y1']}) "
                  f"| {r['signature_box_path']}")
            verdict = r.get("classification")
            if verdict is not None:
                if verdict.get("error"):
                    print(f"  classification: ERROR - {verdict['error']}")
                else:
                    print(f"  classification: {verdict['label']} "
                          f"(p_real={verdict['p_real']:.3f}, threshold={verdict['threshold_used']})")
    print(f"Summary: {summary_path}")
    return 1 if summary["overall"]["error_count"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
