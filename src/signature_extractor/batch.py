# src/signature_extractor/batch.py

import glob
import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import cv2

from .classify import Classifier, classify_crop
from .config import Parameters
from .detector import extract_signature
from .render import IMAGE_SUFFIXES, PDF_SUFFIXES, load_page

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = PDF_SUFFIXES | IMAGE_SUFFIXES


def collect_inputs(patterns: Iterable[str]) -> List[Path]:
    """Expands globs and directories into a sorted, de-duplicated file list."""
    found = set()
    for p in patterns:
        if os.path.isdir(p):
            found.update(
                Path(p) / f for f in os.listdir(p)
                if os.path.splitext(f)[1].lower() in SUPPORTED_SUFFIXES
            )
            continue
        matches = glob.glob(p)
        found.update(Path(m) for m in (matches if matches else [p]))
    return sorted(found)


def unique_stems(paths: Iterable[Path]) -> List[str]:
    """Output names per input; repeated stems get _2, _3, ... in input order."""
    used = set()
    names = []
    for p in paths:
        name, n = p.stem, 1
        while name in used:
            n += 1
            name = f"{p.stem}_{n}"
        used.add(name)
        names.append(name)
    return names


def process_file(
    path: Path,
    out_dir: Path,
    params: Parameters,
    page_index: int = -1,
    classifier: Optional[Classifier] = None,
    debug_dir: Optional[str] = None,
    name: Optional[str] = None,
) -> Dict:
    """
    Runs one document end to end and returns its summary row. `name` is the
    output stem, the file stem by default.
    """
    name = name or path.stem
    page = load_page(path, page_index, params.render_scale)
    result = extract_signature(
        page.image, page.text_items, page.viewport, params,
        debug_dir=debug_dir, debug_name=name,
    )

    crop_path = out_dir / f"{name}_signature.png"
    if not cv2.imwrite(str(crop_path), result.image):
        raise IOError(f"Failed to save image to {crop_path}")

    row = {
        "file": path.name,
        "path": str(path),
        "page": page.page_number,
        "signature_box_path": str(crop_path),
        **result.summary(),
    }
    if classifier is not None:
        verdict = classify_crop(
            classifier, result.image, params.classifier_threshold, params.classifier_tta
        )
        row["classification"] = verdict.as_dict()
    return row


def _process_safely(path: Path, out_dir: Path, params: Parameters, page_index: int,
                    classifier: Optional[Classifier], debug_dir: Optional[str],
                    name: Optional[str] = None) -> Dict:
    try:
        row = process_file(path, out_dir, params, page_index, classifier, debug_dir, name)
        logger.info("[%s] -> %s | Box: %s", path.name, row["strategy"], row["signature_box_path"])
        return row
    except Exception as e:
        logger.error("ERROR processing %s: %s", path, e)
        return {"file": path.name, "path": str(path), "strategy": "error", "signature_box_path": None, "error": str(e)}


def run_batch(
    inputs: Iterable[Path],
    out_root: Path,
    params: Optional[Parameters] = None,
    page_index: int = -1,
    workers: int = 1,
    classifier: Optional[Classifier] = None,
    debug_dir: Optional[str] = None,
) -> Path:
    """
    Extracts the signature crop of every input into `out_root` and writes
    `signature_summary_all.json` plus `signature_errors.json`.
    Returns the summary path.
    """
    params = params or Parameters()
    out_root = Path(out_root)
    out_root.mkdir(parents=True, exist_ok=True)
    inputs = [Path(p) for p in inputs]
    names = unique_stems(inputs)

    def work(p: Path, name: str) -> Dict:
        return _process_safely(p, out_root, params, page_index, classifier, debug_dir, name)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            rows = list(pool.map(work, inputs, names))
    else:
        rows = [work(p, n) for p, n in zip(inputs, names)]

    by_strategy: Dict[str, int] = {}
    for r in rows:
        by_strategy[r["strategy"]] = by_strategy.get(r["strategy"], 0) + 1

    errors = [{"file": r["file"], "error": r["error"]} for r in rows if r.get("error")]
    total = len(rows)
    confident = by_strategy.get("merged", 0)

    overall = {
        "total_files": total,
        "confident_count": confident,
        "confident_rate": round(confident / total, 4) if total else 0.0,
        "error_count": len(errors),
        "run_timestamp": datetime.now().isoformat(timespec="seconds"),
    }
    if classifier is not None:
        labels: Dict[str, int] = {}
        for r in rows:
            verdict = r.get("classification")
            if verdict is None:
                continue
            lbl = verdict.get("label") or "error"
            labels[lbl] = labels.get(lbl, 0) + 1
        overall["by_label"] = labels

    summary = {"overall": overall, "by_strategy": by_strategy, "files": rows}
    summary_path = out_root / "signature_summary_all.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)

    (out_root / "signature_errors.json").write_text(
        json.dumps(errors, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    if errors:
        logger.warning("%d file(s) failed (see %s)", len(errors), out_root / "signature_errors.json")
    return summary_path
