#!/usr/bin/env python3
"""
inspect_dataset.py

Quick summary of a customer segmentation CSV:
 - records kept after dropping incomplete rows
 - counts per segment
 - per-segment profile table (age, family size, experience, gender/married/
   graduated/high-spending percentages) on the unscaled data
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from segment_classifier.data_processing import LABEL_COLUMN, load_dataset, type_features
from segment_classifier.errors import PipelineError
from segment_classifier.profiling import SegmentProfile, format_profiles, profile_segments


def summarize(data_path: Path) -> List[SegmentProfile]:
    raw = load_dataset(data_path)
    typed = type_features(raw)
    if typed.empty:
        print("No complete records to summarize.")
        return []

    print(f"Records: {len(raw)} read, {len(typed)} complete")
    print("Counts per segment:")
    for label, cnt in typed[LABEL_COLUMN].value_counts().sort_index().items():
        print(f"  {label}: {cnt}")

    profiles = profile_segments(typed)
    print("\nSegment profiles:")
    print(format_profiles(profiles))
    return profiles


def main(argv: Optional[List[str]] = None) -> List[SegmentProfile]:
    parser = argparse.ArgumentParser(description="Inspect a customer segmentation CSV.")
    parser.add_argument("data", type=Path, help="Customer CSV with a header row")
    args = parser.parse_args(argv)

    try:
        return summarize(args.data)
    except PipelineError as exc:
        raise SystemExit(f"Inspection aborted at stage '{exc.stage}': {exc}") from exc


if __name__ == "__main__":
    main()
