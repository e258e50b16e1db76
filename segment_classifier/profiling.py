"""Descriptive per-segment statistics on the unscaled, typed dataset."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import List

import pandas as pd

from .data_processing import LABEL_COLUMN

# Indicator definitions: column -> value counted as 1.
INDICATORS = {
    "pct_male": ("Gender", "Male"),
    "pct_married": ("Ever_Married", "Yes"),
    "pct_graduated": ("Graduated", "Yes"),
    "pct_high_spending": ("Spending_Score", "High"),
}
MEANS = {
    "mean_age": "Age",
    "mean_family_size": "Family_Size",
    "mean_work_experience": "Work_Experience",
}

TABLE_HEADERS = {
    "segment": "Segment",
    "count": "Count",
    "mean_age": "Avg_Age",
    "mean_family_size": "Avg_Family_Size",
    "mean_work_experience": "Avg_Work_Exp",
    "pct_male": "Pct_Male",
    "pct_married": "Pct_Married",
    "pct_graduated": "Pct_Graduated",
    "pct_high_spending": "Pct_High_Spending",
}


@dataclass(frozen=True)
class SegmentProfile:
    segment: str
    count: int
    mean_age: float
    mean_family_size: float
    mean_work_experience: float
    pct_male: float
    pct_married: float
    pct_graduated: float
    pct_high_spending: float


def profile_segments(frame: pd.DataFrame, group_by: str = LABEL_COLUMN) -> List[SegmentProfile]:
    """One profile per distinct label value, ordered by label."""
    if frame.empty:
        return []
    keys = frame[group_by].astype(str)
    work = pd.DataFrame({"segment": keys})
    for attr, col in MEANS.items():
        work[attr] = frame[col].astype("float64")
    for attr, (col, value) in INDICATORS.items():
        work[attr] = (frame[col].astype(str) == value).astype("float64")

    grouped = work.groupby("segment", sort=True)
    counts = grouped.size()
    means = grouped.mean()

    profiles: List[SegmentProfile] = []
    for segment, row in means.iterrows():
        profiles.append(
            SegmentProfile(
                segment=str(segment),
                count=int(counts[segment]),
                mean_age=float(row["mean_age"]),
                mean_family_size=float(row["mean_family_size"]),
                mean_work_experience=float(row["mean_work_experience"]),
                pct_male=float(row["pct_male"] * 100),
                pct_married=float(row["pct_married"] * 100),
                pct_graduated=float(row["pct_graduated"] * 100),
                pct_high_spending=float(row["pct_high_spending"] * 100),
            )
        )
    return profiles


def profiles_to_frame(profiles: List[SegmentProfile]) -> pd.DataFrame:
    table = pd.DataFrame([asdict(p) for p in profiles], columns=list(TABLE_HEADERS))
    return table.rename(columns=TABLE_HEADERS)


def format_profiles(profiles: List[SegmentProfile], decimals: int = 2) -> str:
    if not profiles:
        return "No segments to profile."
    return profiles_to_frame(profiles).round(decimals).to_string(index=False)
