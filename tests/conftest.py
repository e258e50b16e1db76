"""
Pytest configuration and fixtures

Shared fixtures for all tests:
- Small hand-written customer frames
- A separable synthetic dataset large enough to train both backends
- CSV writers for loader / CLI tests
"""

import csv
import importlib.util
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

HEADER = [
    "ID",
    "Gender",
    "Ever_Married",
    "Age",
    "Graduated",
    "Profession",
    "Work_Experience",
    "Spending_Score",
    "Family_Size",
    "Var_1",
    "Segmentation",
]

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"


def write_csv(path, rows, header=HEADER):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)
    return path


def load_script(name):
    """Import a CLI script from scripts/ as a module."""
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def ten_rows():
    """Ten complete records with distinct continuous values."""
    return [
        [462809, "Male", "No", 22, "No", "Healthcare", 1, "Low", 4, "Cat_4", "D"],
        [462643, "Female", "Yes", 38, "Yes", "Engineer", 3, "Average", 3, "Cat_4", "A"],
        [466315, "Female", "Yes", 67, "Yes", "Engineer", 1, "Low", 1, "Cat_6", "B"],
        [461735, "Male", "Yes", 67, "Yes", "Lawyer", 0, "High", 2, "Cat_6", "B"],
        [462669, "Female", "Yes", 40, "Yes", "Entertainment", 5, "High", 6, "Cat_6", "A"],
        [461319, "Male", "Yes", 56, "No", "Artist", 0, "Average", 2, "Cat_6", "C"],
        [460156, "Male", "No", 32, "Yes", "Healthcare", 1, "Low", 3, "Cat_6", "C"],
        [464347, "Female", "No", 33, "Yes", "Healthcare", 1, "Low", 3, "Cat_6", "D"],
        [465015, "Female", "Yes", 61, "Yes", "Engineer", 9, "Low", 3, "Cat_7", "D"],
        [465176, "Female", "Yes", 55, "Yes", "Artist", 1, "Average", 4, "Cat_6", "C"],
    ]


@pytest.fixture
def ten_row_frame(ten_rows):
    return pd.DataFrame([r[1:] for r in ten_rows], columns=HEADER[1:]).astype(str)


@pytest.fixture
def ten_row_csv(tmp_path, ten_rows):
    return write_csv(tmp_path / "customers.csv", ten_rows)


def make_separable_rows(n_per_segment=30, seed=7):
    """Three segments that differ strongly in age, spending and profession."""
    rng = np.random.default_rng(seed)
    layout = {
        "A": (25, "Low", "Healthcare", "No"),
        "B": (50, "Average", "Engineer", "Yes"),
        "C": (75, "High", "Lawyer", "Yes"),
    }
    rows = []
    ident = 1000
    for segment, (age, spending, profession, married) in layout.items():
        for _ in range(n_per_segment):
            ident += 1
            rows.append([
                ident,
                "Male" if rng.random() < 0.5 else "Female",
                married,
                int(age + rng.integers(-3, 4)),
                "Yes" if rng.random() < 0.5 else "No",
                profession,
                int(rng.integers(0, 10)),
                spending,
                int(rng.integers(1, 6)),
                "Cat_6",
                segment,
            ])
    return rows


@pytest.fixture
def separable_csv(tmp_path):
    return write_csv(tmp_path / "separable.csv", make_separable_rows())


@pytest.fixture
def separable_frame():
    rows = make_separable_rows()
    return pd.DataFrame([r[1:] for r in rows], columns=HEADER[1:]).astype(str)
