"""
Unit tests for loading, typing, splitting and scaling

Covers:
- Loader drops identifiers and reports unreadable / malformed sources
- Typist assigns categorical types and drops incomplete records only
- Splitter is seeded, disjoint and exhaustive
- Scaler is fitted on Train only and refuses degenerate features
"""

import numpy as np
import pandas as pd
import pytest

from conftest import HEADER, write_csv
from segment_classifier.data_processing import (
    CONTINUOUS_COLUMNS,
    SCHEMA_COLUMNS,
    Scaler,
    load_dataset,
    scale_features,
    split_dataset,
    type_features,
)
from segment_classifier.errors import DatasetReadError, DegenerateFeatureError, SchemaError


class TestLoadDataset:
    """DatasetLoader behaviour"""

    def test_drops_identifier_column(self, ten_row_csv):
        df = load_dataset(ten_row_csv)
        assert "ID" not in df.columns
        assert list(df.columns) == list(SCHEMA_COLUMNS)
        assert len(df) == 10

    def test_missing_file_is_io_error(self, tmp_path):
        with pytest.raises(DatasetReadError) as excinfo:
            load_dataset(tmp_path / "nope.csv")
        assert isinstance(excinfo.value, IOError)
        assert excinfo.value.stage == "load"

    def test_empty_file_is_io_error(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DatasetReadError):
            load_dataset(path)

    def test_missing_column_is_schema_error(self, tmp_path, ten_rows):
        header = [h for h in HEADER if h != "Spending_Score"]
        rows = [r[:7] + r[8:] for r in ten_rows]
        path = write_csv(tmp_path / "short.csv", rows, header=header)
        with pytest.raises(SchemaError) as excinfo:
            load_dataset(path)
        assert excinfo.value.missing == ("Spending_Score",)
        # Schema problems are also read errors for callers catching IOError.
        assert isinstance(excinfo.value, IOError)

    def test_empty_cells_become_missing(self, tmp_path, ten_rows):
        rows = [list(r) for r in ten_rows]
        rows[0][3] = ""
        df = load_dataset(write_csv(tmp_path / "gap.csv", rows))
        assert pd.isna(df.loc[0, "Age"])


class TestTypeFeatures:
    """FeatureTypist behaviour"""

    def test_categorical_types(self, ten_row_frame):
        typed = type_features(ten_row_frame)
        for col in ("Gender", "Ever_Married", "Graduated", "Profession", "Var_1", "Segmentation"):
            assert isinstance(typed[col].dtype, pd.CategoricalDtype)
            assert not typed[col].dtype.ordered
        spending = typed["Spending_Score"].dtype
        assert spending.ordered
        assert list(spending.categories) == ["Low", "Average", "High"]
        for col in CONTINUOUS_COLUMNS:
            assert typed[col].dtype == np.float64

    def test_spending_order_is_ordinal(self, ten_row_frame):
        typed = type_features(ten_row_frame)
        low = typed.loc[typed["Spending_Score"] == "Low", "Spending_Score"].iloc[0]
        assert (typed["Spending_Score"] > low).sum() == 5

    def test_incomplete_records_are_dropped(self, ten_row_frame):
        frame = ten_row_frame.copy()
        frame.loc[1, "Age"] = np.nan
        frame.loc[4, "Profession"] = ""
        frame.loc[7, "Spending_Score"] = "Very High"
        typed = type_features(frame)
        assert len(typed) == 7
        assert set(typed["Age"]) == {22.0, 67.0, 56.0, 32.0, 61.0, 55.0}

    def test_non_finite_values_are_dropped(self, ten_row_frame):
        frame = ten_row_frame.copy()
        frame.loc[0, "Age"] = "inf"
        frame.loc[3, "Work_Experience"] = "-inf"
        frame.loc[5, "Family_Size"] = "1e400"
        typed = type_features(frame)
        assert len(typed) == 7
        for col in CONTINUOUS_COLUMNS:
            assert np.isfinite(typed[col]).all()

    def test_complete_records_unchanged_in_value(self, ten_row_frame):
        typed = type_features(ten_row_frame)
        assert len(typed) == len(ten_row_frame)
        for col in SCHEMA_COLUMNS:
            if col in CONTINUOUS_COLUMNS:
                expected = ten_row_frame[col].astype(float).tolist()
                assert typed[col].tolist() == expected
            else:
                assert typed[col].astype(str).tolist() == ten_row_frame[col].tolist()

    def test_input_frame_not_mutated(self, ten_row_frame):
        before = ten_row_frame.copy()
        type_features(ten_row_frame)
        pd.testing.assert_frame_equal(ten_row_frame, before)

    def test_missing_column_raises(self, ten_row_frame):
        with pytest.raises(SchemaError):
            type_features(ten_row_frame.drop(columns=["Var_1"]))


class TestSplitDataset:
    """Splitter behaviour"""

    def test_same_seed_same_partition(self, ten_row_frame):
        typed = type_features(ten_row_frame)
        a = split_dataset(typed, 0.8, seed=42)
        b = split_dataset(typed, 0.8, seed=42)
        np.testing.assert_array_equal(a.train_index, b.train_index)
        np.testing.assert_array_equal(a.test_index, b.test_index)
        pd.testing.assert_frame_equal(a.train, b.train)

    def test_disjoint_and_exhaustive(self, separable_frame):
        typed = type_features(separable_frame)
        split = split_dataset(typed, 0.8, seed=3)
        train, test = set(split.train_index), set(split.test_index)
        assert not train & test
        assert len(train) + len(test) == len(typed)
        assert len(train) == int(np.floor(0.8 * len(typed)))

    def test_different_seeds_redraw(self, separable_frame):
        typed = type_features(separable_frame)
        draws = {tuple(split_dataset(typed, 0.8, seed=s).train_index) for s in range(5)}
        assert len(draws) > 1

    @pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2, 1.5])
    def test_fraction_out_of_range(self, ten_row_frame, fraction):
        with pytest.raises(ValueError):
            split_dataset(type_features(ten_row_frame), fraction, seed=1)

    def test_empty_subset_rejected(self, ten_row_frame):
        with pytest.raises(ValueError):
            split_dataset(type_features(ten_row_frame), 0.05, seed=1)


class TestScaler:
    """Scaler fitted on Train only"""

    def test_train_mean_zero_sd_one(self, separable_frame):
        split = split_dataset(type_features(separable_frame), 0.8, seed=11)
        train, _, _ = scale_features(split.train, split.test)
        for col in CONTINUOUS_COLUMNS:
            assert train[col].mean() == pytest.approx(0.0, abs=1e-12)
            assert train[col].std(ddof=1) == pytest.approx(1.0, abs=1e-12)

    def test_parameters_come_from_train_only(self, separable_frame):
        split = split_dataset(type_features(separable_frame), 0.8, seed=11)
        _, test, params = scale_features(split.train, split.test)
        for col in CONTINUOUS_COLUMNS:
            assert params.mean[col] == pytest.approx(split.train[col].mean())
            assert params.sd[col] == pytest.approx(split.train[col].std(ddof=1))
            expected = (split.test[col] - params.mean[col]) / params.sd[col]
            np.testing.assert_allclose(test[col].to_numpy(), expected.to_numpy())

    def test_refit_on_scaled_data(self, separable_frame):
        split = split_dataset(type_features(separable_frame), 0.8, seed=5)
        train, test, _ = scale_features(split.train, split.test)
        again, _, params = scale_features(train, test)
        for col in CONTINUOUS_COLUMNS:
            assert params.mean[col] == pytest.approx(0.0, abs=1e-12)
            assert params.sd[col] == pytest.approx(1.0, abs=1e-12)
            assert again[col].mean() == pytest.approx(0.0, abs=1e-12)
            assert again[col].std(ddof=1) == pytest.approx(1.0, abs=1e-12)

    def test_zero_variance_raises(self, separable_frame):
        typed = type_features(separable_frame)
        typed["Family_Size"] = 3.0
        split = split_dataset(typed, 0.8, seed=1)
        with pytest.raises(DegenerateFeatureError) as excinfo:
            scale_features(split.train, split.test)
        assert excinfo.value.feature == "Family_Size"
        assert excinfo.value.stage == "scale"

    def test_single_row_is_degenerate(self, ten_row_frame):
        typed = type_features(ten_row_frame)
        with pytest.raises(DegenerateFeatureError):
            Scaler(["Age"]).fit(typed.iloc[:1])

    def test_unknown_feature_is_schema_error(self, ten_row_frame):
        with pytest.raises(SchemaError):
            Scaler(["Income"]).fit(type_features(ten_row_frame))


class TestTenRecordScenario:
    """Fixed seed, ten records: scaling is reproducible to 1e-9"""

    def test_reproducible_parameters_and_values(self, ten_row_csv, ten_rows):
        typed = type_features(load_dataset(ten_row_csv))
        split = split_dataset(typed, 0.8, seed=2024)
        assert len(split.train) == 8
        assert len(split.test) == 2

        train, test, params = scale_features(split.train, split.test)

        raw = np.array([[r[3], r[6], r[8]] for r in ten_rows], dtype=np.float64)
        raw_train = raw[split.train_index]
        raw_test = raw[split.test_index]
        mean = raw_train.mean(axis=0)
        sd = raw_train.std(axis=0, ddof=1)
        for j, col in enumerate(("Age", "Work_Experience", "Family_Size")):
            assert abs(params.mean[col] - mean[j]) < 1e-9
            assert abs(params.sd[col] - sd[j]) < 1e-9
            np.testing.assert_allclose(train[col].to_numpy(), (raw_train[:, j] - mean[j]) / sd[j], atol=1e-9)
            np.testing.assert_allclose(test[col].to_numpy(), (raw_test[:, j] - mean[j]) / sd[j], atol=1e-9)

        split2 = split_dataset(typed, 0.8, seed=2024)
        train2, test2, params2 = scale_features(split2.train, split2.test)
        assert params2 == params
        pd.testing.assert_frame_equal(train2, train)
        pd.testing.assert_frame_equal(test2, test)
