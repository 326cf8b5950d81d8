"""Tests for loading, schema checks and label remapping."""
import numpy as np
import pandas as pd
import pytest

from har_boost.data_loader import (
    ACTIVITY_MAPPER,
    DataLoader,
    check_schema,
    split_by_indicator,
    to_one_based,
    to_zero_based,
)
from har_boost.errors import DataMismatch, InputSchemaError, LabelRangeError


@pytest.mark.unit
def test_load_data_split_layout(small_config, har_data_dir, har_frames):
    X_train, y_train, X_test, y_test = har_frames

    dataset = DataLoader(small_config).load_data()

    assert dataset.X_train.shape == X_train.shape
    assert dataset.X_test.shape == X_test.shape
    assert dataset.feature_cols == list(X_train.columns)
    np.testing.assert_array_equal(dataset.y_train, y_train)
    np.testing.assert_array_equal(dataset.y_test, y_test)
    assert dataset.feature_names["f0"] == "tBodyAcc-mean()-X"


@pytest.mark.unit
def test_load_data_rejects_column_mismatch(small_config, har_data_dir, har_frames):
    _, _, X_test, _ = har_frames
    X_test.rename(columns={"f3": "f99"}).to_csv(har_data_dir / "test_features.csv", index=False)

    with pytest.raises(InputSchemaError, match="differ"):
        DataLoader(small_config).load_data()


@pytest.mark.unit
def test_load_data_rejects_label_row_mismatch(small_config, har_data_dir, har_frames):
    _, y_train, _, _ = har_frames
    pd.DataFrame({'activity': y_train[:-3]}).to_csv(har_data_dir / "train_labels.csv", index=False)

    with pytest.raises(DataMismatch, match="train"):
        DataLoader(small_config).load_data()


@pytest.mark.unit
def test_load_data_rejects_missing_feature_names(small_config, har_data_dir):
    pd.DataFrame({
        'feature_id': ["f0", "f1"],
        'feature_name': ["tBodyAcc-mean()-X", "tBodyAcc-mean()-Y"],
    }).to_csv(har_data_dir / "feature_names.csv", index=False)

    with pytest.raises(InputSchemaError, match="no name"):
        DataLoader(small_config).load_data()


@pytest.mark.unit
def test_load_data_combined_layout(small_config, har_data_dir, har_frames):
    X_train, y_train, X_test, y_test = har_frames
    combined = pd.concat([X_train, X_test], ignore_index=True)
    combined['is_train'] = [True] * len(X_train) + [False] * len(X_test)
    combined.to_csv(har_data_dir / "features.csv", index=False)
    pd.DataFrame({'activity': np.concatenate([y_train, y_test])}).to_csv(
        har_data_dir / "labels.csv", index=False
    )
    small_config['data']['layout'] = 'combined'

    dataset = DataLoader(small_config).load_data()

    assert 'is_train' not in dataset.X_train.columns
    assert len(dataset.X_train) == len(X_train)
    np.testing.assert_array_equal(dataset.y_test, y_test)


@pytest.mark.unit
def test_split_by_indicator_drops_column():
    features = pd.DataFrame({'f0': [1.0, 2.0, 3.0, 4.0], 'is_train': [1, 0, 1, 0]})
    X_train, y_train, X_test, y_test = split_by_indicator(features, np.array([1, 2, 3, 4]))

    assert list(X_train.columns) == ['f0']
    assert X_train['f0'].tolist() == [1.0, 3.0]
    assert y_train.tolist() == [1, 3]
    assert y_test.tolist() == [2, 4]


@pytest.mark.unit
def test_split_by_indicator_missing_column():
    with pytest.raises(InputSchemaError):
        split_by_indicator(pd.DataFrame({'f0': [1.0]}), np.array([1]))


@pytest.mark.unit
def test_check_schema_column_order():
    X_train = pd.DataFrame({'f0': [1.0], 'f1': [2.0]})
    X_test = pd.DataFrame({'f1': [2.0], 'f0': [1.0]})

    with pytest.raises(InputSchemaError, match="order"):
        check_schema(X_train, np.array([1]), X_test, np.array([1]))


@pytest.mark.unit
def test_label_remap_is_bijection():
    labels = np.array([1, 6, 3, 3, 2, 5, 4, 1])

    zero_based = to_zero_based(labels)

    assert zero_based.min() == 0 and zero_based.max() == 5
    np.testing.assert_array_equal(to_one_based(zero_based), labels)


@pytest.mark.unit
@pytest.mark.parametrize("labels", [[0, 1, 2], [1, 7], [-1, 3]])
def test_to_zero_based_rejects_out_of_range(labels):
    with pytest.raises(LabelRangeError):
        to_zero_based(np.array(labels), num_class=6)


@pytest.mark.unit
def test_to_one_based_rejects_out_of_range():
    with pytest.raises(LabelRangeError):
        to_one_based(np.array([0, 6]), num_class=6)


@pytest.mark.unit
def test_activity_mapper_covers_six_classes():
    assert sorted(ACTIVITY_MAPPER) == [1, 2, 3, 4, 5, 6]
    assert ACTIVITY_MAPPER[6] == "LAYING"


@pytest.mark.unit
@pytest.mark.parametrize("labels", [[1, 2.5, 6], [1.0, np.nan, 6.0], [1.0, np.inf]])
def test_to_zero_based_rejects_fractional_and_missing(labels):
    with pytest.raises(LabelRangeError):
        to_zero_based(np.array(labels))


@pytest.mark.unit
@pytest.mark.parametrize("labels", [[0, 1.5], [0.0, np.nan]])
def test_to_one_based_rejects_fractional_and_missing(labels):
    with pytest.raises(LabelRangeError):
        to_one_based(np.array(labels))


@pytest.mark.unit
def test_to_zero_based_accepts_whole_floats():
    # Labels read from CSV with a gap come back as float64
    np.testing.assert_array_equal(to_zero_based(np.array([1.0, 6.0])), [0, 5])


@pytest.mark.unit
def test_load_data_rejects_non_numeric_features(small_config, har_data_dir, har_frames):
    X_train, _, X_test, _ = har_frames
    for X, name in ((X_train, "train_features.csv"), (X_test, "test_features.csv")):
        X_bad = X.copy()
        X_bad['f2'] = X_bad['f2'].astype(str) + "g"
        X_bad.to_csv(har_data_dir / name, index=False)

    with pytest.raises(InputSchemaError, match="non-numeric"):
        DataLoader(small_config).load_data()


@pytest.mark.unit
def test_check_schema_rejects_bool_column():
    X = pd.DataFrame({'f0': [1.0, 2.0], 'f1': [True, False]})

    with pytest.raises(InputSchemaError, match="non-numeric"):
        check_schema(X, np.array([1, 2]), X, np.array([1, 2]))
