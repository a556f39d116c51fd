import pytest

from mailru_cloud.core.size import Size, StorageUnit


@pytest.mark.parametrize(
    ("value", "unit", "magnitude"),
    [
        (0, StorageUnit.B, 0),
        (1023, StorageUnit.B, 1023),
        (1024, StorageUnit.KB, 1.0),
        (1536, StorageUnit.KB, 1.5),
        (5 * 1024**2, StorageUnit.MB, 5.0),
        (int(2.25 * 1024**3), StorageUnit.GB, 2.25),
        (3 * 1024**4, StorageUnit.TB, 3.0),
        (2048 * 1024**4, StorageUnit.TB, 2048.0),
    ],
)
def test_size_derives_unit_and_magnitude(value: int, unit: StorageUnit, magnitude: float) -> None:
    size = Size(value)

    assert size.unit == unit
    assert size.magnitude == magnitude


def test_size_magnitude_is_rounded_to_two_decimals() -> None:
    assert Size(1000 * 1024 + 123).magnitude == 1000.12


def test_size_from_mebibytes() -> None:
    assert Size.from_mebibytes(3).bytes == 3 * 1024 * 1024


def test_size_str() -> None:
    assert str(Size(512)) == "512 B"
    assert str(Size(2048 * 1024 * 1024)) == "2.00 GB"


def test_sizes_compare_by_bytes() -> None:
    assert Size(10) < Size(11)
    assert Size(10) == Size(10)
    assert int(Size(42)) == 42
