import pytest
from pydantic import ValidationError

from carsonrent.models.car import Car
from carsonrent.models.enums import CarStatus


def _make_car(**overrides) -> Car:
    data = {
        "brand": "Toyota",
        "model": "Corolla",
        "license_plate": "ab-123-cd",
        "year": 2021,
        "daily_rate": 39.5,
    }
    data.update(overrides)
    return Car(**data)


def test_car_has_expected_defaults() -> None:
    car = Car(brand="Fiat", model="Panda", license_plate="XY-1")

    assert car.id is None
    assert car.status == CarStatus.AVAILABLE
    assert car.daily_rate == 0.0
    assert car.coordinates_id is None


def test_car_normalizes_license_plate() -> None:
    car = _make_car(license_plate="  ab-123-cd ")
    assert car.license_plate == "AB-123-CD"


def test_car_blank_color_becomes_none() -> None:
    car = _make_car(color="   ")
    assert car.color is None


def test_car_rejects_blank_brand() -> None:
    with pytest.raises(ValidationError):
        _make_car(brand="  ")


def test_car_rejects_negative_daily_rate() -> None:
    with pytest.raises(ValidationError):
        _make_car(daily_rate=-1)


def test_car_rejects_implausible_year() -> None:
    with pytest.raises(ValidationError):
        _make_car(year=1700)


def test_car_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        _make_car(wheels=4)


def test_car_is_immutable() -> None:
    car = _make_car()
    with pytest.raises(ValidationError):
        car.brand = "Honda"


def test_with_id_returns_copy() -> None:
    car = _make_car()

    saved = car.with_id(7)

    assert saved.id == 7
    assert car.id is None
    assert saved.brand == car.brand


def test_status_accepts_string_value() -> None:
    car = _make_car(status="rented")
    assert car.status is CarStatus.RENTED


def test_searchable_text_is_lower_cased_and_skips_id() -> None:
    car = _make_car(id=42, color="Red")

    text = car.searchable_text()

    assert "toyota" in text
    assert "corolla" in text
    assert "ab-123-cd" in text
    assert "red" in text
    assert "42" not in text.split()


@pytest.mark.parametrize("color", [5, ["red"], {"name": "red"}])
def test_non_string_color_is_a_validation_error(color) -> None:
    with pytest.raises(ValidationError, match="color must be a string"):
        _make_car(color=color)
