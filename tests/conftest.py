"""
Shared fixtures for csvframe tests.
"""
import pytest


@pytest.fixture
def write_csv(tmp_path):
    """Return a helper that writes text to a CSV file under tmp_path."""
    def _write(text, name="data.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return str(path)
    return _write


@pytest.fixture
def weather_csv(write_csv):
    """Small weather-style dataset with a clean header and 6 numeric rows."""
    return write_csv(
        "Temperature,Humidity,Wind_Speed,Cloud_Cover,Pressure\n"
        "23.72,89.59,7.33,50.50,1032.37\n"
        "27.87,46.48,5.95,4.99,992.61\n"
        "25.06,83.07,1.37,14.85,1007.23\n"
        "23.62,74.36,7.05,67.25,982.63\n"
        "20.59,96.85,4.64,47.67,980.82\n"
        "26.14,48.21,15.26,59.23,1049.74\n"
    )
