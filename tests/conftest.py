import pytest
from fastapi.testclient import TestClient

from border_core import data as bd

HEADER = "date,price to be smuggled into U.S. (USD),narrative,source\n"

SAMPLE_CSV = (
    HEADER
    + '3/14/2019,"$8,000",Quoted in Reynosa.,cbp.gov\n'
    + '2019-07-02,"$9,500",,https://www.justice.gov/case\n'
    + "2020/05,$1000,Two-part date.,\n"
    + '11/5/2021,"$12,500.50",Paid in installments.,\n'
    + "2022-03-21,abc,Price withheld.,\n"
)


@pytest.fixture(autouse=True)
def _clear_load_cache():
    bd._load_points_cached.cache_clear()
    yield
    bd._load_points_cached.cache_clear()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(bd, "DATA_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def write_data(data_dir):
    def _write(text: str):
        path = data_dir / bd.DATA_FILE
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def client(write_data):
    from border_api.main import app

    write_data(SAMPLE_CSV)
    return TestClient(app)
