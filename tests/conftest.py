import pytest

from models import Bill, Contributor, Currency, Item
from storage import storage


@pytest.fixture
def cad():
    return Currency(code="CAD", base=10, exponent=2)


@pytest.fixture
def make_bill():
    def _make(names, items):
        return Bill(
            title="Dinner",
            contributors=[Contributor(name=name) for name in names],
            items=[
                Item(name=f"item {i}", cost=cost, buyer=buyer, split=split)
                for i, (cost, buyer, split) in enumerate(items)
            ],
        )
    return _make


@pytest.fixture(autouse=True)
def clear_storage():
    storage.bills.clear()
    yield
    storage.bills.clear()
