"""
Edits on a bill. Every function returns a new Bill and leaves the one it
was given untouched, so a stored snapshot is only ever replaced whole.
"""
import logging
from typing import List, Optional

from models import Bill, Contributor, Item, new_id

logger = logging.getLogger(__name__)

EDITABLE_ITEM_FIELDS = {'name', 'cost', 'buyer', 'split'}


class BillEditError(IndexError):
    pass


def _rebuild(bill: Bill, contributors: List[Contributor], items: List[Item]) -> Bill:
    data = bill.model_dump(exclude={'contributors', 'items'})
    return Bill(**data, contributors=contributors, items=items)


def _check_range(kind: str, size: int, start: int, end: int) -> None:
    if start < 0 or end < start or end >= size:
        raise BillEditError(f"{kind} range {start}..{end} is out of bounds")


def add_contributor(bill: Bill, name: Optional[str] = None) -> Bill:
    contributor = Contributor(name=name or f"Contributor {len(bill.contributors) + 1}")
    items = [
        item.model_copy(update={'split': item.split + [0]})
        for item in bill.items
    ]
    return _rebuild(bill, bill.contributors + [contributor], items)


def rename_contributor(bill: Bill, index: int, name: str) -> Bill:
    _check_range("Contributor", len(bill.contributors), index, index)
    contributors = list(bill.contributors)
    contributors[index] = Contributor(id=contributors[index].id, name=name)
    return _rebuild(bill, contributors, list(bill.items))


def remove_contributors(bill: Bill, start: int, end: Optional[int] = None) -> Bill:
    end = start if end is None else end
    _check_range("Contributor", len(bill.contributors), start, end)
    removed = end - start + 1

    contributors = bill.contributors[:start] + bill.contributors[end + 1:]
    items = []
    for item in bill.items:
        if start <= item.buyer <= end:
            buyer = 0
        elif item.buyer > end:
            buyer = item.buyer - removed
        else:
            buyer = item.buyer
        items.append(item.model_copy(update={
            'buyer': buyer,
            'split': item.split[:start] + item.split[end + 1:],
        }))

    logger.info("Removed contributors %s..%s from bill %s", start, end, bill.id)
    return _rebuild(bill, contributors, items)


def link_contributor(bill: Bill, index: int, user_id: str) -> Bill:
    _check_range("Contributor", len(bill.contributors), index, index)
    contributors = list(bill.contributors)
    contributors[index] = contributors[index].model_copy(update={'id': user_id})
    return _rebuild(bill, contributors, list(bill.items))


def unlink_contributor(bill: Bill, index: int) -> Bill:
    return link_contributor(bill, index, new_id())


def add_item(bill: Bill, name: Optional[str] = None, cost: int = 0, buyer: int = 0,
             split: Optional[List[int]] = None) -> Bill:
    item = Item(
        name=name or f"Item {len(bill.items) + 1}",
        cost=cost,
        buyer=buyer,
        split=split if split is not None else [1] * len(bill.contributors),
    )
    return _rebuild(bill, list(bill.contributors), bill.items + [item])


def update_item(bill: Bill, index: int, **changes) -> Bill:
    _check_range("Item", len(bill.items), index, index)
    unknown = set(changes) - EDITABLE_ITEM_FIELDS
    if unknown:
        raise ValueError(f"Cannot edit item fields: {', '.join(sorted(unknown))}")

    items = list(bill.items)
    items[index] = Item(**{**items[index].model_dump(), **changes})
    return _rebuild(bill, list(bill.contributors), items)


def remove_items(bill: Bill, start: int, end: Optional[int] = None) -> Bill:
    end = start if end is None else end
    _check_range("Item", len(bill.items), start, end)
    items = bill.items[:start] + bill.items[end + 1:]
    return _rebuild(bill, list(bill.contributors), items)
