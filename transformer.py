from typing import Optional

from models import Bill, BillForm, Currency, Item, ItemForm
from utils import format_currency, format_ratio, parse_currency_amount, parse_ratio_amount


def bill_to_form(locale: str, bill: Bill, currency: Optional[Currency] = None) -> BillForm:
    return BillForm(
        title=bill.title,
        contributors=list(bill.contributors),
        items=[
            ItemForm(
                id=item.id,
                name=item.name,
                cost=format_currency(locale, item.cost, currency),
                buyer=item.buyer,
                split=[format_ratio(locale, weight) for weight in item.split],
            )
            for item in bill.items
        ],
    )


def parse_item_form(locale: str, currency: Currency, form: ItemForm) -> Item:
    return Item(
        id=form.id,
        name=form.name,
        cost=max(0, parse_currency_amount(locale, currency, form.cost)),
        buyer=form.buyer,
        split=[max(0, parse_ratio_amount(locale, weight)) for weight in form.split],
    )


def form_to_bill(locale: str, currency: Currency, form: BillForm,
                 base: Optional[Bill] = None) -> Bill:
    """
    Parse edited form values back into a Bill. Unreadable costs and weights
    become 0. Fields the form does not carry are taken from ``base``.
    """
    data = base.model_dump(exclude={'title', 'contributors', 'items'}) if base else {}
    return Bill(
        **data,
        title=form.title,
        contributors=list(form.contributors),
        items=[parse_item_form(locale, currency, item) for item in form.items],
    )
