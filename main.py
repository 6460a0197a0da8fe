import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Request, Form, HTTPException, Query
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from config import config, configure_logging
from models import Bill, BillForm, ItemForm
from operations import (
    BillEditError,
    add_contributor,
    add_item,
    link_contributor,
    remove_contributors,
    remove_items,
    rename_contributor,
    unlink_contributor,
    update_item,
)
from settlement import calculate_settlement, summary_lines
from storage import storage
from transformer import bill_to_form, form_to_bill, parse_item_form
from utils import (
    ParseError,
    format_currency,
    format_ratio,
    get_currency,
    parse_currency_amount,
    parse_ratio_amount,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=config.APP_TITLE)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def resolve_locale(locale: Optional[str]) -> str:
    locale = locale or config.DEFAULT_LOCALE
    try:
        get_currency(locale)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return locale


def load_bill(bill_id: str) -> Bill:
    bill = storage.get_bill(bill_id)
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


def load_editable_bill(bill_id: str) -> Bill:
    bill = load_bill(bill_id)
    if bill.read_only:
        raise HTTPException(status_code=403, detail="Bill is read-only")
    return bill


def apply_edit(bill: Bill, edit, *args, **kwargs) -> Bill:
    try:
        updated = edit(bill, *args, **kwargs)
    except (BillEditError, ValidationError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Applied %s to bill %s", edit.__name__, bill.id)
    return storage.update_bill(updated)


def settlement_payload(bill: Bill, locale: str) -> dict:
    currency = get_currency(locale)
    settlement = calculate_settlement(bill)
    return {
        "bill_id": bill.id,
        "locale": locale,
        "currency": currency.model_dump(),
        "settlement": settlement.model_dump(),
        "lines": summary_lines(bill, settlement, locale, currency),
    }


@app.post("/bill", status_code=201)
async def create_bill(title: str = Form("")):
    bill = storage.create_bill(Bill(title=title.strip()))
    logger.info("Created bill %s", bill.id)
    return bill.model_dump()


@app.get("/bills")
async def list_bills(locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    currency = get_currency(locale)
    previews = []
    for bill in storage.list_bills():
        total_cost = calculate_settlement(bill).totals.total_cost
        previews.append({
            "id": bill.id,
            "title": bill.title,
            "updated_at": bill.updated_at,
            "contributors": [c.name for c in bill.contributors],
            "total_cost": total_cost,
            "total_cost_display": format_currency(locale, total_cost, currency),
        })
    return previews


@app.get("/bill/{bill_id}")
async def get_bill(bill_id: str, locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_bill(bill_id)
    return {
        "bill": bill.model_dump(),
        "form": bill_to_form(locale, bill).model_dump(),
    }


@app.put("/bill/{bill_id}")
async def put_bill(bill_id: str, form: BillForm, locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_editable_bill(bill_id)
    currency = get_currency(locale)

    def replace_from_form(base: Bill) -> Bill:
        return form_to_bill(locale, currency, form, base=base)

    return apply_edit(bill, replace_from_form).model_dump()


@app.get("/bill/{bill_id}/view", response_class=HTMLResponse)
async def view_bill(request: Request, bill_id: str, locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_bill(bill_id)
    currency = get_currency(locale)
    settlement = calculate_settlement(bill)

    return templates.TemplateResponse(request, "bill.html", {
        "bill": bill,
        "settlement": settlement,
        "lines": summary_lines(bill, settlement, locale, currency),
        "money": lambda amount: format_currency(locale, amount, currency),
        "ratio": lambda weight: format_ratio(locale, weight),
    })


@app.post("/bill/{bill_id}/contributor", status_code=201)
async def post_contributor(bill_id: str, name: str = Form("")):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, add_contributor, name.strip() or None).model_dump()


@app.patch("/bill/{bill_id}/contributor/{index}")
async def patch_contributor(bill_id: str, index: int, name: str = Form(...)):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, rename_contributor, index, name).model_dump()


@app.delete("/bill/{bill_id}/contributor/{index}")
async def delete_contributor(bill_id: str, index: int):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, remove_contributors, index).model_dump()


@app.post("/bill/{bill_id}/contributor/{index}/link")
async def post_contributor_link(bill_id: str, index: int, user_id: str = Form(...)):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, link_contributor, index, user_id).model_dump()


@app.delete("/bill/{bill_id}/contributor/{index}/link")
async def delete_contributor_link(bill_id: str, index: int):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, unlink_contributor, index).model_dump()


@app.post("/bill/{bill_id}/item", status_code=201)
async def post_item(bill_id: str,
                    name: str = Form(""),
                    cost: str = Form(""),
                    buyer: int = Form(0),
                    split: Optional[List[str]] = Form(None),
                    locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_editable_bill(bill_id)

    if split is None:
        split = ["1"] * len(bill.contributors)
    try:
        item = parse_item_form(locale, get_currency(locale),
                               ItemForm(name=name, cost=cost, buyer=buyer, split=split))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return apply_edit(bill, add_item, name=item.name, cost=item.cost,
                      buyer=item.buyer, split=item.split).model_dump()


@app.patch("/bill/{bill_id}/item/{index}")
async def patch_item(bill_id: str,
                     index: int,
                     name: Optional[str] = Form(None),
                     cost: Optional[str] = Form(None),
                     buyer: Optional[int] = Form(None),
                     split: Optional[List[str]] = Form(None),
                     locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_editable_bill(bill_id)

    changes = {}
    if name is not None:
        changes["name"] = name
    if cost is not None:
        changes["cost"] = max(0, parse_currency_amount(locale, get_currency(locale), cost))
    if buyer is not None:
        changes["buyer"] = buyer
    if split is not None:
        changes["split"] = [max(0, parse_ratio_amount(locale, weight)) for weight in split]

    return apply_edit(bill, update_item, index, **changes).model_dump()


@app.delete("/bill/{bill_id}/item/{index}")
async def delete_item(bill_id: str, index: int):
    bill = load_editable_bill(bill_id)
    return apply_edit(bill, remove_items, index).model_dump()


@app.get("/bill/{bill_id}/settlement")
async def get_settlement(bill_id: str, locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    return settlement_payload(load_bill(bill_id), locale)


@app.get("/bill/{bill_id}/share", response_class=PlainTextResponse)
async def share_bill(bill_id: str, locale: Optional[str] = Query(None)):
    locale = resolve_locale(locale)
    bill = load_bill(bill_id)
    lines = settlement_payload(bill, locale)["lines"]
    if bill.title:
        lines.insert(0, bill.title)
    return "\n".join(lines)


@app.post("/bill/{bill_id}/toggle-readonly")
async def toggle_readonly(bill_id: str):
    bill = load_bill(bill_id)
    bill = storage.update_bill(bill.model_copy(update={"read_only": not bill.read_only}))
    return {"read_only": bill.read_only}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
