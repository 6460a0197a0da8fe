import logging
from typing import Dict, List, Optional, Tuple

from allocation import allocate_alternating
from models import Bill, BillTotals, Balance, Payment, Settlement, Unaccounted, Currency
from utils import format_currency, interpolate_string

logger = logging.getLogger(__name__)

PAYMENT_TEMPLATE = "{payer} pays {receiver} {amount}"
UNACCOUNTED_TEMPLATE = "{contributor} has {amount} unaccounted for"


def calculate_settlement(bill: Bill) -> Settlement:
    totals = calculate_totals(bill)
    balances = calculate_balances(bill, totals)
    payments, unaccounted = resolve_payments(balances)

    return Settlement(
        totals=totals,
        balances=balances,
        payments=payments,
        unaccounted=unaccounted
    )


def calculate_totals(bill: Bill) -> BillTotals:
    total_paid: Dict[int, int] = {}
    total_owing: Dict[int, int] = {}
    item_owing: Dict[int, Dict[int, int]] = {}
    voided: List[int] = []
    total_cost = 0
    counted = 0

    for item_index, item in enumerate(bill.items):
        weights = [weight if weight > 0 else 0 for weight in item.split]

        # Nobody shares the item, so counting it would misstate balances
        if not any(weights):
            voided.append(item_index)
            continue

        total_paid[item.buyer] = total_paid.get(item.buyer, 0) + item.cost
        total_cost += item.cost

        parts = allocate_alternating(item.cost, weights, reverse=counted % 2 == 1)
        owing: Dict[int, int] = {}
        for contributor_index, part in enumerate(parts):
            owing[contributor_index] = part
            total_owing[contributor_index] = total_owing.get(contributor_index, 0) + part
        item_owing[item_index] = owing
        counted += 1

    if voided:
        logger.debug("Bill %s has voided items %s", bill.id, voided)

    return BillTotals(
        total_paid=total_paid,
        total_owing=total_owing,
        total_cost=total_cost,
        item_owing=item_owing,
        voided=voided
    )


def calculate_balances(bill: Bill, totals: Optional[BillTotals] = None) -> List[Balance]:
    if totals is None:
        totals = calculate_totals(bill)

    return [
        Balance(
            contributor=index,
            amount=totals.total_paid.get(index, 0) - totals.total_owing.get(index, 0)
        )
        for index in range(len(bill.contributors))
    ]


def resolve_payments(balances: List[Balance]) -> Tuple[List[Payment], List[Unaccounted]]:
    """
    Greedy settlement. Creditors are served as a queue, largest first.
    Debtors are sorted the same way and consumed from the tail, so the
    largest remaining debt pays first. Anything that cannot be matched is
    reported as unaccounted instead of raising.
    """
    creditors = [[b.contributor, b.amount] for b in balances if b.amount > 0]
    debtors = [[b.contributor, b.amount] for b in balances if b.amount < 0]

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    payments = []
    unaccounted = []

    for creditor in creditors:
        receiver_id, credit = creditor
        while credit > 0:
            if not debtors:
                # Only reachable when allocation did not balance
                logger.warning("Contributor %s has %s unaccounted for", receiver_id, credit)
                unaccounted.append(Unaccounted(contributor=receiver_id, amount=credit))
                break

            debtor = debtors[-1]
            transfer_amount = min(-debtor[1], credit)

            payments.append(Payment(
                payer=debtor[0],
                receiver=receiver_id,
                amount=transfer_amount
            ))

            credit -= transfer_amount
            debtor[1] += transfer_amount
            if debtor[1] == 0:
                debtors.pop()

    for payer_id, debt in debtors:
        logger.warning("Contributor %s has %s unaccounted for", payer_id, debt)
        unaccounted.append(Unaccounted(contributor=payer_id, amount=debt))

    return payments, unaccounted


def summary_lines(bill: Bill, settlement: Settlement, locale: str,
                  currency: Optional[Currency] = None) -> List[str]:
    names = [c.name for c in bill.contributors]
    lines = []

    for payment in settlement.payments:
        lines.append(interpolate_string(PAYMENT_TEMPLATE, {
            "payer": names[payment.payer],
            "receiver": names[payment.receiver],
            "amount": format_currency(locale, payment.amount, currency),
        }))

    for entry in settlement.unaccounted:
        lines.append(interpolate_string(UNACCOUNTED_TEMPLATE, {
            "contributor": names[entry.contributor],
            "amount": format_currency(locale, entry.amount, currency),
        }))

    return lines
