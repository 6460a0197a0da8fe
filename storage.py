from datetime import datetime
from typing import Dict, List, Optional
from models import Bill


class InMemoryStorage:
    def __init__(self):
        self.bills: Dict[str, Bill] = {}

    def create_bill(self, bill: Bill) -> Bill:
        self.bills[bill.id] = bill
        return bill

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        return self.bills.get(bill_id)

    def update_bill(self, bill: Bill) -> Bill:
        # Snapshots are replaced whole; the latest write wins
        bill = bill.model_copy(update={'updated_at': datetime.now()})
        self.bills[bill.id] = bill
        return bill

    def delete_bill(self, bill_id: str) -> bool:
        return self.bills.pop(bill_id, None) is not None

    def bill_exists(self, bill_id: str) -> bool:
        return bill_id in self.bills

    def list_bills(self) -> List[Bill]:
        return sorted(self.bills.values(), key=lambda b: b.updated_at, reverse=True)


storage = InMemoryStorage()
