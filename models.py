from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List
from datetime import datetime
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


class Contributor(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Contributor name cannot be empty')
        return v.strip()


class Item(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = ''
    cost: int = 0
    buyer: int = 0
    split: List[int] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    @field_validator('cost')
    @classmethod
    def cost_not_negative(cls, v):
        if v < 0:
            raise ValueError('Cost cannot be negative')
        return v

    @field_validator('buyer')
    @classmethod
    def buyer_not_negative(cls, v):
        if v < 0:
            raise ValueError('Buyer must be a contributor index')
        return v

    @field_validator('split')
    @classmethod
    def split_not_negative(cls, v):
        if any(weight < 0 for weight in v):
            raise ValueError('Split weights cannot be negative')
        return v

    @property
    def has_positive_split(self) -> bool:
        return any(weight > 0 for weight in self.split)


class Bill(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = ''
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    read_only: bool = False
    contributors: List[Contributor] = Field(default_factory=list)
    items: List[Item] = Field(default_factory=list)

    @model_validator(mode='after')
    def items_match_contributors(self):
        count = len(self.contributors)
        for index, item in enumerate(self.items):
            if len(item.split) != count:
                raise ValueError(
                    f'Item {index} has {len(item.split)} split entries, '
                    f'expected {count}')
            if item.buyer >= max(count, 1):
                raise ValueError(
                    f'Item {index} buyer {item.buyer} is not a contributor')
        return self


class Currency(BaseModel):
    code: str
    base: int = 10
    exponent: int = 2

    @property
    def scale(self) -> int:
        return self.base ** self.exponent


class Balance(BaseModel):
    contributor: int
    amount: int


class Payment(BaseModel):
    payer: int
    receiver: int
    amount: int


class Unaccounted(BaseModel):
    contributor: int
    amount: int


class BillTotals(BaseModel):
    total_paid: Dict[int, int] = Field(default_factory=dict)
    total_owing: Dict[int, int] = Field(default_factory=dict)
    total_cost: int = 0
    item_owing: Dict[int, Dict[int, int]] = Field(default_factory=dict)
    voided: List[int] = Field(default_factory=list)


class Settlement(BaseModel):
    totals: BillTotals
    balances: List[Balance]
    payments: List[Payment]
    unaccounted: List[Unaccounted] = Field(default_factory=list)


class ItemForm(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = ''
    cost: str = ''
    buyer: int = 0
    split: List[str] = Field(default_factory=list)


class BillForm(BaseModel):
    title: str = ''
    contributors: List[Contributor] = Field(default_factory=list)
    items: List[ItemForm] = Field(default_factory=list)
