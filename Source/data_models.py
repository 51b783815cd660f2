"""
Data models for How Much Ah? - Receipt items, charges and settlements
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Dict, Optional


@dataclass
class LineItem:
    """A single purchased item on a receipt"""
    id: str = field(compare=False)
    name: str = ""
    price: Decimal = Decimal("0")
    assigned_to: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))


@dataclass
class ChargeConfig:
    """Percentage surcharge that can be switched on and off"""
    enabled: bool = False
    percent: Decimal = Decimal("0")

    def __post_init__(self):
        if not isinstance(self.percent, Decimal):
            self.percent = Decimal(str(self.percent))

    def apply(self, base: Decimal) -> Decimal:
        """Charge amount for the given base"""
        if not self.enabled:
            return Decimal("0")
        return base * self.percent / Decimal(100)


@dataclass
class Receipt:
    """The whole receipt"""
    id: str
    items: List[LineItem] = field(default_factory=list)
    payer: Optional[str] = None
    service_charge: ChargeConfig = field(default_factory=ChargeConfig)
    gst: ChargeConfig = field(default_factory=ChargeConfig)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))


@dataclass
class Transfer:
    """Represents a payment settlement between people"""
    from_person: str
    to_person: str
    amount: Decimal


@dataclass
class ItemShare:
    """One person's slice of one item"""
    name: str
    amount: Decimal
    share_count: int = 1

    @property
    def percentage(self) -> Optional[int]:
        if self.share_count <= 1:
            return None
        return int((Decimal(100) / self.share_count).quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class PersonShare:
    """What one person consumed on one receipt"""
    person: str
    subtotal: Decimal = Decimal("0")
    service_charge: Decimal = Decimal("0")
    gst: Decimal = Decimal("0")
    items: List[ItemShare] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.service_charge + self.gst


@dataclass
class ReceiptBreakdown:
    """Totals of a single receipt and the share of every person"""
    receipt_id: str
    payer: str
    subtotal: Decimal
    service_charge_amount: Decimal
    gst_base: Decimal
    gst_amount: Decimal
    shares: Dict[str, PersonShare] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.service_charge_amount + self.gst_amount


@dataclass
class SettlementResult:
    """Everything needed to tell the group who owes whom"""
    net_positions: Dict[str, Decimal]
    paid: Dict[str, Decimal]
    consumed: Dict[str, Decimal]
    transfers: List[Transfer] = field(default_factory=list)
    breakdowns: List[ReceiptBreakdown] = field(default_factory=list)

    @property
    def is_settled(self) -> bool:
        return not self.transfers


@dataclass
class ProcessingMetrics:
    """Metrics for parallel processing performance"""
    workers_used: int = 0
    processing_time: float = 0.0
    regions_processed: int = 0
