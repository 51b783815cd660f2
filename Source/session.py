"""
Splitting session for How Much Ah?
Holds the party, up to three receipts and the wizard step the user is on
"""

import itertools
import logging
from decimal import Decimal
from enum import IntEnum
from typing import Iterable, List, Optional

from bill_splitter import compute_settlement
from config import DEFAULT_GST_PERCENT, DEFAULT_SERVICE_CHARGE_PERCENT, MAX_RECEIPTS
from data_models import ChargeConfig, LineItem, Receipt, SettlementResult
from exceptions import SessionError, WizardTransitionError

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    """Steps of the receipt splitting wizard, in order"""
    UPLOAD = 1
    ITEMS = 2
    PARTY = 3
    ASSIGN = 4
    SUMMARY = 5


class SplitSession:
    """State of one group splitting one or more receipts"""

    def __init__(self):
        self._clear()

    def _clear(self):
        self._ids = itertools.count(1)
        self.people: List[str] = []
        self.receipts: List[Receipt] = []
        self.step = WizardStep.UPLOAD
        self._new_receipt()

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _new_receipt(self) -> Receipt:
        receipt = Receipt(
            id=self._next_id('receipt'),
            service_charge=ChargeConfig(enabled=False, percent=DEFAULT_SERVICE_CHARGE_PERCENT),
            gst=ChargeConfig(enabled=False, percent=DEFAULT_GST_PERCENT),
        )
        self.receipts.append(receipt)
        return receipt

    @property
    def current_receipt(self) -> Receipt:
        return self.receipts[-1]

    @property
    def people_locked(self) -> bool:
        """People cannot be removed once a second receipt exists"""
        return len(self.receipts) > 1

    # People

    def _find_person(self, name: str) -> Optional[str]:
        for person in self.people:
            if person.lower() == name.strip().lower():
                return person
        return None

    def add_person(self, name: str) -> str:
        name = name.strip()
        if not name:
            raise SessionError("Name cannot be empty")
        if self._find_person(name):
            raise SessionError("Person already exists")

        self.people.append(name)
        return name

    def remove_person(self, name: str):
        person = self._find_person(name)
        if person is None:
            raise SessionError(f"Unknown person: {name}")
        if self.people_locked:
            raise SessionError("People cannot be removed after adding another receipt")

        self.people.remove(person)
        for receipt in self.receipts:
            for item in receipt.items:
                if person in item.assigned_to:
                    item.assigned_to.remove(person)
            if receipt.payer == person:
                receipt.payer = None

    def people_without_items(self, receipt: Optional[Receipt] = None) -> List[str]:
        receipt = receipt or self.current_receipt
        return [p for p in self.people if not any(p in item.assigned_to for item in receipt.items)]

    # Items

    def _get_item(self, item_id: str) -> LineItem:
        for item in self.current_receipt.items:
            if item.id == item_id:
                return item
        raise SessionError(f"Unknown item: {item_id}")

    def load_items(self, items: Iterable[LineItem]):
        """Replace the current receipt's items, e.g. with parser output"""
        self.current_receipt.items = [
            LineItem(id=self._next_id('item'), name=item.name, price=item.price)
            for item in items
        ]

    def add_item(self, name: str = "", price: Decimal = Decimal("0")) -> LineItem:
        item = LineItem(id=self._next_id('manual'), name=name, price=price)
        self.current_receipt.items.append(item)
        return item

    def update_item(self, item_id: str, name: Optional[str] = None, price: Optional[Decimal] = None) -> LineItem:
        item = self._get_item(item_id)
        if name is not None:
            item.name = name
        if price is not None:
            price = Decimal(str(price))
            if price < 0:
                raise SessionError("Price cannot be negative")
            item.price = price
        return item

    def delete_item(self, item_id: str):
        item = self._get_item(item_id)
        self.current_receipt.items.remove(item)

    def toggle_assignment(self, item_id: str, name: str) -> List[str]:
        item = self._get_item(item_id)
        person = self._find_person(name)
        if person is None:
            raise SessionError(f"Unknown person: {name}")

        if person in item.assigned_to:
            item.assigned_to.remove(person)
        else:
            item.assigned_to.append(person)
        return item.assigned_to

    def assign_to_everyone(self, item_id: str):
        self._get_item(item_id).assigned_to = list(self.people)

    def unassigned_items(self) -> List[LineItem]:
        return [item for item in self.current_receipt.items if not item.assigned_to]

    # Receipt settings

    def set_payer(self, name: str):
        person = self._find_person(name)
        if person is None:
            raise SessionError(f"Unknown person: {name}")
        self.current_receipt.payer = person

    def set_service_charge(self, enabled: bool, percent: Optional[Decimal] = None):
        charge = self.current_receipt.service_charge
        charge.enabled = enabled
        if percent is not None:
            charge.percent = Decimal(str(percent))

    def set_gst(self, enabled: bool, percent: Optional[Decimal] = None):
        charge = self.current_receipt.gst
        charge.enabled = enabled
        if percent is not None:
            charge.percent = Decimal(str(percent))

    # Wizard

    def _check_can_leave(self, step: WizardStep):
        if step is WizardStep.ITEMS and not self.current_receipt.items:
            raise WizardTransitionError("Add at least one item")
        if step is WizardStep.PARTY:
            if not self.people:
                raise WizardTransitionError("Add at least one person")
            if not self.current_receipt.payer:
                raise WizardTransitionError("Please select who paid")
        if step is WizardStep.ASSIGN:
            unassigned = self.unassigned_items()
            if unassigned:
                names = ', '.join(item.name or '(unnamed)' for item in unassigned)
                raise WizardTransitionError(f"Assign people to: {names}")

    def advance(self) -> WizardStep:
        if self.step is WizardStep.SUMMARY:
            raise WizardTransitionError("Already at the summary")

        self._check_can_leave(self.step)
        self.step = WizardStep(self.step + 1)
        logger.debug("Wizard moved to %s", self.step.name)
        return self.step

    def back(self) -> WizardStep:
        if self.step is WizardStep.UPLOAD:
            raise WizardTransitionError("Already at the first step")
        self.step = WizardStep(self.step - 1)
        return self.step

    def add_receipt(self) -> Receipt:
        """Start another receipt for the same party"""
        if self.step is not WizardStep.SUMMARY:
            raise WizardTransitionError("Finish the current receipt first")
        if len(self.receipts) >= MAX_RECEIPTS:
            raise SessionError(f"At most {MAX_RECEIPTS} receipts per session")

        receipt = self._new_receipt()
        self.step = WizardStep.UPLOAD
        return receipt

    def reset(self):
        self._clear()

    def settlement(self) -> SettlementResult:
        return compute_settlement(self.people, self.receipts)
