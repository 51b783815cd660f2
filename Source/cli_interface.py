"""
CLI Interface module for How Much Ah?
Step-by-step wizard for scanning receipts and splitting the bill
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from exceptions import HowMuchError, OCRError, SessionError
from ocr_processor import OCRSpaceClient, OCRSpaceConfig, ParallelOCRProcessor
from receipt_parser import ParsingStrategy, ReceiptParser
from report import breakdown_dataframe, export_to_dict, generate_summary_text
from session import SplitSession, WizardStep
from utils import format_currency, try_parse_decimal, try_parse_int, validate_menu_choice

logger = logging.getLogger(__name__)


class HowMuchCLI:
    """Command-line interface for How Much Ah?"""

    def __init__(self, strategy: ParsingStrategy = ParsingStrategy.STRUCTURED,
                 engine: str = 'ocrspace', workers: Optional[int] = None):
        self.session = SplitSession()
        self.parser = ReceiptParser(strategy=strategy)
        self.engine = engine
        self.workers = workers
        self._ocr_client: Optional[OCRSpaceClient] = None
        self.finished = False

    def display_banner(self):
        """Display application banner"""
        print("\n" + "="*60)
        print("🧾  HOW MUCH AH? - Split your receipt easily")
        print("="*60)

    def _header(self, title: str):
        receipt_no = len(self.session.receipts)
        print("\n" + "="*50)
        print(f"Step {int(self.session.step)}/5 · Receipt {receipt_no} · {title}")
        print("="*50)

    def recognize(self, image_path: str) -> str:
        if self.engine == 'tesseract':
            processor = ParallelOCRProcessor(num_workers=self.workers) if self.workers else ParallelOCRProcessor()
            return processor.process_image_parallel(image_path)

        if self._ocr_client is None:
            self._ocr_client = OCRSpaceClient(OCRSpaceConfig.from_env())
        return self._ocr_client.recognize(image_path)

    def load_text(self, text: str):
        """Parse receipt text into the current receipt"""
        items = self.parser.parse(text)
        self.session.load_items(items)
        if not items:
            print("\n⚠ No items found. Add manually below.")
        else:
            print(f"\n✓ Found {len(items)} items")

    def process_receipt(self, image_path: str):
        """Run OCR on an image and load the parsed items"""
        print(f"\n📸 Reading receipt: {image_path}")
        try:
            text = self.recognize(image_path)
        except OCRError as e:
            logger.warning("OCR failed: %s", e)
            print(f"\n⚠ OCR failed ({e}). Please add items manually.")
            self.session.load_items([])
            return
        self.load_text(text)

    def _advance(self):
        try:
            self.session.advance()
        except SessionError as e:
            print(f"\n⚠ {e}")

    # Step 1

    def step_upload(self):
        self._header("Upload Your Receipt")
        print("1. Scan receipt image")
        print("2. Load OCR text file")
        print("3. Skip - Enter manually")

        choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3'])
        if choice == '1':
            self.process_receipt(input("Enter image path: ").strip())
        elif choice == '2':
            path = Path(input("Enter text file path: ").strip())
            if not path.is_file():
                print(f"⚠ File not found: {path}")
                return
            self.load_text(path.read_text(encoding='utf-8'))
        elif choice != '3':
            return
        self.session.advance()

    # Step 2

    def display_items(self):
        items = self.session.current_receipt.items
        if not items:
            print("\nNo items yet")
            return
        for i, item in enumerate(items, 1):
            assigned = ', '.join(item.assigned_to) if item.assigned_to else 'Unassigned'
            print(f"{i:2}. {item.name[:30]:30} {format_currency(item.price):>10} [{assigned}]")
        print("-"*50)
        print(f"{'SUBTOTAL:':40} {format_currency(self.session.current_receipt.subtotal)}")

    def _pick_item(self):
        items = self.session.current_receipt.items
        idx = try_parse_int(input("Item number: "))
        if idx is None or not 1 <= idx <= len(items):
            print("Invalid selection")
            return None
        return items[idx - 1]

    def step_items(self):
        self._header("Review Items")
        self.display_items()
        print("\n1. Add item")
        print("2. Edit item")
        print("3. Delete item")
        print("4. Next")
        print("5. Back")

        choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3', '4', '5'])
        if choice == '1':
            name = input("Item name: ").strip()
            price = try_parse_decimal(input("Price: "))
            if price is None or price < 0:
                print("Invalid amount")
                return
            self.session.add_item(name, price)
        elif choice == '2':
            item = self._pick_item()
            if item is None:
                return
            name = input(f"Name [{item.name}]: ").strip() or None
            raw_price = input(f"Price [{item.price:.2f}]: ").strip()
            price = try_parse_decimal(raw_price) if raw_price else None
            if raw_price and price is None:
                print("Invalid amount")
                return
            try:
                self.session.update_item(item.id, name=name, price=price)
            except SessionError as e:
                print(f"⚠ {e}")
        elif choice == '3':
            item = self._pick_item()
            if item is not None:
                self.session.delete_item(item.id)
                print(f"✓ Deleted {item.name}")
        elif choice == '4':
            self._advance()
        elif choice == '5':
            self.session.back()

    # Step 3

    def _toggle_charge(self, label: str, setter):
        raw = input(f"{label} percent (blank to disable): ").strip()
        if not raw:
            setter(False)
            print(f"✓ {label} disabled")
            return
        percent = try_parse_decimal(raw.rstrip('%'))
        if percent is None or percent < 0:
            print("Invalid percentage")
            return
        setter(True, percent)
        print(f"✓ {label} {percent}%")

    def step_party(self):
        self._header("Who's in the party?")
        session = self.session
        receipt = session.current_receipt
        print(f"People: {', '.join(session.people) if session.people else 'None'}")
        print(f"Paid by: {receipt.payer or 'Not selected'}")
        sc, gst = receipt.service_charge, receipt.gst
        print(f"Service charge: {f'{sc.percent}%' if sc.enabled else 'off'}")
        print(f"GST: {f'{gst.percent}%' if gst.enabled else 'off'}")

        print("\n1. Add person")
        print("2. Remove person")
        print("3. Select who paid")
        print("4. Service charge")
        print("5. GST")
        print("6. Next")
        print("7. Back")

        choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3', '4', '5', '6', '7'])
        try:
            if choice == '1':
                print(f"✓ Added {session.add_person(input('Enter name: '))}")
            elif choice == '2':
                session.remove_person(input("Name to remove: "))
            elif choice == '3':
                session.set_payer(input("Who paid? "))
            elif choice == '4':
                self._toggle_charge("Service charge", session.set_service_charge)
            elif choice == '5':
                self._toggle_charge("GST", session.set_gst)
            elif choice == '6':
                self._advance()
            elif choice == '7':
                session.back()
        except SessionError as e:
            print(f"⚠ {e}")

    # Step 4

    def step_assign(self):
        self._header("Who had what?")
        session = self.session

        for item in session.current_receipt.items:
            print(f"\n{item.name} - {format_currency(item.price)}")
            print(f"Assigned to: {', '.join(item.assigned_to) if item.assigned_to else 'None'}")
            print("1. Everyone  2. Specific people  3. Keep")

            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3'])
            if choice == '1':
                session.assign_to_everyone(item.id)
            elif choice == '2':
                for i, person in enumerate(session.people, 1):
                    print(f"{i}. {person}")
                selections = input("Toggle person numbers (comma-separated): ")
                for raw in selections.split(','):
                    idx = try_parse_int(raw)
                    if idx is not None and 1 <= idx <= len(session.people):
                        session.toggle_assignment(item.id, session.people[idx - 1])

        missing = session.people_without_items()
        if missing:
            print(f"\n⚠ No items for: {', '.join(missing)}")
        self._advance()

    # Step 5

    def calculate_settlements(self):
        """Calculate and display settlements"""
        try:
            result = self.session.settlement()
        except HowMuchError as e:
            print(f"\n⚠ {e}")
            return None

        print("\n" + generate_summary_text(result))
        return result

    def export_results(self, result):
        """Export complete results to JSON and the breakdown to CSV"""
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        json_path = Path(f"howmuch_{stamp}.json")
        csv_path = Path(f"howmuch_{stamp}_breakdown.csv")

        data = export_to_dict(self.session.people, self.session.receipts, result)
        try:
            with open(json_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            breakdown_dataframe(result).to_csv(csv_path, index=False)
        except OSError as e:
            print(f"\nExport failed: {e}")
            return

        print(f"\n✅ Settlement exported to {json_path} and {csv_path}")

    def step_summary(self):
        self._header("Summary")
        result = self.calculate_settlements()

        print("1. Add another receipt")
        print("2. Export results")
        print("3. Back")
        print("4. Start over")
        print("5. Exit")

        choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3', '4', '5'])
        try:
            if choice == '1':
                self.session.add_receipt()
                print(f"✓ Receipt {len(self.session.receipts)} started")
            elif choice == '2' and result is not None:
                self.export_results(result)
            elif choice == '3':
                self.session.back()
            elif choice == '4':
                self.session.reset()
            elif choice == '5':
                self.finished = True
        except SessionError as e:
            print(f"⚠ {e}")

    def run(self):
        """Run the CLI application"""
        self.display_banner()

        handlers = {
            WizardStep.UPLOAD: self.step_upload,
            WizardStep.ITEMS: self.step_items,
            WizardStep.PARTY: self.step_party,
            WizardStep.ASSIGN: self.step_assign,
            WizardStep.SUMMARY: self.step_summary,
        }

        while not self.finished:
            handlers[self.session.step]()

        print("\n👋 Thank you for using How Much Ah?")
