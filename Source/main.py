"""
How Much Ah? - Receipt scanner and bill splitter

howmuch                                  # Interactive wizard
howmuch receipt.jpg                      # Scan image then continue in the wizard
howmuch receipt.jpg --quick              # Quick mode - just show parsed items
howmuch --text receipt.txt --quick       # Parse OCR text saved to a file
howmuch --help                           # Show help
"""

import sys
import argparse
from pathlib import Path

import config
from cli_interface import HowMuchCLI
from exceptions import OCRError
from logger import setup_logger
from receipt_parser import ParsingStrategy
from utils import format_currency


def quick_process(cli: HowMuchCLI, image_path: str = None, text_path: str = None):
    """Quick processing mode - just show results"""
    if text_path:
        text = Path(text_path).read_text(encoding='utf-8')
    else:
        print(f"🚀 Quick processing: {image_path}")
        text = cli.recognize(image_path)

    items = cli.parser.parse(text)

    if items:
        print(f"\n📋 Found {len(items)} items:")
        for i, item in enumerate(items, 1):
            print(f"  {i:2}. {item.name[:40]:40} {format_currency(item.price):>10}")
        print(f"\n💰 Subtotal: {format_currency(sum(item.price for item in items))}")
    else:
        print("\n⚠ No items found in receipt")
        print("Try:")
        print("  • Better image quality/lighting")
        print("  • The other parsing strategy (--strategy)")
        print("  • Manual item entry in interactive mode")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='How Much Ah? - Split your receipt easily',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  howmuch                              # Interactive mode
  howmuch receipt.jpg                  # Scan image then interactive
  howmuch receipt.jpg --quick          # Quick mode - show items only
  howmuch receipt.jpg --engine tesseract --workers 8
        """
    )

    parser.add_argument('image', nargs='?', help='Receipt image to process (JPG or PNG)')
    parser.add_argument('--text', help='File containing raw OCR text instead of an image')
    parser.add_argument(
        '--strategy',
        choices=[s.value for s in ParsingStrategy],
        default=ParsingStrategy.STRUCTURED.value,
        help='Line item extraction strategy (default: structured)'
    )
    parser.add_argument(
        '--engine',
        choices=['ocrspace', 'tesseract'],
        default='ocrspace',
        help='OCR engine (default: ocrspace)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=config.DEFAULT_MAX_WORKERS,
        help=f'Number of parallel Tesseract workers (default: {config.DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument('--quick', action='store_true', help='Show parsed items only')
    parser.add_argument('--log-level', default=config.LOG_LEVEL, help='Logging level')
    parser.add_argument('--version', action='version', version='How Much Ah? 1.0')

    args = parser.parse_args()
    setup_logger(args.log_level)

    if not config.WORKERS_MIN <= args.workers <= config.WORKERS_MAX:
        print(f"⚠ Workers must be between {config.WORKERS_MIN} and {config.WORKERS_MAX}")
        args.workers = max(config.WORKERS_MIN, min(config.WORKERS_MAX, args.workers))

    for path in (args.image, args.text):
        if path and not Path(path).exists():
            print(f"❌ File not found: {path}")
            sys.exit(1)

    cli = HowMuchCLI(strategy=ParsingStrategy(args.strategy), engine=args.engine, workers=args.workers)

    if args.quick and (args.image or args.text):
        try:
            quick_process(cli, image_path=args.image, text_path=args.text)
        except OCRError as e:
            print(f"❌ OCR failed: {e}")
            sys.exit(1)
        return

    if args.text:
        cli.load_text(Path(args.text).read_text(encoding='utf-8'))
        cli.session.advance()
    elif args.image:
        cli.process_receipt(args.image)
        cli.session.advance()

    cli.run()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!")
        sys.exit(0)
