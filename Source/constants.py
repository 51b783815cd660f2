PATTERNS = {
        'price_token': r'\$?\d+\.\d{2}',
        'bare_price': r'^\$?(\d+\.\d{2})$',
        'qty_prefix': r'^\d+\s+[A-Z]',

        # Structured matcher
        'same_line_item': r'^(.*?[A-Za-z].*?)\s*\$?(\d+\.\d{2})\s*$',
        'qty_name_only': r'^(\d+)\s+([A-Z][^$]*?)\s*$',

        # Name cleanup
        'leading_qty': r'^\d+\s+',
        'leading_index': r'^\d+\.\s*',
        'leading_symbols': r'^[\*\-\+\#]+\s*',
        'repeated_plus': r'\+{2,}',
        'repeated_dots': r'\.{2,}',
        'modifiers': r'[\*\+]',
    }

# Lowercase substrings marking non-item lines
EXCLUDE_TERMS = (
    'total', 'subtotal', 'tax', 'gst', 'service', 'charge', 'svr', 'chrg',
    'cash', 'change', 'payment', 'tender', 'receipt', 'thank', 'welcome',
    'invoice', 'bill', 'discount', 'pos', 'table', 'cashier', 'station',
    'quay', 'robertson', 'buayside', 'guayside', 'rept', 'pax', 'april', 'date',
)

PLACEHOLDER_ITEM_NAME = 'Item'

ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png'}
