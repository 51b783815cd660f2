"""
Exceptions raised by How Much Ah?
"""


class HowMuchError(Exception):
    """Base class for all application errors"""


class SettlementPreconditionError(HowMuchError, ValueError):
    """Receipts are not ready to be settled (unassigned items, missing payer)"""


class SessionError(HowMuchError):
    """Invalid operation on a splitting session"""


class WizardTransitionError(SessionError):
    """The wizard cannot move to the requested step yet"""


class OCRError(HowMuchError):
    """OCR provider failed or returned no text"""
