"""Card form validation messages.

The card fields are validated client-side by the processor's JavaScript;
what reaches the server is, per field, the kind of problem found
(``undefined`` for a missing value, ``invalid`` for a malformed one).
"""

from collections.abc import Mapping

from billing.notices import ERROR, NoticeQueue

INVALID = "invalid"
UNDEFINED = "undefined"

CARD_FIELDS = {
    "card-number": "Credit Card Number",
    "card-expiry": "Credit Card Expiration",
    "card-cvc": "Credit Card CVC",
}


def form_error_message(field: str, kind: str = UNDEFINED) -> str:
    if kind == INVALID:
        return f"Please enter a valid {field}."
    return f"{field} is a required field."


def validate_card_form(form: Mapping[str, str | None], notices: NoticeQueue) -> int:
    """Queue one error notice per reported field problem; return how many."""
    added = 0
    for key, label in CARD_FIELDS.items():
        kind = form.get(key)
        if kind:
            notices.add(form_error_message(label, kind), ERROR)
            added += 1
    return added
