"""Customer data checks run before any gateway is contacted."""


def digits(value: str | None) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())


def is_valid_tax_id(value: str | None) -> bool:
    """CPF (11 digits) or CNPJ (14 digits), not a single repeated digit."""
    number = digits(value)
    if len(number) not in (11, 14):
        return False
    return len(set(number)) > 1


def is_valid_phone(value: str | None) -> bool:
    """Brazilian phone with area code: 10 (landline) or 11 (mobile) digits."""
    return len(digits(value)) in (10, 11)


def format_phone(value: str | None) -> str:
    """Render a phone as (00) 00000-0000 or (00) 0000-0000."""
    number = digits(value)
    if len(number) == 11:
        return f"({number[:2]}) {number[2:7]}-{number[7:]}"
    if len(number) == 10:
        return f"({number[:2]}) {number[2:6]}-{number[6:]}"
    return value or ""
