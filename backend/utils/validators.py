"""
Input Validation Utilities
Validates request payloads at the API boundary.

Usage:
    from utils.validators import validate_stock_adjustment, ValidationError

    try:
        validated = validate_stock_adjustment(request.get_json())
    except ValidationError as e:
        return validation_error_response(e)
"""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from flask import jsonify

from config.constants import (
    MAX_BILL_NAME_LENGTH,
    MAX_BILL_NUMBER_LENGTH,
    MAX_REMARKS_LENGTH,
    MAX_STOCK_AMOUNT,
    MAX_STOCK_QTY,
    MONTH_PATTERN,
)


class ValidationError(Exception):
    """Custom validation error with details"""

    def __init__(self, message: str, field: str = None, details: Dict = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self.message)


def validation_error_response(error: ValidationError):
    """Build the 400 response for a ValidationError"""
    body = {'error': error.message}
    if error.field:
        body['field'] = error.field
    if error.details:
        body['details'] = error.details
    return jsonify(body), 400


def validate_positive_number(value: Any, field_name: str = "value", allow_zero: bool = False,
                             max_value: float = None) -> float:
    """
    Validate that a value is a positive number

    Args:
        value: Value to validate
        field_name: Name of the field for error messages
        allow_zero: If True, allows zero values
        max_value: Optional inclusive upper bound

    Returns:
        Validated number as float

    Raises:
        ValidationError: If value is not a positive number
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be a number", field=field_name)

    if math.isnan(num) or math.isinf(num):
        raise ValidationError(f"{field_name} must be a number", field=field_name)

    if allow_zero:
        if num < 0:
            raise ValidationError(f"{field_name} cannot be negative", field=field_name)
    else:
        if num <= 0:
            raise ValidationError(f"{field_name} must be a positive number", field=field_name)

    if max_value is not None and num > max_value:
        raise ValidationError(f"{field_name} is too large", field=field_name)

    return num


def validate_positive_int(value: Any, field_name: str) -> int:
    """Validate a database id style integer (>= 1). Numeric strings are accepted."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is required", field=field_name)
    try:
        num = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    if num < 1:
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name)
    return num


def validate_boolean(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false", field=field_name)
    return value


def validate_string_length(value: str, field_name: str, min_length: int = 0, max_length: int = 255) -> str:
    """
    Validate string length

    Args:
        value: String to validate
        field_name: Name of the field for error messages
        min_length: Minimum required length
        max_length: Maximum allowed length

    Returns:
        Validated string, trimmed

    Raises:
        ValidationError: If length is invalid
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field=field_name)

    value = value.strip().replace('\x00', '')

    if len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters", field=field_name)

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be less than {max_length} characters", field=field_name)

    return value


def validate_optional_string(value: Any, field_name: str, max_length: int = MAX_REMARKS_LENGTH) -> Optional[str]:
    if value is None:
        return None
    return validate_string_length(value, field_name, max_length=max_length) or None


def validate_date(value: Any, field_name: str = "date") -> date:
    """
    Validate a calendar date.

    Accepts 'YYYY-MM-DD' or a full ISO-8601 timestamp; only the date part of
    a timestamp is kept.
    """
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field_name} is required", field=field_name)

    value = value.strip()
    try:
        if re.match(r'^\d{4}-\d{2}-\d{2}$', value):
            return datetime.strptime(value, '%Y-%m-%d').date()
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name}", field=field_name)


def validate_month(value: Any) -> Tuple[int, int]:
    """Validate a 'YYYY-MM' month and return (year, month)"""
    if not value or not isinstance(value, str) or not re.match(MONTH_PATTERN, value):
        raise ValidationError("Invalid month format. Use YYYY-MM", field="month")
    year, month = value.split('-')
    return int(year), int(month)


def parse_id_list(raw: str) -> List[int]:
    """
    Parse '1, 2,x,3' into [1, 2, 3].
    Only whole-integer tokens are kept, so '1abc' is skipped rather than read as 1.
    """
    ids = []
    for part in (raw or '').split(','):
        part = part.strip()
        if re.match(r'^-?\d+$', part):
            ids.append(int(part))
    return ids


def _require_details(data: Dict, key: str) -> List[Dict]:
    details = data.get(key)
    if not isinstance(details, list) or len(details) == 0:
        raise ValidationError("At least one item is required", field=key)
    for index, detail in enumerate(details):
        if not isinstance(detail, dict):
            raise ValidationError("Invalid detail entry", field=f"{key}[{index}]")
    return details


def validate_attendance_batch(data: Dict) -> Dict:
    """
    Validate a site attendance batch.

    {date, site_id, attendances: [{manpower_id, is_present, is_idle, ot}]}
    """
    if not data:
        raise ValidationError("No data provided")
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")

    validated = {
        'date': validate_date(data.get('date'), 'date'),
        'site_id': validate_positive_int(data.get('site_id'), 'site_id'),
        'attendances': []
    }

    rows = data.get('attendances')
    if not isinstance(rows, list):
        raise ValidationError("attendances must be a list", field='attendances')

    errors = []
    seen = set()
    for index, row in enumerate(rows):
        prefix = f"attendances[{index}]"
        if not isinstance(row, dict):
            errors.append({'field': prefix, 'error': 'Invalid attendance entry'})
            continue
        try:
            manpower_id = validate_positive_int(row.get('manpower_id'), f"{prefix}.manpower_id")
            if manpower_id in seen:
                raise ValidationError("Duplicate manpower entry", field=f"{prefix}.manpower_id")
            seen.add(manpower_id)

            ot = row.get('ot')
            validated['attendances'].append({
                'manpower_id': manpower_id,
                'is_present': validate_boolean(row.get('is_present'), f"{prefix}.is_present"),
                'is_idle': validate_boolean(row.get('is_idle'), f"{prefix}.is_idle"),
                'ot': None if ot is None else validate_positive_number(ot, f"{prefix}.ot", allow_zero=True)
            })
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    if errors:
        raise ValidationError("Validation failed", details={'errors': errors})

    return validated


def validate_boq_bill(data: Dict) -> Dict:
    """
    Validate a BOQ bill.

    {boq_id, bill_number, bill_name, bill_date, remarks, details: [{boq_item_id, qty}]}
    """
    if not data:
        raise ValidationError("No data provided")
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")

    validated = {}
    errors = []

    checks = (
        ('boq_id', lambda: validate_positive_int(data.get('boq_id'), 'boq_id')),
        ('bill_number', lambda: validate_string_length(
            data.get('bill_number'), 'bill_number', min_length=1, max_length=MAX_BILL_NUMBER_LENGTH)),
        ('bill_name', lambda: validate_string_length(
            data.get('bill_name'), 'bill_name', min_length=1, max_length=MAX_BILL_NAME_LENGTH)),
        ('bill_date', lambda: validate_date(data.get('bill_date'), 'bill_date')),
    )
    for key, check in checks:
        try:
            validated[key] = check()
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    remarks = data.get('remarks')
    validated['remarks'] = remarks.strip() if isinstance(remarks, str) and remarks.strip() else None

    details = data.get('details') or []
    if not isinstance(details, list):
        errors.append({'field': 'details', 'error': 'details must be a list'})
        details = []

    validated['details'] = []
    for index, detail in enumerate(details):
        prefix = f"details[{index}]"
        try:
            if not isinstance(detail, dict):
                raise ValidationError("Invalid detail entry", field=prefix)
            validated['details'].append({
                'boq_item_id': validate_positive_int(detail.get('boq_item_id'), f"{prefix}.boq_item_id"),
                'qty': validate_positive_number(detail.get('qty', 0), f"{prefix}.qty", allow_zero=True)
            })
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    if errors:
        raise ValidationError("Validation failed", details={'errors': errors})

    return validated


def validate_opening_stock(data: Dict) -> Dict:
    """
    Validate an opening stock document.

    {site_id, details: [{item_id (or item), opening_stock, opening_rate, opening_value}]}
    """
    if not data:
        raise ValidationError("No data provided")
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")

    site_id = validate_positive_int(data.get('site_id'), 'site_id')
    details = _require_details(data, 'details')

    validated_details = []
    seen = set()
    for index, detail in enumerate(details):
        prefix = f"details[{index}]"
        raw_item = detail.get('item_id', detail.get('item'))
        if raw_item is None or raw_item == '':
            raise ValidationError("Item is required", field=f"{prefix}.item_id")
        item_id = validate_positive_int(raw_item, f"{prefix}.item_id")
        if item_id in seen:
            raise ValidationError("Duplicate item entries are not allowed", field=f"{prefix}.item_id")
        seen.add(item_id)

        validated_details.append({
            'item_id': item_id,
            'opening_stock': validate_positive_number(
                detail.get('opening_stock'), f"{prefix}.opening_stock", allow_zero=True, max_value=MAX_STOCK_QTY),
            'opening_rate': validate_positive_number(
                detail.get('opening_rate'), f"{prefix}.opening_rate", allow_zero=True, max_value=MAX_STOCK_AMOUNT),
            'opening_value': validate_positive_number(
                detail.get('opening_value'), f"{prefix}.opening_value", allow_zero=True, max_value=MAX_STOCK_AMOUNT),
        })

    return {'site_id': site_id, 'details': validated_details}


def validate_stock_adjustment(data: Dict) -> Dict:
    """
    Validate a stock adjustment.

    {date, site_id, remarks, details: [{item_id, issued_qty, received_qty, rate, amount, remarks}]}
    Missing quantities, rate and amount default to 0.
    """
    if not data:
        raise ValidationError("No data provided")
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")

    validated = {
        'date': validate_date(data.get('date'), 'date'),
        'site_id': validate_positive_int(data.get('site_id'), 'site_id'),
        'remarks': validate_optional_string(data.get('remarks'), 'remarks'),
        'details': []
    }

    for index, detail in enumerate(_require_details(data, 'details')):
        prefix = f"details[{index}]"
        row = {'item_id': validate_positive_int(detail.get('item_id'), f"{prefix}.item_id")}
        for key in ('issued_qty', 'received_qty', 'rate', 'amount'):
            value = detail.get(key)
            row[key] = 0.0 if value is None else validate_positive_number(
                value, f"{prefix}.{key}", allow_zero=True)
        row['remarks'] = validate_optional_string(detail.get('remarks'), f"{prefix}.remarks")
        validated['details'].append(row)

    return validated
