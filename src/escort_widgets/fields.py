"""Label, unit and precision lookup for dashboard payload fields."""
from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from types import MappingProxyType
from typing import Mapping, Union

Number = Union[int, float]

UNITS: Mapping[str, str] = MappingProxyType({
    'km': 'km',
    'pct': '%',
    'g': 'g',
})

LABEL_OVERRIDES: Mapping[str, str] = MappingProxyType({
    'Magnitude': 'M',
    'Population': 'Pop',
    'Pga': 'Computed PGA',
})

# en-US default when no precision is forced
DEFAULT_MAX_FRACTION_DIGITS = 3

# word characters and boundaries are ASCII only, as in JavaScript regexes
_WORD_START = re.compile(r'\b\w', re.ASCII)


def to_title_case(text: str) -> str:
    return _WORD_START.sub(lambda match: match.group(0).upper(), text.replace('_', ' '))


def _last_segment(key: str) -> str:
    return key.split('_')[-1]


def resolve_label(key: str) -> str:
    parts = key.split('_')
    base_key = '_'.join(parts[:-1]) if parts[-1] in UNITS else key
    title = to_title_case(base_key)
    return LABEL_OVERRIDES.get(title, title)


def resolve_unit(key: str) -> str:
    return UNITS.get(_last_segment(key), '')


def resolve_decimals(key: str) -> int:
    if 'pga' in key:
        return 3
    if key == 'hypocentral_distance_km':
        return 1
    return 0


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite(value: Number) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


def _quantize(value: Decimal, places: int) -> Decimal:
    with localcontext() as context:
        context.prec = max(context.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_number(value: Number, decimals: int = 0) -> str:
    """Format ``value`` with comma grouping.

    ``decimals > 0`` forces exactly that many fraction digits. Otherwise the
    en-US default applies: up to three fraction digits, trailing zeros dropped.
    Non-numeric values are echoed as text, non-finite ones as NaN / ∞.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if not is_number(value):
        return str(value)
    if isinstance(value, float) and math.isnan(value):
        return 'NaN'
    if isinstance(value, float) and math.isinf(value):
        return '-∞' if value < 0 else '∞'
    places = decimals if decimals > 0 else DEFAULT_MAX_FRACTION_DIGITS
    quantized = _quantize(Decimal(str(value)), places)
    if quantized == 0:
        quantized = abs(quantized)
    text = f"{quantized:,.{places}f}"
    if decimals > 0:
        return text
    return text.rstrip('0').rstrip('.')


def percent_of(value: Number, total: Number) -> int:
    """Whole percentage of ``value`` in ``total``, rounded half up.

    An empty total or a non-finite operand gives 0.
    """
    if not total or not _finite(value) or not _finite(total):
        return 0
    numerator, denominator = Decimal(str(value)), Decimal(str(total))
    with localcontext() as context:
        context.prec = max(context.prec, abs(numerator.adjusted()) + abs(denominator.adjusted()) + 6)
        share = numerator / denominator * 100
    return int(_quantize(share, 0))
