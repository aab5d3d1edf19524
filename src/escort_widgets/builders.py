"""Turn payload sections into badge and card view-models."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from escort_widgets.fields import (
    format_number,
    is_number,
    percent_of,
    resolve_decimals,
    resolve_label,
    resolve_unit,
)

Badge = Tuple[str, str, str]
Card = Dict[str, Any]
Payload = Mapping[str, Any]

SEVERITY_LEVELS = [
    ('mild', 'Mild', 'good'),
    ('severe', 'Severe', 'warning'),
    ('critical', 'Critical', 'danger'),
]

RESOURCES = [
    ('surgeries', 'Surgeries Required', '{percent}% of expected injured', 'other'),
    ('icu_beds', 'ICU Beds Required', '{percent}% of total capacity', 'danger'),
    ('dialysis', 'Dialysis Patients', '{percent}% of expected injured', 'warning'),
]

# Per-context presentation of the resource cards. A resource missing from a
# context is not shown there; a None value clears the field.
RESOURCE_CONTEXTS: Mapping[str, Mapping[str, Mapping[str, Any]]] = MappingProxyType({
    'base': {
        'surgeries': {},
        'icu_beds': {},
        'dialysis': {},
    },
    'header': {
        'surgeries': {
            'progress_highlight': 'warning',
            'highlight': 'warning',
            'progress': None,
            'note': 'initial phase',
        },
        'icu_beds': {
            'highlight': 'danger',
            'progress': 75,
            'note': '75% of total capacity',
        },
    },
    'medical-resources': {
        'surgeries': {
            'progress_highlight': 'other',
            'highlight': None,
            'note': None,
        },
        'icu_beds': {
            'highlight': 'danger',
            'note': None,
        },
        'dialysis': {
            'highlight': 'warning',
            'note': None,
        },
    },
})


def _section(payload: Optional[Payload], *path: str) -> Mapping[str, Any]:
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return {}
        node = node.get(key)
    return node if isinstance(node, Mapping) else {}


def _number(value: Any) -> Optional[float]:
    return value if is_number(value) else None


# null and non-numeric fields are both treated as missing
def _present(section: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    return [(key, value) for key, value in section.items() if is_number(value)]


def _expected_injured(payload: Optional[Payload]) -> float:
    return _number(_section(payload, 'seismic').get('expected_injured')) or 0


def _plain(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_badges(payload: Optional[Payload]) -> List[Badge]:
    return [
        (resolve_label(key), format_number(value, resolve_decimals(key)), resolve_unit(key))
        for key, value in _present(_section(payload, 'inputs'))
    ]


def build_seismic_cards(payload: Optional[Payload]) -> List[Card]:
    return [
        {
            'title': resolve_label(key),
            'main': format_number(value, resolve_decimals(key)),
            'note': resolve_unit(key),
        }
        for key, value in _present(_section(payload, 'seismic'))
    ]


def build_distribution(total: Optional[float], distribution: Optional[Mapping[str, Any]] = None) -> List[Card]:
    if not _number(total):
        return []
    return [
        {
            'title': resolve_label(key),
            'main': format_number(value),
            'progress': percent_of(value, total),
            'progress_highlight': 'other',
        }
        for key, value in _present(distribution or {})
    ]


def build_orthopedic_distribution(payload: Optional[Payload]) -> List[Card]:
    medical = _section(payload, 'medical')
    return build_distribution(
        medical.get('orthopedic_patients'),
        _section(payload, 'medical', 'orthopedic_distribution'),
    )


def build_orthopedic_patients_card(payload: Optional[Payload]) -> List[Card]:
    orthopedic = _number(_section(payload, 'medical').get('orthopedic_patients')) or 0
    expected_injured = _expected_injured(payload)
    if not orthopedic or not expected_injured:
        return []
    return [
        {
            'title': 'Orthopedic Patients',
            'main': format_number(orthopedic),
            'note': f"{percent_of(orthopedic, expected_injured)}% of injured",
        }
    ]


def build_severity_grid(payload: Optional[Payload]) -> List[Optional[Card]]:
    """Mild/Severe/Critical rows in fixed order.

    A null level keeps its position as ``None`` so the matching grid row is
    left alone; it counts as zero towards the total.
    """
    severity = _section(payload, 'medical', 'severity')
    if not _present(severity):
        return []
    total = sum(_number(severity.get(key)) or 0 for key, _, _ in SEVERITY_LEVELS)
    grid: List[Optional[Card]] = []
    for key, title, style in SEVERITY_LEVELS:
        value = _number(severity.get(key))
        if value is None:
            grid.append(None)
            continue
        grid.append(
            {
                'title': title,
                'main': _plain(value),
                'progress': percent_of(value, total),
                'progress_highlight': style,
            }
        )
    return grid


def build_resource_cards(payload: Optional[Payload], context: str = 'base') -> List[Card]:
    if context not in RESOURCE_CONTEXTS:
        raise ValueError(f"Unknown resource context '{context}'. Available: {', '.join(RESOURCE_CONTEXTS)}")
    policy = RESOURCE_CONTEXTS[context]
    resources = _section(payload, 'medical', 'resources')
    expected_injured = _expected_injured(payload)
    cards: List[Card] = []
    for key, title, note, style in RESOURCES:
        value = _number(resources.get(key))
        if key not in policy or value is None or not expected_injured > 0:
            continue
        percent = percent_of(value, expected_injured)
        card = {
            'title': title,
            'main': format_number(value),
            'note': note.format(percent=percent),
            'progress': percent,
            'progress_highlight': style,
        }
        card.update(policy[key])
        cards.append(card)
    return cards


def build_field_table(payload: Optional[Payload]) -> pd.DataFrame:
    rows = []
    for section in ('inputs', 'seismic'):
        for key, value in _present(_section(payload, section)):
            decimals = resolve_decimals(key)
            rows.append(
                {
                    'section': section,
                    'key': key,
                    'label': resolve_label(key),
                    'value': value,
                    'formatted': format_number(value, decimals),
                    'unit': resolve_unit(key),
                    'decimals': decimals,
                }
            )
    return pd.DataFrame(rows, columns=['section', 'key', 'label', 'value', 'formatted', 'unit', 'decimals'])
