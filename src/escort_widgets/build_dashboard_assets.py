#!/usr/bin/env python3
"""Generate the escort dashboard (data + HTML) from an estimate payload."""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import requests

from escort_widgets.builders import (
    Payload,
    build_badges,
    build_field_table,
    build_orthopedic_distribution,
    build_orthopedic_patients_card,
    build_resource_cards,
    build_seismic_cards,
    build_severity_grid,
)
from escort_widgets.page import (
    HEADER_REGION,
    MEDICAL_REGION,
    DashboardPage,
    build_page,
    render_breakdown_cards,
    update_badges,
    update_cards,
    update_severity_grid,
)

OUTPUT_DIR = Path(os.environ.get('ESCORT_OUTPUT_DIR', Path.cwd() / 'escort_dashboard'))
FETCH_TIMEOUT = float(os.environ.get('ESCORT_FETCH_TIMEOUT', 30))
HEADER_SLOTS = int(os.environ.get('ESCORT_HEADER_SLOTS', 6))
MEDICAL_SLOTS = int(os.environ.get('ESCORT_MEDICAL_SLOTS', 3))
BADGE_SLOTS = int(os.environ.get('ESCORT_BADGE_SLOTS', 5))

# Header slots: 0-2 seismic cards, 3 orthopedic patients, 4-5 surgeries / ICU beds.
HEADER_SEISMIC_OFFSET = 0
HEADER_ORTHOPEDIC_OFFSET = 3
HEADER_RESOURCES_OFFSET = 4
MEDICAL_RESOURCES_OFFSET = 0

SAMPLE_DATA: Dict[str, Any] = {
    'inputs': {
        'magnitude': 6,
        'population': 3168000,
        'distance_km': 30,
        'depth_km': 10,
        'collapse_pct': 2,
    },
    'seismic': {
        'hypocentral_distance_km': 31.575306,
        'pga_g': 0.0311057823510973,
        'expected_injured': 2065,
    },
    'medical': {
        'orthopedic_patients': 1797,
        'orthopedic_distribution': {
            'fractures': 1168,
            'crush_injury': 234,
            'compartment_syndrome': 137,
            'major_soft_tissue': 131,
            'crush_syndrome': 127,
        },
        'severity': {
            'mild': 584,
            'severe': 949,
            'critical': 264,
        },
        'resources': {
            'surgeries': 1436,
            'icu_beds': 311,
            'dialysis': 127,
        },
    },
}


class PayloadError(RuntimeError):
    """A payload could not be obtained; nothing was rendered."""


class NetworkFailure(PayloadError):
    pass


class ParseFailure(PayloadError):
    pass


def update_all(payload: Optional[Payload], page: DashboardPage) -> DashboardPage:
    update_badges(page, build_badges(payload))

    header_cards = page.cards(HEADER_REGION)
    update_cards(header_cards, build_seismic_cards(payload), HEADER_SEISMIC_OFFSET)
    update_cards(header_cards, build_orthopedic_patients_card(payload), HEADER_ORTHOPEDIC_OFFSET)
    update_cards(header_cards, build_resource_cards(payload, 'header'), HEADER_RESOURCES_OFFSET)

    render_breakdown_cards(page, build_orthopedic_distribution(payload))

    update_cards(
        page.cards(MEDICAL_REGION),
        build_resource_cards(payload, 'medical-resources'),
        MEDICAL_RESOURCES_OFFSET,
    )

    update_severity_grid(page, build_severity_grid(payload))
    return page


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name}")


def _parse_payload(text: str, source: str) -> Dict[str, Any]:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseFailure(f"Malformed JSON from {source}: {exc}") from exc


def fetch_payload(url: str, timeout: float = FETCH_TIMEOUT) -> Dict[str, Any]:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkFailure(f"Fetching {url} failed: {exc}") from exc
    return _parse_payload(response.text, url)


def load_payload(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise PayloadError(f"Missing payload file: {path}")
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as exc:
        raise ParseFailure(f"Payload file {path} is not UTF-8: {exc}") from exc
    except OSError as exc:
        raise PayloadError(f"Cannot read payload file {path}: {exc}") from exc
    return _parse_payload(text, str(path))


def handle_fetch(url: str, page: DashboardPage) -> DashboardPage:
    try:
        payload = fetch_payload(url)
    except PayloadError as exc:
        print(f"⚠️  Failed to fetch or parse JSON: {exc}", file=sys.stderr)
        raise
    return update_all(payload, page)


def _display(path: Path) -> Path:
    try:
        return path.relative_to(Path.cwd())
    except ValueError:
        return path


def _write_data_js(payload: Payload, output_dir: Path) -> Path:
    data_js = output_dir / 'escort_data.js'
    data_js.parent.mkdir(parents=True, exist_ok=True)
    data_js.write_text(f"window.ESCORT_DATA = {json.dumps(payload)};\n", encoding='utf-8')
    print(f"✔️  Wrote {_display(data_js)}")
    return data_js


def _write_csv(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    print(f"✔️  Wrote {_display(path)}")
    return path


def _write_dashboard_html(page: DashboardPage, output_dir: Path) -> Path:
    html_path = output_dir / 'escort_dashboard.html'
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html_template = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Escort · Casualty Estimate</title>
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <style>
    :root {
      --progress-good: #22c55e; --progress-warning: #f59e0b; --progress-danger: #ef4444; --progress-other: #38bdf8;
      --card-border-good: rgba(34,197,94,0.8); --card-border-warning: rgba(245,158,11,0.8);
      --card-border-danger: rgba(239,68,68,0.8); --card-border-other: rgba(56,189,248,0.8);
    }
    * { box-sizing: border-box; }
    body { margin: 0; background: #020617; color: #e2e8f0; font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; }
    .shell { width: min(1200px, 100%); margin: 0 auto; padding: 36px 32px 56px; display: flex; flex-direction: column; gap: 24px; }
    .badges { display: flex; flex-wrap: wrap; gap: 10px; }
    .badge { border-radius: 999px; border: 1px solid rgba(148,163,184,0.35); padding: 6px 14px; background: rgba(8,17,34,0.8); font-size: 0.9rem; }
    .badge span { font-weight: 600; color: #5eead4; }
    .cards { display: flex; flex-wrap: wrap; gap: 16px; }
    .severity-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 16px; }
    .card { min-width: 180px; border-radius: 20px; padding: 16px 18px; background: rgba(2,6,23,0.95); border: 1px solid rgba(94,234,212,0.25); display: flex; flex-direction: column; gap: 8px; }
    .card-title, .card-title-left { font-size: 0.8rem; letter-spacing: 0.08em; text-transform: uppercase; color: #cbd5f5; }
    .card-main { font-size: 1.6rem; font-weight: 600; }
    .card-note { font-size: 0.85rem; color: #94a3b8; }
    .card-header { display: flex; justify-content: space-between; align-items: baseline; gap: 12px; }
    .card-value-right { font-weight: 600; }
    .progress-bar { height: 8px; border-radius: 999px; background: rgba(148,163,184,0.2); overflow: hidden; }
    .progress-fill { height: 100%; border-radius: inherit; }
  </style>
</head>
<body>
  <div class="shell">
__ESCORT_PAGE__
  </div>
  <script src="escort_data.js"></script>
</body>
</html>
"""
    html_path.write_text(html_template.replace('__ESCORT_PAGE__', page.to_html()), encoding='utf-8')
    print(f"✔️  Wrote {_display(html_path)}")
    return html_path


def build_assets(payload: Payload, output_dir: Path = OUTPUT_DIR, with_table: bool = False) -> DashboardPage:
    page = update_all(
        payload,
        build_page(header_slots=HEADER_SLOTS, medical_slots=MEDICAL_SLOTS, badge_slots=BADGE_SLOTS),
    )
    _write_data_js(payload, output_dir)
    _write_dashboard_html(page, output_dir)
    if with_table:
        _write_csv(build_field_table(payload), output_dir / 'escort_fields.csv')
    return page


def main() -> None:
    parser = argparse.ArgumentParser(description='Render the escort dashboard from an estimate payload.')
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--url', help='Fetch the payload from this URL')
    source.add_argument('--file', type=Path, help='Read the payload from a local JSON file')
    parser.add_argument('--output', type=Path, default=OUTPUT_DIR, help='Output directory')
    parser.add_argument('--table', action='store_true', help='Also export the resolved fields as CSV')
    args = parser.parse_args()
    try:
        if args.url:
            payload = fetch_payload(args.url)
        elif args.file:
            payload = load_payload(args.file)
        else:
            payload = SAMPLE_DATA
    except PayloadError as exc:
        print(f"⚠️  Failed to fetch or parse JSON: {exc}", file=sys.stderr)
        sys.exit(1)
    build_assets(payload, args.output, with_table=args.table)


if __name__ == '__main__':
    main()
