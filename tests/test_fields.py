import pytest

from escort_widgets.fields import (
    LABEL_OVERRIDES,
    UNITS,
    format_number,
    percent_of,
    resolve_decimals,
    resolve_label,
    resolve_unit,
    to_title_case,
)


@pytest.mark.parametrize(
    'key, label, unit',
    [
        ('distance_km', 'Distance', 'km'),
        ('depth_km', 'Depth', 'km'),
        ('collapse_pct', 'Collapse', '%'),
        ('pga_g', 'Computed PGA', 'g'),
        ('hypocentral_distance_km', 'Hypocentral Distance', 'km'),
        ('magnitude', 'M', ''),
        ('population', 'Pop', ''),
        ('expected_injured', 'Expected Injured', ''),
        ('compartment_syndrome', 'Compartment Syndrome', ''),
    ],
)
def test_label_and_unit_from_key(key, label, unit):
    assert resolve_label(key) == label
    assert resolve_unit(key) == unit


@pytest.mark.parametrize('token', sorted(UNITS))
def test_unit_token_is_stripped_from_label(token):
    key = f"peak_reading_{token}"
    assert resolve_unit(key) == UNITS[token]
    assert resolve_label(key) == 'Peak Reading'


def test_override_applies_with_or_without_unit():
    assert resolve_label('pga') == 'Computed PGA'
    assert resolve_unit('pga') == ''
    assert resolve_label('magnitude_km') == 'M'
    assert resolve_unit('magnitude_km') == 'km'


def test_unknown_keys_degrade_to_title():
    assert resolve_label('some_new_field') == 'Some New Field'
    assert resolve_label('') == ''
    assert resolve_label('km') == ''
    assert resolve_unit('km') == 'km'
    assert resolve_unit('speed_mps') == ''


def test_title_case_keeps_inner_letters():
    assert to_title_case('major_soft_tissue') == 'Major Soft Tissue'
    assert to_title_case('icu_BEDS') == 'Icu BEDS'


def test_label_is_stable_under_repeated_override():
    for key in ['magnitude', 'population', 'pga_g', 'distance_km', 'crush_injury']:
        once = resolve_label(key)
        title = to_title_case(once)
        assert LABEL_OVERRIDES.get(title, title) == once


def test_decimals_table():
    assert resolve_decimals('pga_g') == 3
    assert resolve_decimals('max_pga') == 3
    assert resolve_decimals('hypocentral_distance_km') == 1
    assert resolve_decimals('distance_km') == 0
    assert resolve_decimals('brand_new_key') == 0


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        UNITS['m'] = 'm'  # type: ignore[index]
    with pytest.raises(TypeError):
        LABEL_OVERRIDES['Depth'] = 'D'  # type: ignore[index]


@pytest.mark.parametrize(
    'value, decimals, expected',
    [
        (1234567, 0, '1,234,567'),
        (0.0311057823510973, 3, '0.031'),
        (31.575306, 1, '31.6'),
        (31.575306, 0, '31.575'),
        (3168000, 0, '3,168,000'),
        (2.5, 0, '2.5'),
        (0, 0, '0'),
        (1234.5, 2, '1,234.50'),
        (0.0005, 3, '0.001'),
        (6, 3, '6.000'),
    ],
)
def test_format_number(value, decimals, expected):
    assert format_number(value, decimals) == expected


def test_percent_of_rounds_half_up_and_guards_zero():
    assert percent_of(1436, 2065) == 70
    assert percent_of(1, 8) == 13
    assert percent_of(3000, 2065) == 145
    assert percent_of(5, 0) == 0
    assert percent_of(5, None) == 0


def test_title_case_word_boundaries_are_ascii():
    assert to_title_case('ärzte_team') == 'äRzte Team'
    assert resolve_label('élan_km') == 'éLan'


@pytest.mark.parametrize('value', [10**26, 1e26])
def test_format_number_beyond_default_precision(value):
    assert format_number(value) == '100,000,000,000,000,000,000,000,000'
    assert format_number(value, 3) == '100,000,000,000,000,000,000,000,000.000'


@pytest.mark.parametrize(
    'value, expected',
    [
        (float('inf'), '∞'),
        (float('-inf'), '-∞'),
        (float('nan'), 'NaN'),
        (True, 'true'),
        (False, 'false'),
        ('n/a', 'n/a'),
    ],
)
def test_format_number_echoes_unformattable_values(value, expected):
    assert format_number(value, 3) == expected


def test_percent_of_large_and_non_finite_operands():
    assert percent_of(10**26, 10**24) == 10000
    assert percent_of(float('inf'), 5) == 0
    assert percent_of(5, float('inf')) == 0
    assert percent_of(float('nan'), 5) == 0
