"""In-memory dashboard page and the slot writers that paint view-models into it."""
from __future__ import annotations

import html
from typing import Dict, Iterable, List, Optional, Sequence

from escort_widgets.builders import Badge, Card

HEADER_REGION = 'header-cards'
BREAKDOWN_REGION = 'breakdown-cards'
MEDICAL_REGION = 'medical-resources'
SEVERITY_REGION = 'severity-grid-item'
BADGES_REGION = 'badges'

STYLE_TOKENS = ('good', 'warning', 'danger', 'other')
SEVERITY_COLORS = {
    'good': 'var(--progress-good)',
    'warning': 'var(--progress-warning)',
    'danger': 'var(--progress-danger)',
}
BREAKDOWN_CARD_STYLE = {'flex': '0 0 auto', 'height': '80px'}


class Element:
    """Minimal stand-in for a DOM node: classes, inline style, markup or children."""

    def __init__(
        self,
        classes: Iterable[str] = (),
        children: Optional[List['Element']] = None,
        text: str = '',
        element_id: Optional[str] = None,
        tag: str = 'div',
    ) -> None:
        self.tag = tag
        self.element_id = element_id
        self.classes = list(classes)
        self.children: List[Element] = list(children or [])
        self.style: Dict[str, str] = {}
        self.inner_html: Optional[str] = None
        self.text = text

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def find_all(self, name: str) -> List['Element']:
        found = []
        for child in self.children:
            if child.has_class(name):
                found.append(child)
            found.extend(child.find_all(name))
        return found

    def set_html(self, markup: str) -> None:
        self.inner_html = markup
        self.children = []
        self.text = ''

    def set_text(self, text: str) -> None:
        self.text = text
        self.inner_html = None
        self.children = []

    def append(self, child: 'Element') -> None:
        self.inner_html = None
        self.children.append(child)

    def to_html(self) -> str:
        attrs = []
        if self.element_id:
            attrs.append(f'id="{self.element_id}"')
        if self.classes:
            attrs.append(f'class="{" ".join(self.classes)}"')
        style = '; '.join(f"{name}: {value}" for name, value in self.style.items() if value)
        if style:
            attrs.append(f'style="{style}"')
        if self.inner_html is not None:
            body = self.inner_html
        elif self.children:
            body = ''.join(child.to_html() for child in self.children)
        else:
            body = html.escape(self.text)
        opening = ' '.join([self.tag] + attrs)
        return f"<{opening}>{body}</{self.tag}>"


class DashboardPage:
    """Regions of pre-existing slots, looked up by id."""

    def __init__(self, regions: Dict[str, Element]) -> None:
        self.regions = regions

    def region(self, region_id: str) -> Optional[Element]:
        return self.regions.get(region_id)

    def cards(self, region_id: str) -> List[Element]:
        container = self.region(region_id)
        return container.find_all('card') if container else []

    def badges(self) -> List[Element]:
        container = self.region(BADGES_REGION)
        return container.find_all('badge') if container else []

    def to_html(self) -> str:
        return '\n'.join(element.to_html() for element in self.regions.values())


def _severity_row() -> Element:
    return Element(
        ['card'],
        [
            Element(
                ['card-header'],
                [Element(['card-title-left']), Element(['card-value-right'])],
            ),
            Element(['progress-bar'], [Element(['progress-fill'])]),
        ],
    )


def build_page(
    header_slots: int = 6,
    medical_slots: int = 3,
    badge_slots: int = 5,
    severity_rows: int = 3,
) -> DashboardPage:
    """Create the dashboard skeleton. Only breakdown cards are created later."""
    return DashboardPage(
        {
            BADGES_REGION: Element(
                ['badges'],
                [Element(['badge'], tag='span') for _ in range(badge_slots)],
                element_id=BADGES_REGION,
            ),
            HEADER_REGION: Element(
                ['cards'],
                [Element(['card']) for _ in range(header_slots)],
                element_id=HEADER_REGION,
            ),
            BREAKDOWN_REGION: Element(['cards'], element_id=BREAKDOWN_REGION),
            SEVERITY_REGION: Element(
                ['severity-grid'],
                [_severity_row() for _ in range(severity_rows)],
                element_id=SEVERITY_REGION,
            ),
            MEDICAL_REGION: Element(
                ['cards'],
                [Element(['card']) for _ in range(medical_slots)],
                element_id=MEDICAL_REGION,
            ),
        }
    )


# -----------------------------------------------------------------------------------------------
# Markup


def _escape(value: object) -> str:
    return html.escape('' if value is None else str(value))


def _style_token(value: Optional[str], default: str = 'other') -> str:
    return value if value in STYLE_TOKENS else default


def render_badge(badge: Badge) -> str:
    label, value, unit = badge
    return f"{_escape(label)}: <span>{_escape(value)}</span>{_escape(unit)}"


def render_standard_card(card: Card) -> str:
    return (
        f'<div class="card-title">{_escape(card.get("title"))}</div>'
        f'<div class="card-main">{_escape(card.get("main"))}</div>'
        f'<div class="card-note">{_escape(card.get("note"))}</div>'
    )


def render_progress_card(card: Card) -> str:
    highlight = _style_token(card.get('progress_highlight'))
    return (
        '<div class="card-header">'
        f'<div class="card-title-left">{_escape(card.get("title"))}</div>'
        f'<div class="card-value-right">{_escape(card.get("main"))}</div>'
        '</div>'
        '<div class="progress-bar">'
        f'<div class="progress-fill" style="width: {card["progress"]}%; background: var(--progress-{highlight});"></div>'
        '</div>'
        f'<div class="card-note">{_escape(card.get("note"))}</div>'
    )


def render_card(card: Card) -> str:
    if card.get('progress') is not None:
        return render_progress_card(card)
    return render_standard_card(card)


def border_color(highlight: Optional[str]) -> str:
    if highlight in STYLE_TOKENS:
        return f"var(--card-border-{highlight})"
    return ''


def severity_color(style: Optional[str]) -> str:
    return SEVERITY_COLORS.get(style or '', SEVERITY_COLORS['good'])


# -----------------------------------------------------------------------------------------------
# Slot writers


def update_card(slot: Optional[Element], card: Card) -> None:
    if slot is None:
        return
    slot.style['border-color'] = border_color(card.get('highlight'))
    slot.set_html(render_card(card))


def update_cards(slots: Sequence[Element], cards: Sequence[Card], offset: int = 0) -> None:
    for index, card in enumerate(cards):
        position = index + offset
        update_card(slots[position] if position < len(slots) else None, card)


def update_badges(page: DashboardPage, badges: Sequence[Badge]) -> None:
    slots = page.badges()
    for slot, badge in zip(slots, badges):
        slot.set_html(render_badge(badge))


def update_severity_grid(page: DashboardPage, cards: Sequence[Optional[Card]]) -> None:
    container = page.region(SEVERITY_REGION)
    if container is None:
        return
    titles = container.find_all('card-title-left')
    values = container.find_all('card-value-right')
    fills = container.find_all('progress-fill')
    for index, card in enumerate(cards):
        if card is None or index >= min(len(titles), len(values), len(fills)):
            continue
        titles[index].set_text(card['title'])
        values[index].set_text(card['main'])
        fills[index].style['width'] = f"{card['progress']}%"
        fills[index].style['background'] = severity_color(card.get('progress_highlight'))


def render_breakdown_cards(page: DashboardPage, cards: Sequence[Card]) -> None:
    container = page.region(BREAKDOWN_REGION)
    if container is None:
        return
    container.set_html('')
    for card in cards:
        slot = Element(['card'])
        slot.style.update(BREAKDOWN_CARD_STYLE)
        slot.set_html(render_card(card))
        container.append(slot)
