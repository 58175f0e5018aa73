"""
Pygame display - draws story snapshots in a square window and turns
keyboard/mouse input into StoryIntents
"""

from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

import pygame

from story_system.card_machine import CardPhase
from story_system.steps import Step

from .asset_resolver import AssetResolver, card_back_name, card_front_name
from .interfaces import IntentKind, IStoryDisplay, StoryIntent

if TYPE_CHECKING:
    from story_system.snapshot import StorySnapshot
    from utils.hybrid_logger import ClassLogger


# Carousel placement as fractions of the square side
CAROUSEL_LAYOUT = {
    "bottom": 0.10,
    "left": 0.15,
    "width": 0.70,
    "height": 0.22,
    "arrow_size": 0.10,
}

# Steps whose text box accepts typing
TEXT_STEPS = {Step.NAME, Step.CAROUSEL, Step.LIGHT_3}

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (220, 40, 40)
GOLD = (119, 77, 0)


def fade_alpha(elapsed_ms: int, duration_ms: int) -> int:
    """Linear fade-out: 255 at the start, 0 once duration_ms has elapsed"""
    if duration_ms <= 0 or elapsed_ms >= duration_ms:
        return 0
    return 255 - (255 * max(0, elapsed_ms)) // duration_ms


class PygameDisplay(IStoryDisplay):
    """
    Square-window renderer.

    Controls:
        click / SPACE      advance HOME and START
        type + ENTER       submit name, card answer or final answer
        click a card / 1-9 open the n-th visible card
        ESC                close the open card unsolved
        LEFT / RIGHT       page the carousel
        F1                 toggle background music
    """

    def __init__(self, resolver: AssetResolver, card_ids: List[int], logger: 'ClassLogger',
                 size: int = 720, caption: str = "SpellCards", name_fade_ms: int = 1000):
        self.resolver = resolver
        self.card_ids = list(card_ids)
        self.logger = logger
        self.size = size
        self.caption = caption
        self.name_fade_ms = name_fade_ms
        self._fade_started_ms: Optional[int] = None

        self.screen: Optional[pygame.Surface] = None
        self.font: Optional[pygame.font.Font] = None
        self.big_font: Optional[pygame.font.Font] = None
        self._images: Dict[str, pygame.Surface] = {}
        self._text_buffer = ""
        self._last_snapshot: Optional['StorySnapshot'] = None

    # ------------------------------------------------------------------

    def setup(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.size, self.size))
        pygame.display.set_caption(self.caption)
        self.font = pygame.font.Font(None, self.size // 20)
        self.big_font = pygame.font.Font(None, self.size // 12)
        pygame.key.start_text_input()
        self._preload()

    def _preload(self) -> None:
        names = self.resolver.preload_names(self.card_ids)
        missing = self.resolver.missing(names)
        if missing:
            self.logger.warning(f"{len(missing)} image(s) missing, drawing placeholders: {missing}")
        for name in names:
            if name in missing:
                continue
            try:
                image = pygame.image.load(str(self.resolver.resolve(name))).convert_alpha()
            except pygame.error as e:
                self.logger.warning(f"Failed to load {name}: {e}")
                continue
            self._images[name] = image

    def cleanup(self) -> None:
        self._images.clear()
        pygame.key.stop_text_input()
        pygame.quit()

    # ------------------------------------------------------------------
    # Input

    def poll_intents(self) -> List[StoryIntent]:
        intents: List[StoryIntent] = []
        snapshot = self._last_snapshot
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                intents.append(StoryIntent(IntentKind.QUIT))
            elif event.type == pygame.TEXTINPUT:
                if snapshot and snapshot.step in TEXT_STEPS:
                    self._text_buffer += event.text
            elif event.type == pygame.KEYDOWN:
                intent = self._intent_for_key(event, snapshot)
                if intent:
                    intents.append(intent)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                intent = self._intent_for_click(event.pos, snapshot)
                if intent:
                    intents.append(intent)
        return intents

    def _intent_for_key(self, event, snapshot: Optional['StorySnapshot']) -> Optional[StoryIntent]:
        if event.key == pygame.K_F1:
            return StoryIntent(IntentKind.TOGGLE_MUSIC)
        if snapshot is None:
            return None
        if event.key == pygame.K_BACKSPACE:
            self._text_buffer = self._text_buffer[:-1]
            return None
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER) and snapshot.step in TEXT_STEPS:
            return StoryIntent.submit(self._text_buffer)
        if event.key == pygame.K_SPACE and snapshot.step in (Step.HOME, Step.START):
            return StoryIntent.click()
        if event.key == pygame.K_ESCAPE:
            return StoryIntent(IntentKind.CLOSE_CARD)
        if event.key == pygame.K_LEFT:
            return StoryIntent(IntentKind.PREV_PAGE)
        if event.key == pygame.K_RIGHT:
            return StoryIntent(IntentKind.NEXT_PAGE)
        if snapshot.active_card_id is None and pygame.K_1 <= event.key <= pygame.K_9:
            position = event.key - pygame.K_1
            if position < len(snapshot.visible_card_ids):
                return StoryIntent.open_card(snapshot.visible_card_ids[position])
        return None

    def _intent_for_click(self, pos: Tuple[int, int], snapshot: Optional['StorySnapshot']) -> Optional[StoryIntent]:
        if snapshot is None:
            return None
        if snapshot.step in (Step.HOME, Step.START):
            return StoryIntent.click()
        if snapshot.step is not Step.CAROUSEL or snapshot.active_card_id is not None:
            return None
        prev_rect, next_rect = self._arrow_rects()
        if prev_rect.collidepoint(pos):
            return StoryIntent(IntentKind.PREV_PAGE)
        if next_rect.collidepoint(pos):
            return StoryIntent(IntentKind.NEXT_PAGE)
        for card_id, rect in zip(snapshot.visible_card_ids, self._slot_rects(len(snapshot.visible_card_ids))):
            if rect.collidepoint(pos) and not snapshot.is_solved(card_id):
                return StoryIntent.open_card(card_id)
        return None

    # ------------------------------------------------------------------
    # Layout

    def _carousel_rect(self) -> pygame.Rect:
        s = self.size
        height = int(s * CAROUSEL_LAYOUT["height"])
        top = s - int(s * CAROUSEL_LAYOUT["bottom"]) - height
        return pygame.Rect(int(s * CAROUSEL_LAYOUT["left"]), top, int(s * CAROUSEL_LAYOUT["width"]), height)

    def _slot_rects(self, count: int) -> List[pygame.Rect]:
        area = self._carousel_rect()
        slots = max(count, 1)
        width = area.width // slots
        return [pygame.Rect(area.left + i * width, area.top, width, area.height) for i in range(count)]

    def _arrow_rects(self) -> Tuple[pygame.Rect, pygame.Rect]:
        area = self._carousel_rect()
        side = int(self.size * CAROUSEL_LAYOUT["arrow_size"])
        top = area.centery - side // 2
        return pygame.Rect(area.left - side, top, side, side), pygame.Rect(area.right, top, side, side)

    # ------------------------------------------------------------------
    # Drawing

    def render(self, snapshot: 'StorySnapshot') -> None:
        previous = self._last_snapshot
        if previous is None or previous.step is not snapshot.step or previous.active_card_id != snapshot.active_card_id:
            self._text_buffer = ""
        self._last_snapshot = snapshot

        self.screen.fill(BLACK)
        if snapshot.show_carousel_background:
            self._draw_image("carousel.png", self.screen.get_rect())
        if snapshot.show_carousel_ui and snapshot.step is Step.CAROUSEL:
            self._draw_carousel(snapshot)
            if snapshot.active_card_id is not None:
                self._draw_card_overlay(snapshot)

        step = snapshot.step
        if step is Step.HOME:
            self._draw_image("home.png", self.screen.get_rect())
            if not snapshot.countdown_unlocked:
                self._draw_countdown(snapshot)
        elif step is Step.START:
            self._draw_image("start.png", self.screen.get_rect())
        elif step is Step.NAME:
            self._draw_name(snapshot)
        elif step in (Step.LIGHT_1, Step.LIGHT_2, Step.LIGHT_4):
            self._draw_image(self.resolver.background_for(step), self.screen.get_rect())
        elif step is Step.LIGHT_3:
            self._draw_image("light_3.png", self.screen.get_rect())
            self._draw_input(0.65, snapshot.error_pulse)
        elif step is Step.END:
            self._draw_image("end.png", self.screen.get_rect())
            self._draw_text(snapshot.display_name, self.big_font, GOLD, (self.size // 2, int(self.size * 0.44)))

        pygame.display.flip()

    def _draw_image(self, name: str, rect: pygame.Rect, alpha: int = 255) -> None:
        image = self._images.get(name)
        if image is None:
            pygame.draw.rect(self.screen, (40, 40, 40), rect, width=2)
            self._draw_text(name, self.font, WHITE, rect.center)
            return
        scaled = pygame.transform.smoothscale(image, rect.size)
        if alpha < 255:
            scaled.set_alpha(alpha)
        self.screen.blit(scaled, rect.topleft)

    def _draw_text(self, text: str, font: pygame.font.Font, color, center: Tuple[int, int]) -> None:
        surface = font.render(text, True, color)
        self.screen.blit(surface, surface.get_rect(center=center))

    def _draw_countdown(self, snapshot: 'StorySnapshot') -> None:
        veil = pygame.Surface((self.size, self.size), pygame.SRCALPHA)
        veil.fill((0, 0, 0, 180))
        self.screen.blit(veil, (0, 0))
        self._draw_text("Starting soon", self.big_font, WHITE, (self.size // 2, int(self.size * 0.42)))
        self._draw_text(snapshot.countdown_text, self.big_font, WHITE, (self.size // 2, int(self.size * 0.55)))

    def _draw_name(self, snapshot: 'StorySnapshot') -> None:
        if not snapshot.name_fading:
            self._fade_started_ms = None
            self._draw_image("name.png", self.screen.get_rect())
            self._draw_input(0.45, error=False)
            return

        now = pygame.time.get_ticks()
        if self._fade_started_ms is None:
            self._fade_started_ms = now
        alpha = fade_alpha(now - self._fade_started_ms, self.name_fade_ms)
        self._draw_image("name.png", self.screen.get_rect(), alpha=alpha)

    def _draw_input(self, top_fraction: float, error: bool) -> None:
        rect = pygame.Rect(int(self.size * 0.28), int(self.size * top_fraction), int(self.size * 0.44), int(self.size * 0.07))
        pygame.draw.rect(self.screen, WHITE, rect, border_radius=6)
        if error:
            pygame.draw.rect(self.screen, RED, rect, width=3, border_radius=6)
            self._draw_text("Invalid spell", self.font, RED, (rect.centerx, rect.bottom + self.size // 25))
        self._draw_text(self._text_buffer, self.font, BLACK, rect.center)

    def _draw_carousel(self, snapshot: 'StorySnapshot') -> None:
        for card_id, rect in zip(snapshot.visible_card_ids, self._slot_rects(len(snapshot.visible_card_ids))):
            if card_id == snapshot.active_card_id:
                continue
            self._draw_image(card_front_name(card_id), rect)
            if snapshot.is_solved(card_id):
                self._draw_text("SOLVED", self.font, RED, rect.center)

        prev_rect, next_rect = self._arrow_rects()
        self._draw_text("<<", self.big_font, WHITE if snapshot.can_prev else (90, 90, 90), prev_rect.center)
        self._draw_text(">>", self.big_font, WHITE if snapshot.can_next else (90, 90, 90), next_rect.center)

    def _draw_card_overlay(self, snapshot: 'StorySnapshot') -> None:
        full = self.screen.get_rect()
        if snapshot.card_expanded:
            rect = full
        else:
            # collapsing back toward the carousel
            rect = pygame.Rect(0, 0, full.width // 5, full.height // 5)
            rect.center = self._carousel_rect().center

        card_id = snapshot.active_card_id
        if snapshot.card_flipped:
            self._draw_image(card_back_name(card_id), rect)
            if snapshot.card_phase is CardPhase.FLIPPED:
                self._draw_input(0.48, snapshot.error_pulse)
        else:
            self._draw_image(card_front_name(card_id), rect)
