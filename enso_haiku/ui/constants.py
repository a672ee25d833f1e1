"""Colors, font sizes and layout constants."""

# Window
DEFAULT_SIZE = (1280, 800)
TITLE = "Emptiness Generator"

# Colors
BG_COLOR = (255, 255, 255)
GLYPH_COLOR = (255, 255, 255)
OUTLINE_COLOR = (255, 255, 255)
POEM_COLOR = (0, 0, 0)
TITLE_COLOR = (0, 0, 0)
TEXT_DIM = (100, 100, 100)
ERROR_COLOR = (200, 0, 0)
DOT_COLOR = (220, 220, 220)
HOME_RING_COLOR = (200, 200, 200)

# Fonts (family, size)
GLYPH_FONT = ("arial", 20)
POEM_FONT = ("notoserif", 24)
TITLE_FONT = ("georgia", 48)
BODY_FONT = ("arial", 20)
ERROR_FONT = ("arial", 24)
HINT_FONT = ("arial", 18)

POEM_LINE_SPACING = 1.6

# Ambient dots
DOT_COUNT = 8
DOT_RADIUS = 3
DOT_MAX_ALPHA = 0.1

# Error banner
BANNER_W = 600
BANNER_H = 120
BANNER_ALPHA = 0.9

HOME_INSTRUCTIONS = [
    "Press SPACEBAR to begin",
    "",
    "A haiku will be generated about",
    "sunyata (emptiness)",
    "",
    "Haikus are generated in English",
    "",
    "The haiku appears along the",
    "circular animation and in the center",
    "",
    "New haikus generate every {interval:g} seconds",
    "with fade in and fade out effects",
]
