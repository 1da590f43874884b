"""
Drawing surface configuration.

Canvas size, slide layout, and color palette. Coordinates are logical
canvas units.
"""

CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 700

# Layout boxes (x is the horizontal center for text rows)
AVATAR_X = 30
AVATAR_Y = 250
AVATAR_SPACING = 70
AVATAR_SIZE = 30

TITLE_X = 500
TITLE_Y = 75
TITLE_WIDTH = 1000

CONTENT_X = 500
CONTENT_Y = 120
CONTENT_WIDTH = 800
CONTENT_LINE_HEIGHT = 30

CONTENT2_X = 500
CONTENT2_Y = 145
CONTENT2_WIDTH = 800
CONTENT2_LINE_HEIGHT = 26

MEDIA_X = 200
MEDIA_Y = 200
MEDIA_WIDTH = 600
MEDIA_HEIGHT = 400
MEDIA_BORDER = 2
MEDIA_BORDER_COLOR = "#e0e0e0"

# Font sizes
TITLE_FONT_SIZE = 32
CONTENT_FONT_SIZE = 22
EQUATION_FONT_SIZE = 24
AVATAR_NAME_FONT_SIZE = 12
DIRECTIVE_FONT_SIZE = 18

COLORS = {
    "background": "#e9f0f4",
    "primary": "#1a5276",
    "secondary": "#5dade2",
    "accent1": "#a9dfbf",
    "accent2": "#f39c12",
    "accent3": "#e74c3c",
    "text": "#2c3e50",
    "white": "#ffffff",
    "error": "#ff6b6b",
}

SPEAKER_BACKGROUNDS = {
    "teacher": "#f8fafe",
    "student1": "#f3e8ff",
    "student2": "#fefaf8",
}

AVATAR_SKIN = "#fdbcb4"
AVATAR_FEATURES = "#2c3e50"
