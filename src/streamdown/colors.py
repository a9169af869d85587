"""Terminal control sequence and glyph constants."""

ESC = "\033"

RESET = "\033[0m"
UNDERLINE_ON = "\033[4m"
UNDERLINE_OFF = "\033[24m"

# OSC 8 hyperlinks: ESC ] 8 ; ; URL ESC \  text  ESC ] 8 ; ; ESC \
OSC = "\033]"
ST = "\033\\"
OSC8_CLOSE = OSC + "8;;" + ST


def osc8_open(url: str) -> str:
    """Open an OSC 8 hyperlink pointing at url."""
    return OSC + "8;;" + url + ST


# CSI final bytes that end a sequence for width accounting.
CSI_TERMINATORS = frozenset("mKHJ")

# Box drawing
H_LINE = "─"
V_LINE = "│"
TOP_LEFT = "┌"
TOP_RIGHT = "┐"
BOTTOM_LEFT = "└"
BOTTOM_RIGHT = "┘"
TOP_T = "┬"
BOTTOM_T = "┴"
LEFT_T = "├"
RIGHT_T = "┤"
CROSS = "┼"

BULLET = "•"
PLUS_EXPAND_MARKER = "+---"
CHECKBOX_CHECKED = "☑"
CHECKBOX_UNCHECKED = "☐"
IMAGE_MARKER = "\U0001f5bc"  # 🖼

THINK_OPEN = TOP_LEFT + H_LINE + " thinking " + H_LINE
THINK_CLOSE = BOTTOM_LEFT

HR_MAX_WIDTH = 40
