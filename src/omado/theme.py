"""Color & font theme derived from an Alacritty config.

Decisions:
- Resolution always starts from the built-in palette, so a theme file that
  disappears or stops parsing reverts to defaults instead of a stale color.
- A file that fails to parse contributes nothing; its imports included.
- A known key holding a value of the wrong TOML type (a number where a color
  string goes, a string where a table goes) makes the file malformed: it
  contributes nothing, the same as a parse error.
- general.import entries load first, the importing file's own values win.
- Import cycles are cut: a file already on the import chain is skipped.
- Malformed color strings are ignored per field.
"""
import logging
import os
import time
import tomllib
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


DEFAULT_FONT_SIZE = 14.0
RELOAD_INTERVAL = 0.5  # seconds


@dataclass(frozen=True)
class Theme:
    background: RGB = (26, 27, 38)
    foreground: RGB = (205, 214, 244)
    accent: RGB = (116, 199, 236)
    border: RGB = (88, 91, 112)
    done_color: RGB = (166, 173, 200)
    # Named colors, used for project labels
    red: Optional[RGB] = (243, 139, 168)
    green: Optional[RGB] = (166, 227, 161)
    yellow: Optional[RGB] = (249, 226, 175)
    blue: Optional[RGB] = (137, 180, 250)
    magenta: Optional[RGB] = (203, 166, 247)
    cyan: Optional[RGB] = (148, 226, 213)
    white: Optional[RGB] = (205, 214, 244)
    font_family: Optional[str] = None
    font_size: Optional[float] = None


DEFAULT_THEME = Theme()

_HEX_DIGITS = set("0123456789abcdefABCDEF")


def parse_hex_color(value: str) -> RGB:
    """Parse "#rrggbb" or "rrggbb"; raise ValueError otherwise."""
    if not isinstance(value, str):
        raise ValueError(f"not a color string: {value!r}")
    h = value[1:] if value.startswith("#") else value
    if len(h) != 6 or not set(h) <= _HEX_DIGITS:
        raise ValueError(f"invalid hex color: {value!r}")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _section(doc: Any, key: str) -> Optional[dict]:
    """Return doc[key] if it is a table, else None."""
    if not isinstance(doc, dict):
        return None
    value = doc.get(key)
    return value if isinstance(value, dict) else None


def _color(table: Optional[dict], key: str) -> Optional[RGB]:
    if table is None or key not in table:
        return None
    try:
        return parse_hex_color(table[key])
    except ValueError as e:
        logger.debug("Ignoring %s: %s", key, e)
        return None


def _read_document(path: str) -> Optional[dict]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.debug("Could not load theme file %s: %s", path, e)
        return None


_COLOR_KEYS = {
    "primary": ("background", "foreground"),
    "normal": ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"),
}


def _type_error(doc: dict) -> Optional[str]:
    """Describe the first known key whose value has the wrong TOML type."""
    general = doc.get("general")
    if general is not None:
        if not isinstance(general, dict):
            return "general is not a table"
        imports = general.get("import")
        if imports is not None and not (
            isinstance(imports, list) and all(isinstance(p, str) for p in imports)
        ):
            return "general.import is not a list of paths"

    colors = doc.get("colors")
    if colors is not None:
        if not isinstance(colors, dict):
            return "colors is not a table"
        for section, keys in _COLOR_KEYS.items():
            table = colors.get(section)
            if table is None:
                continue
            if not isinstance(table, dict):
                return f"colors.{section} is not a table"
            for key in keys:
                if key in table and not isinstance(table[key], str):
                    return f"colors.{section}.{key} is not a string"

    font = doc.get("font")
    if font is not None:
        if not isinstance(font, dict):
            return "font is not a table"
        size = font.get("size")
        if size is not None and (isinstance(size, bool) or not isinstance(size, (int, float))):
            return "font.size is not a number"
        normal = font.get("normal")
        if normal is not None:
            if not isinstance(normal, dict):
                return "font.normal is not a table"
            if "family" in normal and not isinstance(normal["family"], str):
                return "font.normal.family is not a string"
    return None


def _import_paths(doc: dict, base_dir: str) -> List[str]:
    general = _section(doc, "general")
    imports = general.get("import") if general else None
    if not isinstance(imports, list):
        return []
    paths = []
    for entry in imports:
        if not isinstance(entry, str):
            continue
        p = os.path.expanduser(entry)
        if not os.path.isabs(p):
            p = os.path.join(base_dir, p)
        paths.append(p)
    return paths


def apply_document(theme: Theme, doc: dict) -> Theme:
    """Return theme with every valid field present in doc applied."""
    changes: Dict[str, Any] = {}

    colors = _section(doc, "colors")
    primary = _section(colors, "primary")
    normal = _section(colors, "normal")

    bg = _color(primary, "background")
    if bg:
        changes["background"] = bg
    fg = _color(primary, "foreground")
    if fg:
        changes["foreground"] = fg

    blue = _color(normal, "blue")
    if blue:
        changes["accent"] = changes["blue"] = blue
    white = _color(normal, "white")
    if white:
        changes["border"] = changes["white"] = white
    if normal is not None and "cyan" in normal:
        cyan = _color(normal, "cyan")
        if cyan:
            changes["done_color"] = changes["cyan"] = cyan
    else:
        black = _color(normal, "black")
        if black:
            changes["done_color"] = black
    for name in ("red", "green", "yellow", "magenta"):
        c = _color(normal, name)
        if c:
            changes[name] = c

    font = _section(doc, "font")
    if font is not None:
        size = font.get("size")
        if isinstance(size, (int, float)) and not isinstance(size, bool):
            changes["font_size"] = float(size)
        family = _section(font, "normal")
        if family is not None and isinstance(family.get("family"), str):
            changes["font_family"] = family["family"]

    return replace(theme, **changes) if changes else theme


def load_theme_file(theme: Theme, path: str, _chain: Tuple[str, ...] = ()) -> Theme:
    """Layer path (and its imports, first) on top of theme."""
    key = os.path.realpath(path)
    if key in _chain:
        logger.warning("Import cycle at %s; skipping", path)
        return theme
    doc = _read_document(path)
    if doc is None:
        return theme
    problem = _type_error(doc)
    if problem:
        logger.debug("Ignoring theme file %s: %s", path, problem)
        return theme
    for imported in _import_paths(doc, os.path.dirname(path)):
        if os.path.exists(imported):
            theme = load_theme_file(theme, imported, _chain + (key,))
    return apply_document(theme, doc)


def resolve_theme(config_path: Optional[str]) -> Theme:
    """Resolve a theme from scratch: defaults, then the config if present."""
    theme = DEFAULT_THEME
    if config_path and os.path.exists(config_path):
        theme = load_theme_file(theme, config_path)
    return theme


class ThemeResolver:
    """Re-resolves the theme at most every `interval` seconds of `clock`."""

    def __init__(
        self,
        config_path: Optional[str],
        clock: Callable[[], float] = time.monotonic,
        interval: float = RELOAD_INTERVAL,
    ):
        self.config_path = config_path
        self.clock = clock
        self.interval = interval
        self.theme = resolve_theme(config_path)
        self.last_check = clock()

    def reload(self) -> bool:
        """Resolve now; return True if the theme changed."""
        old = self.theme
        self.theme = resolve_theme(self.config_path)
        self.last_check = self.clock()
        if self.theme != old:
            logger.info("Theme changed (%s)", self.config_path)
            return True
        return False

    def maybe_reload(self) -> bool:
        if self.clock() - self.last_check > self.interval:
            return self.reload()
        return False


def _brighten(rgb: RGB, percent: int) -> RGB:
    r, g, b = rgb
    return (
        min(r * percent // 100, 255),
        min(g * percent // 100, 255),
        min(b * percent // 100, 255),
    )


def project_colors(theme: Theme) -> List[RGB]:
    """Candidate label colors, padded with brightened variants if fewer than 4."""
    colors = [theme.accent]
    for c in (theme.red, theme.green, theme.yellow):
        if c is not None:
            colors.append(c)
    if theme.blue is not None and theme.blue != theme.accent:
        colors.append(theme.blue)
    if theme.magenta is not None:
        colors.append(theme.magenta)
    if theme.cyan is not None and theme.cyan != theme.done_color:
        colors.append(theme.cyan)
    if len(colors) < 4:
        colors.append(_brighten(theme.accent, 120))
        colors.append(_brighten(theme.border, 140))
    return colors


def project_hash(name: str) -> int:
    """Base-31 polynomial hash over UTF-8 bytes, 32-bit wrapping."""
    h = 0
    for byte in name.encode("utf-8"):
        h = (h * 31 + byte) & 0xFFFFFFFF
    return h


def project_color_index(theme: Theme, name: str) -> int:
    return project_hash(name) % len(project_colors(theme))


def project_color(theme: Theme, name: str) -> RGB:
    """Stable label color for a project under this theme."""
    return project_colors(theme)[project_color_index(theme, name)]


def effective_font_size(theme: Theme) -> float:
    if theme.font_size is not None:
        return theme.font_size
    return DEFAULT_FONT_SIZE


_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def _distance(a: RGB, b: RGB) -> int:
    return sum((x - y) ** 2 for x, y in zip(a, b))


def rgb_to_xterm256(rgb: RGB) -> int:
    """Nearest xterm color: the 6x6x6 cube (16-231) or the gray ramp (232-255)."""
    steps = [
        min(range(6), key=lambda i: abs(_CUBE_LEVELS[i] - c)) for c in rgb
    ]
    cube = tuple(_CUBE_LEVELS[i] for i in steps)
    cube_index = 16 + 36 * steps[0] + 6 * steps[1] + steps[2]

    # gray ramp is 8, 18, ..., 238
    gray_step = min(max(int(round((sum(rgb) / 3 - 8) / 10)), 0), 23)
    gray_level = 8 + 10 * gray_step
    gray = (gray_level, gray_level, gray_level)

    if _distance(rgb, gray) < _distance(rgb, cube):
        return 232 + gray_step
    return cube_index

