"""Persistent debugger preferences: behaviour switches, fonts and font colours."""

from __future__ import annotations

import json
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any


class DebuggerConfig(IntEnum):
    """Boolean behaviour switches."""

    AUTO_RELOAD_SYMBOLS = 0
    PRESERVE_LOST_SYMBOLS = 1
    PRESERVE_BREAKPOINT_SYMBOL = 2


class DebuggerFont(IntEnum):
    """Fonts that can be configured."""

    APP_FONT = 0
    FIXED_FONT = 1
    CODE_FONT = 2
    LABEL_FONT = 3
    HEX_FONT = 4


class FontType(Enum):
    """Where a font's value comes from."""

    APPLICATION_DEFAULT = 0
    FIXED_DEFAULT = 1
    CUSTOM = 2


_CONFIG_NAMES = {
    DebuggerConfig.AUTO_RELOAD_SYMBOLS: "AutoReloadSymbols",
    DebuggerConfig.PRESERVE_LOST_SYMBOLS: "PreserveLostSymbols",
    DebuggerConfig.PRESERVE_BREAKPOINT_SYMBOL: "PreserveBreakpointSymbol",
}

_CONFIG_DEFAULTS = {
    DebuggerConfig.AUTO_RELOAD_SYMBOLS: False,
    DebuggerConfig.PRESERVE_LOST_SYMBOLS: True,
    DebuggerConfig.PRESERVE_BREAKPOINT_SYMBOL: False,
}

_FONT_NAMES = {
    DebuggerFont.APP_FONT: "Application Font",
    DebuggerFont.FIXED_FONT: "Default Fixed Font",
    DebuggerFont.CODE_FONT: "Code Font",
    DebuggerFont.LABEL_FONT: "Label Font",
    DebuggerFont.HEX_FONT: "Hex viewer font",
}

DEFAULT_FONT_COLOR = "#000000"
APP_DEFAULT_MARK = "AppDefault"
FIXED_DEFAULT_MARK = "FixedDefault"
_FONT_KEY = "font"


def _config_location(config: DebuggerConfig) -> str:
    return "Config/" + _CONFIG_NAMES[config]


def _font_location(font: DebuggerFont) -> str:
    return "Fonts/" + _FONT_NAMES[font]


def _font_color_location(font: DebuggerFont) -> str:
    return f"Fonts/{_FONT_NAMES[font]} Color"


def _stored_font(value: Any) -> tuple[bool, Any]:
    """Return (True, font) when ``value`` holds an explicitly stored font."""
    if isinstance(value, dict) and _FONT_KEY in value:
        return True, value[_FONT_KEY]
    return False, None


class Settings:
    """Key/value preferences kept in a JSON file, with font bookkeeping on top."""

    def __init__(self, path: str | Path | None = None, app_font: Any = "") -> None:
        self.path = Path(path) if path is not None else None
        self.app_font = app_font
        self._values: dict[str, Any] = {}
        if self.path is not None and self.path.exists():
            with self.path.open(encoding="utf-8") as fh:
                try:
                    data = json.load(fh)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"invalid settings file {self.path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(f"invalid settings file {self.path}: not an object")
            self._values = data
        self._config: dict[DebuggerConfig, Any] = {}
        self._fonts: dict[DebuggerFont, Any] = {}
        self._font_types: dict[DebuggerFont, FontType] = {}
        self._font_colors: dict[DebuggerFont, Any] = {}
        self._load_config()
        self._load_fonts()

    # raw storage

    def get(self, key: str, default: Any = None) -> Any:
        """Stored value for ``key``, or ``default``."""
        return self._values.get(key, default)

    def set_value(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        self._values[key] = value

    def save(self) -> None:
        """Write all stored values to the settings file, if one is set."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(self._values, fh, indent=2, sort_keys=True)

    # behaviour switches

    def _load_config(self) -> None:
        for config, default in _CONFIG_DEFAULTS.items():
            value = self.get(_config_location(config))
            self._config[config] = value if isinstance(value, bool) else default

    def set_config(self, config: DebuggerConfig, value: Any) -> None:
        """Set and store a behaviour switch."""
        self._config[config] = value
        self.set_value(_config_location(config), value)

    def auto_reload_symbols(self) -> bool:
        return bool(self._config[DebuggerConfig.AUTO_RELOAD_SYMBOLS])

    def set_auto_reload_symbols(self, value: bool) -> None:
        self.set_config(DebuggerConfig.AUTO_RELOAD_SYMBOLS, bool(value))

    def preserve_lost_symbols(self) -> bool:
        return bool(self._config[DebuggerConfig.PRESERVE_LOST_SYMBOLS])

    def set_preserve_lost_symbols(self, value: bool) -> None:
        self.set_config(DebuggerConfig.PRESERVE_LOST_SYMBOLS, bool(value))

    def preserve_breakpoint_symbol(self) -> bool:
        return bool(self._config[DebuggerConfig.PRESERVE_BREAKPOINT_SYMBOL])

    def set_preserve_breakpoint_symbol(self, value: bool) -> None:
        self.set_config(DebuggerConfig.PRESERVE_BREAKPOINT_SYMBOL, bool(value))

    # fonts

    def _load_fonts(self) -> None:
        app, fixed = DebuggerFont.APP_FONT, DebuggerFont.FIXED_FONT

        found, font = _stored_font(self.get(_font_location(app)))
        if found:
            self._fonts[app] = font
            self._font_types[app] = FontType.CUSTOM
        else:
            self._fonts[app] = self.app_font
            self._font_types[app] = FontType.APPLICATION_DEFAULT

        found, font = _stored_font(self.get(_font_location(fixed)))
        if found:
            self._fonts[fixed] = font
            self._font_types[fixed] = FontType.CUSTOM
        else:
            self._fonts[fixed] = self._fonts[app]
            self._font_types[fixed] = FontType.APPLICATION_DEFAULT

        for f in DebuggerFont:
            if f <= fixed:
                continue
            stored = self.get(_font_location(f))
            found, font = _stored_font(stored)
            if found:
                self._fonts[f] = font
                self._font_types[f] = FontType.CUSTOM
            elif stored == FIXED_DEFAULT_MARK:
                self._fonts[f] = self._fonts[fixed]
                self._font_types[f] = FontType.FIXED_DEFAULT
            else:
                self._fonts[f] = self._fonts[app]
                self._font_types[f] = FontType.CUSTOM

        for f in DebuggerFont:
            if f > fixed:
                self._font_colors[f] = self.get(_font_color_location(f), DEFAULT_FONT_COLOR)

    def font_name(self, font: DebuggerFont) -> str:
        """Human readable name of a font slot."""
        return _FONT_NAMES[DebuggerFont(font)]

    def font(self, font: DebuggerFont) -> Any:
        return self._fonts[DebuggerFont(font)]

    def set_font(self, font: DebuggerFont, value: Any) -> None:
        """Use a custom font for ``font``."""
        font = DebuggerFont(font)
        self._font_types[font] = FontType.CUSTOM
        self._fonts[font] = value
        self.set_value(_font_location(font), {_FONT_KEY: value})
        if font <= DebuggerFont.FIXED_FONT:
            self._update_fonts()

    def font_type(self, font: DebuggerFont) -> FontType:
        return self._font_types[DebuggerFont(font)]

    def set_font_type(self, font: DebuggerFont, font_type: FontType) -> None:
        """Change where the value of ``font`` comes from."""
        font = DebuggerFont(font)
        font_type = FontType(font_type)
        if self._font_types[font] == font_type:
            return
        self._font_types[font] = font_type
        if font_type is FontType.APPLICATION_DEFAULT:
            self.set_value(_font_location(font), APP_DEFAULT_MARK)
            if font == DebuggerFont.APP_FONT:
                self._fonts[font] = self.app_font
            else:
                self._fonts[font] = self._fonts[DebuggerFont.APP_FONT]
        elif font_type is FontType.FIXED_DEFAULT:
            if font > DebuggerFont.FIXED_FONT:
                self.set_value(_font_location(font), FIXED_DEFAULT_MARK)
                self._fonts[font] = self._fonts[DebuggerFont.FIXED_FONT]
        else:
            self.set_value(_font_location(font), {_FONT_KEY: self._fonts[font]})
        if font > DebuggerFont.FIXED_FONT:
            self._update_fonts()

    def font_color(self, font: DebuggerFont) -> Any:
        """Colour of ``font``; None for the application and fixed fonts."""
        return self._font_colors.get(DebuggerFont(font))

    def set_font_color(self, font: DebuggerFont, color: Any) -> None:
        """Set the colour of a font; ignored for the application and fixed fonts."""
        font = DebuggerFont(font)
        if font > DebuggerFont.FIXED_FONT:
            self._font_colors[font] = color
            self.set_value(_font_color_location(font), color)

    def _update_fonts(self) -> None:
        for f in DebuggerFont:
            if f <= DebuggerFont.FIXED_FONT:
                continue
            if self._font_types[f] is FontType.APPLICATION_DEFAULT:
                self._fonts[f] = self._fonts[DebuggerFont.APP_FONT]
            elif self._font_types[f] is FontType.FIXED_DEFAULT:
                self._fonts[f] = self._fonts[DebuggerFont.FIXED_FONT]