"""Small wiki-markup builders shared by the document and tagline renderers."""

from __future__ import annotations

from typing import Final

# Shown when no continent could be determined
CONTINENT_PLACEHOLDER: Final[str] = "{{Inferred}}"

LINE_BREAK: Final[str] = "<br>"


def split_list(value: str) -> list[str]:
    """Split a comma-joined record field into trimmed, non-empty items.

    Examples:
        >>> split_list("Russia, Ukraine,, ")
        ['Russia', 'Ukraine']
    """
    return [item.strip() for item in value.split(",") if item.strip()]


def flag(country: str) -> str:
    """Flag macro for a country.

    Examples:
        >>> flag("Belarus")
        '{{Flag|Name=Belarus}}'
    """
    return f"{{{{Flag|Name={country}}}}}"


def continent_template(continent: str) -> str:
    """Wrap a continent name as a template, or return the placeholder.

    Examples:
        >>> continent_template("Europe")
        '{{Europe}}'
        >>> continent_template("")
        '{{Inferred}}'
    """
    continent = continent.strip()
    return f"{{{{{continent}}}}}" if continent else CONTINENT_PLACEHOLDER


def prose_flags(countries: list[str]) -> str:
    """Join flag macros as prose: ``A``, ``A and B``, ``A, B, and C``.

    Examples:
        >>> prose_flags(["A", "B", "C"])
        '{{Flag|Name=A}}, {{Flag|Name=B}}, and {{Flag|Name=C}}'
    """
    flags = [flag(country) for country in countries]
    if len(flags) <= 1:
        return "".join(flags)
    if len(flags) == 2:
        return f"{flags[0]} and {flags[1]}"
    return ", ".join(flags[:-1]) + f", and {flags[-1]}"


def city_text(count: int, *, required: bool = False) -> str:
    """``city``/``cities`` for a tile count, optionally with ``required``.

    Examples:
        >>> city_text(1), city_text(3, required=True)
        ('city', 'cities required')
    """
    word = "city" if count == 1 else "cities"
    return f"{word} required" if required else word
