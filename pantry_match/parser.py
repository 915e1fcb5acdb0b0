import re
from typing import Iterable, List, Optional, Tuple

from .schemas import ParsedIngredient


HEADER_MARKER = "---"

UNIT_ALIASES = {
    "tsp": "teaspoon", "tsps": "teaspoon", "teaspoon": "teaspoon", "teaspoons": "teaspoon",
    "tbsp": "tablespoon", "tbsps": "tablespoon", "tablespoon": "tablespoon", "tablespoons": "tablespoon",
    "cup": "cup", "cups": "cup",
    "pt": "pint", "pint": "pint", "pints": "pint",
    "qt": "quart", "quart": "quart", "quarts": "quart",
    "gal": "gallon", "gallon": "gallon", "gallons": "gallon",
    "ml": "ml", "l": "l", "liter": "l", "liters": "l", "litre": "l", "litres": "l",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "g": "g", "gram": "g", "grams": "g",
    "kg": "kg", "kilogram": "kg", "kilograms": "kg",
    "clove": "clove", "cloves": "clove",
    "can": "can", "cans": "can",
    "jar": "jar", "jars": "jar",
    "package": "package", "packages": "package", "pkg": "package", "pkgs": "package",
    "slice": "slice", "slices": "slice",
    "stick": "stick", "sticks": "stick",
    "piece": "piece", "pieces": "piece",
    "pinch": "pinch", "pinches": "pinch",
    "dash": "dash", "dashes": "dash",
    "bunch": "bunch", "bunches": "bunch",
    "handful": "handful", "handfuls": "handful",
}

UNICODE_FRACTIONS = "¼½¾⅐⅑⅒⅓⅔⅕⅖⅗⅘⅙⅚⅛⅜⅝⅞"

# one number: "1 1/2", "1½", "1/2", "½", "1.5", "2"
_NUMBER = (
    r"(?:\d+\s+\d+/\d+"
    r"|\d+\s*[" + UNICODE_FRACTIONS + r"]"
    r"|\d+/\d+"
    r"|[" + UNICODE_FRACTIONS + r"]"
    r"|\d+(?:[.,]\d+)?)"
)

_QUANTITY = re.compile(
    r"^(?P<qty>" + _NUMBER + r"(?:\s*(?:-|–|—|to)\s*" + _NUMBER + r")?)"
    r"(?=[\s,(]|[A-Za-z]|$)",
    re.IGNORECASE,
)
_UNIT = re.compile(r"^\s*(?P<unit>[A-Za-z]+)\.?(?=[\s,(]|$)")
_PARENTHETICAL = re.compile(r"\(([^()]*)\)")
_SPACES = re.compile(r"\s+")


def _clean(s: str) -> str:
    return _SPACES.sub(" ", s).strip(" ,;")


def _split_header(line: str) -> Optional[str]:
    # a bare "---" is a header with no title
    if line.startswith(HEADER_MARKER) and line.endswith(HEADER_MARKER):
        return line.strip("-").strip()
    return None


def _parse_amount(s: str) -> Tuple[Optional[str], Optional[str], str]:
    """Split a leading quantity and optional unit off ``s``.

    Returns (amount text, canonical unit, remainder).
    """
    m = _QUANTITY.match(s)
    if not m:
        return None, None, s
    qty = m.group("qty").strip()
    rest = s[m.end():]

    u = _UNIT.match(rest)
    if u and u.group("unit").lower() in UNIT_ALIASES:
        unit_word = u.group("unit")
        return f"{qty} {unit_word}", UNIT_ALIASES[unit_word.lower()], rest[u.end():]
    return qty, None, rest


def _split_clause(s: str) -> Tuple[str, str]:
    """Split at the first comma outside parentheses."""
    depth = 0
    for i, ch in enumerate(s):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            return s[:i], s[i + 1:]
    if depth and "," in s:
        head, _, tail = s.partition(",")
        return head, tail
    return s, ""


def _extract_parentheticals(s: str) -> Tuple[str, List[str]]:
    notes: List[str] = []

    def repl(m: re.Match) -> str:
        content = _clean(m.group(1))
        if content:
            notes.append(content)
        return " "

    return _PARENTHETICAL.sub(repl, s), notes


def parse(line: str) -> ParsedIngredient:
    """Parse one recipe ingredient line.

    "2 cups flour, sifted" -> amount "2 cups", name "flour", prep "sifted".
    Lines wrapped in ``---`` are section headers. Never raises.
    """
    original = line if isinstance(line, str) else ("" if line is None else str(line))
    s = _clean(original)
    if not s:
        return ParsedIngredient(original=original)

    header = _split_header(s)
    if header is not None:
        return ParsedIngredient(original=original, name=header, is_header=True)

    amount, unit, rest = _parse_amount(s)
    head, tail = _split_clause(rest)
    head, prep_parts = _extract_parentheticals(head)
    tail, tail_notes = _extract_parentheticals(tail)

    name = _clean(head)
    clause = _clean(tail)
    if clause:
        prep_parts.append(clause)
    prep_parts.extend(tail_notes)

    return ParsedIngredient(
        original=original,
        name=name,
        amount=amount,
        unit=unit,
        prep=", ".join(prep_parts) if prep_parts else None,
    )


def parse_lines(lines: Iterable[str]) -> List[ParsedIngredient]:
    return [parse(line) for line in lines]
