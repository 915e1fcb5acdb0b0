import re
from typing import FrozenSet

# Words that describe preparation, size or measure rather than the ingredient
STOPWORDS = frozenset({
    # preparation
    "fresh", "freshly", "dried", "chopped", "diced", "minced", "sliced",
    "grated", "shredded", "crushed", "ground", "peeled", "melted",
    "softened", "cooked", "frozen", "organic", "raw", "whole", "finely",
    "roughly", "thinly",
    # size / quality
    "large", "medium", "small", "extra", "ripe", "about", "approximately",
    # measures
    "cup", "tbsp", "tablespoon", "tsp", "teaspoon", "oz", "ounce", "lb",
    "pound", "g", "gram", "kg", "kilogram", "ml", "l", "liter", "litre",
    "pinch", "dash", "handful", "piece", "slice", "clove", "strip", "chunk",
    "can", "jar", "package", "stick", "bunch", "pint", "quart", "gallon",
    # filler
    "of", "and", "or", "to", "taste", "optional", "a", "an", "the",
})

# Small synonyms map: variant -> canonical (keys are singular)
SYNONYMS = {
    "aubergine": "eggplant",
    "courgette": "zucchini",
    "capsicum": "bell pepper",
    "scallion": "green onion",
    "cilantro": "coriander",
    "garbanzo": "chickpea",
}

_NON_ALNUM = re.compile(r"[\W_]+")


def _singularize(word: str) -> str:
    # endings that look plural but are not (glass, hummus, tahini-style "is")
    if word.endswith(("ss", "us", "is")) or len(word) <= 3:
        return word
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith(("oes", "ches", "shes", "xes", "sses")):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def _canonical_words(text: str):
    for raw in _NON_ALNUM.sub(" ", text.lower()).split():
        word = _singularize(raw)
        # "100s" singularizes to a bare number
        if word.isnumeric():
            continue
        word = SYNONYMS.get(word, word)
        for part in word.split():
            if part not in STOPWORDS:
                yield part


def normalize(text: str) -> str:
    """Return the canonical form of an ingredient name.

    Lowercases, turns punctuation into spaces, drops numbers and stopwords
    and singularizes each word. Applying it twice gives the same result.
    """
    if not text:
        return ""
    return " ".join(_canonical_words(text))


def tokens(text: str) -> FrozenSet[str]:
    """Word set of the normalized form of ``text``."""
    return frozenset(normalize(text).split())

