import unicodedata


def normalize_text(value: str) -> str:
    """Lowercase and strip diacritics so 'Azúcar' matches 'azucar'"""
    decomposed = unicodedata.normalize("NFD", value or "")
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn").lower().strip()
