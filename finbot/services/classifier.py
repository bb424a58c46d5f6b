"""
Category Classifier - keyword table lookups

Maps free text to a category by case-insensitive substring match against
each category's keywords. Categories and keywords are scanned in insertion
order, so a category added earlier shadows later ones.

Used by:
- tools/handlers.py - expense and receipt categorization, keyword command
- services/budget_monitor.py / report_formatter.py - category ordering
"""

from typing import Any, Dict, List, Optional

from finbot.database import CATEGORIES, CollectionStore
from finbot.logger import create_logger
from finbot.schemas.ledger import FALLBACK_CATEGORY

logger = create_logger("classifier")


DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    "alimentação": ["comida", "restaurante", "lanche", "mercado", "supermercado", "feira", "delivery"],
    "transporte": ["uber", "táxi", "99", "gasolina", "combustível", "estacionamento", "metrô", "ônibus", "passagem"],
    "moradia": ["aluguel", "condomínio", "água", "luz", "energia", "gás", "internet", "iptu"],
    "lazer": ["cinema", "teatro", "show", "viagem", "passeio", "streaming", "netflix", "spotify"],
    "saúde": ["remédio", "farmácia", "médico", "consulta", "exame", "academia", "dentista"],
    "educação": ["curso", "livro", "faculdade", "escola", "material", "mensalidade"],
    "compras": ["roupa", "sapato", "eletrônico", "celular", "presente", "shopping"],
    FALLBACK_CATEGORY: [],
}


class CategoryTable:
    """Ordered category -> keywords mapping, persisted as the `categories` collection"""

    def __init__(self, store: CollectionStore, categories: Optional[Dict[str, List[str]]] = None):
        self.store = store
        source = DEFAULT_CATEGORIES if categories is None else categories
        self.categories: Dict[str, List[str]] = {name: list(words) for name, words in source.items()}

    @classmethod
    def from_record(cls, store: CollectionStore, record: Any) -> "CategoryTable":
        if not isinstance(record, dict):
            return cls(store)
        categories = {
            str(name): [str(word) for word in words]
            for name, words in record.items()
            if isinstance(words, list)
        }
        return cls(store, categories)

    def to_record(self) -> Dict[str, List[str]]:
        return {name: list(words) for name, words in self.categories.items()}

    def names(self) -> List[str]:
        return list(self.categories)

    def classify(self, text: str) -> str:
        """Return the first category with a keyword contained in text, else the fallback"""
        lowered = text.lower()
        for category, keywords in self.categories.items():
            for keyword in keywords:
                if keyword.lower() in lowered:
                    return category
        return FALLBACK_CATEGORY

    def resolve(self, raw: str) -> str:
        """Classified category when one matches, otherwise the trimmed raw text"""
        raw = raw.strip()
        category = self.classify(raw)
        return category if category != FALLBACK_CATEGORY else raw

    def add_keyword(self, keyword: str, category: str) -> bool:
        """
        Add keyword to category, creating the category if needed.

        Returns:
            False when the keyword is already present (nothing is saved)
        """
        keywords = self.categories.setdefault(category, [])
        if keyword in keywords:
            return False
        keywords.append(keyword)
        self.store.save(CATEGORIES, self.to_record())
        logger.info("Keyword added", {"keyword": keyword, "category": category})
        return True
