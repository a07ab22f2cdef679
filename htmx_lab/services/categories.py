# Lookup data for the dependent-dropdown demos.
from __future__ import annotations
from typing import Dict, List, Optional

SUBCATEGORIES: Dict[str, List[str]] = {
    "Work": ["Meeting", "Report", "Email", "Review"],
    "Personal": ["Shopping", "Exercise", "Reading", "Travel"],
    "Home": ["Cleaning", "Repairs", "Gardening", "Cooking"],
    "Learning": ["Course", "Tutorial", "Practice", "Research"],
}

MAKE_MODELS: Dict[str, List[str]] = {
    "Audi": ["A1", "A4", "A6"],
    "Toyota": ["Landcruiser", "Tacoma", "Yaris"],
    "BMW": ["325i", "325ix", "X5"],
}

def get_categories() -> List[str]:
    return list(SUBCATEGORIES)

def get_subcategories(category: Optional[str]) -> List[str]:
    if not category or not category.strip():
        return []
    return list(SUBCATEGORIES.get(category, []))

def get_makes() -> List[str]:
    return list(MAKE_MODELS)

def get_models(make: Optional[str]) -> List[str]:
    return list(MAKE_MODELS.get(make or "", []))
