"""
Configuration documents of the `config` collection.

Each loader falls back to built-in defaults when the document is missing.
"""
import copy
import logging

from docstore.backends.base import DocumentStore

logger = logging.getLogger(__name__)

CONFIG_COLLECTION = 'config'
CATEGORIES_DOC = 'categories'
PAYMENT_DOC = 'payment'
PLANS_DOC = 'subscription_plans'
ABOUT_DOC = 'about'

CATEGORY_GROUPS = ('article_categories', 'product_collections', 'internet_classes', 'tv_channels')

DEFAULT_CATEGORIES = {
    'article_categories': [
        {'id': 'web', 'label': 'Développement Web'},
        {'id': 'mobile', 'label': 'Développement Mobile'},
        {'id': 'generative', 'label': 'Art Génératif'},
        {'id': '3d', 'label': 'Rendu 3D'},
    ],
    'product_collections': [
        {'id': 'soin-corporel', 'label': 'Soin Corporel'},
        {'id': 'vetements', 'label': 'Vêtements'},
        {'id': 'accessoires', 'label': 'Accessoires'},
    ],
    'internet_classes': [
        {'id': 'S', 'label': 'Classe S'},
        {'id': 'A', 'label': 'Classe A'},
        {'id': 'B', 'label': 'Classe B'},
        {'id': 'C', 'label': 'Classe C'},
        {'id': 'D', 'label': 'Classe D'},
    ],
    'tv_channels': [
        {'id': 'action', 'label': 'Action'},
        {'id': 'divertissement', 'label': 'Divertissement'},
        {'id': 'dessin-anime', 'label': 'Dessin Animé'},
    ],
}

DEFAULT_PAYMENT_METHODS = [
    {'id': '1', 'name': 'ORANGE MONEY', 'details': '', 'color': '#FFA500'},
    {'id': '2', 'name': 'WAVE', 'details': '', 'color': '#4DD2FF'},
]

DEFAULT_PLANS = {
    '24h': {'id': '24h', 'name': '24 Heures', 'price': 1000, 'features': ['Accès complet', 'Qualité HD']},
    '1w': {'id': '1w', 'name': '1 Semaine', 'price': 5000,
           'features': ['Accès complet', 'Qualité HD', 'Hors ligne']},
    '1m': {'id': '1m', 'name': '1 Mois', 'price': 15000,
           'features': ['Accès complet', 'Qualité HD', 'Hors ligne', 'Support prioritaire']},
}

DEFAULT_ABOUT = {
    'history': '',
    'how_it_works': '',
    'faqs': [],
}


def _config(store: DocumentStore, name):
    document = store.get(CONFIG_COLLECTION, name)
    return document.data if document else None


def load_categories(store: DocumentStore):
    data = _config(store, CATEGORIES_DOC)
    if data is None:
        return copy.deepcopy(DEFAULT_CATEGORIES)
    return {group: list(data.get(group) or []) for group in CATEGORY_GROUPS}


def load_payment_methods(store: DocumentStore):
    data = _config(store, PAYMENT_DOC)
    if data is None:
        return copy.deepcopy(DEFAULT_PAYMENT_METHODS)
    return list(data.get('methods') or [])


def load_subscription_plans(store: DocumentStore):
    data = _config(store, PLANS_DOC)
    if data is None:
        return copy.deepcopy(DEFAULT_PLANS)
    plans = copy.deepcopy(DEFAULT_PLANS)
    for plan_id, plan in data.items():
        if plan_id in plans and isinstance(plan, dict):
            plans[plan_id].update(plan)
    return plans


def load_about(store: DocumentStore):
    data = _config(store, ABOUT_DOC)
    about = copy.deepcopy(DEFAULT_ABOUT)
    if data:
        about.update({key: value for key, value in data.items() if key in about})
    return about
