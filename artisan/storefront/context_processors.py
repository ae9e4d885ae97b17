from .views.utils import get_cart_from_session


def categories(request):
    """
    Category lists for navigation and filters.
    """
    store = getattr(request, 'category_store', None)
    if store is None:
        return {}
    return {
        'categories': store.fetch(),
        'categories_error': store.error,
    }


def cart_summary(request):
    session = getattr(request, 'session', None)
    if session is None:
        return {'cart_count': 0}
    return {'cart_count': len(get_cart_from_session(request))}
