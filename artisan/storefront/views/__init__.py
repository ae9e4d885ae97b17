"""
Storefront views package.

Structure:
- utils.py - session cart helpers and store error messages
- auth.py - login, register, logout, profile
- catalog.py - home, discover, detail pages, about
- cart.py - session cart
- checkout.py - manual-payment checkout
- video.py - TV section and subscription requests
- community.py - partner contracts and feature feedback
- admin.py - staff back-office
"""

from .admin import (
    admin_dashboard,
    contract_delete,
    contract_status,
    feedback_reply,
    order_delete,
    order_status,
    subscription_confirm,
    subscription_delete,
)
from .auth import login_view, logout_view, profile, register_view
from .cart import add_to_cart, clear_cart, remove_from_cart, view_cart
from .catalog import about, article_detail, discover, home, listing_contact, product_detail, product_like
from .checkout import checkout, order_success
from .community import contact, feature_feedback, feature_list
from .video import subscribe, video_detail, video_like
