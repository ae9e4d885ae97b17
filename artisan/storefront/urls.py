from django.urls import path

from . import views

urlpatterns = [
    path('', views.home, name='home'),
    path('decouvrir/', views.discover, name='discover'),
    path('article/<str:product_id>/', views.article_detail, name='article_detail'),
    path('artwork/<str:product_id>/', views.product_detail, name='product_detail'),
    path('artwork/<str:product_id>/like/', views.product_like, name='product_like'),
    path('contact/', views.contact, name='contact'),
    path('contact/<str:product_id>/', views.listing_contact, name='listing_contact'),
    path('a-propos/', views.about, name='about'),

    path('panier/', views.view_cart, name='cart'),
    path('panier/ajouter/<str:product_id>/', views.add_to_cart, name='cart_add'),
    path('panier/retirer/<str:product_id>/', views.remove_from_cart, name='cart_remove'),
    path('panier/vider/', views.clear_cart, name='cart_clear'),
    path('paiement/', views.checkout, name='checkout'),
    path('paiement/merci/<str:order_id>/', views.order_success, name='order_success'),

    path('video/<str:video_id>/', views.video_detail, name='video_detail'),
    path('video/<str:video_id>/like/', views.video_like, name='video_like'),
    path('abonnement/', views.subscribe, name='subscribe'),

    path('fonctionnalites/', views.feature_list, name='features'),
    path('fonctionnalites/<str:feature_id>/avis/', views.feature_feedback, name='feature_feedback'),

    path('login/', views.login_view, name='login'),
    path('register/', views.register_view, name='register'),
    path('logout/', views.logout_view, name='logout'),
    path('profile/', views.profile, name='profile'),

    path('gestion/', views.admin_dashboard, name='admin_dashboard'),
    path('gestion/commandes/<str:order_id>/statut/', views.order_status, name='admin_order_status'),
    path('gestion/commandes/<str:order_id>/supprimer/', views.order_delete, name='admin_order_delete'),
    path('gestion/contrats/<str:contract_id>/statut/', views.contract_status, name='admin_contract_status'),
    path('gestion/contrats/<str:contract_id>/supprimer/', views.contract_delete, name='admin_contract_delete'),
    path('gestion/abonnements/<str:subscription_id>/confirmer/', views.subscription_confirm,
         name='admin_subscription_confirm'),
    path('gestion/abonnements/<str:subscription_id>/supprimer/', views.subscription_delete,
         name='admin_subscription_delete'),
    path('gestion/fonctionnalites/<str:feature_id>/avis/<str:feedback_id>/repondre/', views.feedback_reply,
         name='admin_feedback_reply'),
]
