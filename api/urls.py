from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

# Import views from your apps
from users.views import (
    register_user,
    MarketplaceTokenObtainPairView,
    get_current_user,
    subscription_checkout,
    stripe_webhook,
)
from marketplace.views import (
    list_products,
    my_products,
    list_brands,
    create_product,
    product_detail,
    update_product,
    mark_product_sold,
    delete_product,
    propose_trade,
    resolve_trade,
    my_trades,
    trade_detail,
    product_chat,
    inbox,
)

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- AUTHENTICATION ---
    path('api/auth/register/', register_user, name='register'),
    path('api/token/', MarketplaceTokenObtainPairView.as_view(), name='token-obtain'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),

    # --- USER PROFILE & SUBSCRIPTION ---
    path('api/user/me/', get_current_user, name='current-user'),
    path('api/subscription/checkout/', subscription_checkout, name='subscription-checkout'),
    path('api/webhook/', stripe_webhook, name='stripe-webhook'),

    # --- MARKETPLACE: PRODUCTS ---
    path('api/market/products/', list_products, name='product-list'),
    path('api/market/products/mine/', my_products, name='product-mine'),
    path('api/market/products/create/', create_product, name='product-create'),
    path('api/market/products/<uuid:product_id>/', product_detail, name='product-detail'),
    path('api/market/products/<uuid:product_id>/update/', update_product, name='product-update'),
    path('api/market/products/<uuid:product_id>/sold/', mark_product_sold, name='product-sold'),
    path('api/market/products/<uuid:product_id>/delete/', delete_product, name='product-delete'),
    path('api/market/brands/', list_brands, name='brand-list'),

    # --- MARKETPLACE: TRADES ---
    path('api/market/trades/propose/', propose_trade, name='trade-propose'),
    path('api/market/trades/my/', my_trades, name='trade-mine'),
    path('api/market/trades/<uuid:trade_id>/', trade_detail, name='trade-detail'),
    path('api/market/trades/<uuid:trade_id>/resolve/', resolve_trade, name='trade-resolve'),

    # --- MARKETPLACE: CHAT ---
    path('api/market/chat/<uuid:product_id>/', product_chat, name='product-chat'),
    path('api/market/inbox/', inbox, name='inbox'),
]
