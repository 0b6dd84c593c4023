from django.contrib import admin

from .models import Message, Product, TradeProposal


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'seller', 'price', 'currency', 'status', 'open_to_trade', 'created_at')
    list_filter = ('status', 'condition', 'open_to_trade')
    search_fields = ('name', 'brand', 'seller__email')
    # Status only changes through the marketplace services
    readonly_fields = ('status', 'sold_at', 'sold_via_trade', 'created_at', 'updated_at')


@admin.register(TradeProposal)
class TradeProposalAdmin(admin.ModelAdmin):
    list_display = ('id', 'proposer', 'owner', 'status', 'created_at', 'resolved_at')
    list_filter = ('status',)
    readonly_fields = (
        'offered_product', 'requested_product', 'proposer', 'owner', 'status',
        'created_at', 'resolved_at',
    )


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('product', 'sender', 'recipient', 'created_at')
