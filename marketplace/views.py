from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from users.identity import Identity
from api.serializers import ProductSerializer, TradeProposalSerializer, MessageSerializer
from .authorization import require_subscription
from .exceptions import ValidationError
from .images import upload_images
from .inputs import ProductInput, TradeProposalInput, TradeResolutionInput, MessageInput, validate
from .services import ProductService, TradeService, MessageService


def _identity(request):
    return Identity.from_user(request.user)


def _attributes(request):
    """Flatten JSON or multipart bodies into one dict; uploaded files are handled separately."""
    data = request.data
    if hasattr(data, 'getlist'):
        attributes = {}
        for key in data.keys():
            if key == 'images':
                refs = [ref for ref in data.getlist(key) if isinstance(ref, str)]
                if refs:
                    attributes['images'] = refs
            else:
                attributes[key] = data.get(key)
        return attributes
    if not isinstance(data, dict):
        raise ValidationError({'non_field_errors': ["Expected a JSON object."]})
    return dict(data)


# ==========================================
# PRODUCTS
# ==========================================
@api_view(['GET'])
@permission_classes([AllowAny])  # Anyone can browse listings
def list_products(request):
    """Search: ?name=&brand=&min_price=&max_price=&open_to_trade=&include_sold="""
    products = ProductService().search(request.query_params.dict())
    return Response(ProductSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_products(request):
    """The caller's own listings, sold ones included."""
    products = ProductService().search({'seller_id': request.user.pk, 'include_sold': True})
    return Response(ProductSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_brands(request):
    return Response(ProductService().brands())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_product(request):
    identity = _identity(request)
    require_subscription(identity)

    attributes = _attributes(request)
    validate(ProductInput, attributes)  # fail before anything is uploaded
    files = request.FILES.getlist('images')
    if files:
        attributes['images'] = attributes.get('images', []) + upload_images(files)

    product = ProductService().create(identity, attributes)
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_detail(request, product_id):
    product = ProductService().get(product_id)
    return Response(ProductSerializer(product).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_product(request, product_id):
    attributes = _attributes(request)
    files = request.FILES.getlist('images')
    if files:
        attributes['images'] = attributes.get('images', []) + upload_images(files)

    product = ProductService().update(product_id, _identity(request), attributes)
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_product_sold(request, product_id):
    product = ProductService().transition_to_sold(product_id, _identity(request))
    return Response({"status": "Product sold", "product": ProductSerializer(product).data})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_product(request, product_id):
    ProductService().delete(product_id, _identity(request))
    return Response(status=status.HTTP_204_NO_CONTENT)


# ==========================================
# TRADES
# ==========================================
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def propose_trade(request):
    data = validate(TradeProposalInput, _attributes(request))
    trade = TradeService().propose(
        _identity(request), data['offered_product_id'], data['requested_product_id']
    )
    return Response(
        {"status": "Trade proposed", "trade": TradeProposalSerializer(trade).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resolve_trade(request, trade_id):
    """ Owner of the requested product approves or rejects a proposal """
    data = validate(TradeResolutionInput, _attributes(request))
    trade = TradeService().resolve(trade_id, _identity(request), data['decision'])
    return Response({"status": f"Trade {trade.status}", "trade": TradeProposalSerializer(trade).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_trades(request):
    """ Proposals the caller made or received """
    trades = TradeService().list_for(_identity(request))
    return Response(TradeProposalSerializer(trades, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def trade_detail(request, trade_id):
    trade = TradeService().get(trade_id, _identity(request))
    return Response(TradeProposalSerializer(trade).data)


# ==========================================
# CHAT
# ==========================================
@api_view(['POST', 'GET'])
@permission_classes([IsAuthenticated])
def product_chat(request, product_id):
    messages = MessageService()

    if request.method == 'POST':
        data = validate(MessageInput, _attributes(request))
        msg = messages.post(
            product_id, _identity(request), data['body'], recipient_id=data.get('recipient_id')
        )
        return Response(MessageSerializer(msg).data, status=status.HTTP_201_CREATED)

    thread = messages.thread(product_id, _identity(request))
    return Response(MessageSerializer(thread, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inbox(request):
    """ Inbox: one entry per listing and counterpart """
    return Response(MessageService().inbox(_identity(request)))
