"""
Invocable actions: fixed-contract endpoints called by external orchestrators
(flow engines, automation rules) rather than by end users.

Each action describes itself on GET and runs on POST with a batch of inputs.
A batch is one unit of work: every input commits, or none do.
"""
import logging

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.utils.permissions import CanChangeOpportunity
from .serializers import ChangePriceBookRequestSerializer
from .services import PriceBookChangeService

logger = logging.getLogger(__name__)


CHANGE_PRICE_BOOK_ACTION = {
    "name": "change_price_book",
    "label": "Change Opportunity Price Book",
    "description": (
        "Switches the opportunity to another price book and recreates its line items "
        "from the matching active entries of that price book."
    ),
    "category": "Opportunity",
    "inputs": [
        {"name": "opportunityId", "type": "ID", "required": True,
         "description": "Opportunity whose price book changes."},
        {"name": "priceBookId", "type": "ID", "required": True,
         "description": "Price book to switch to."},
        {"name": "overwriteUnitPrice", "type": "BOOLEAN", "required": True,
         "description": "Use the new price book's prices instead of keeping current unit prices."},
        {"name": "stopIfWillLoseLineItems", "type": "BOOLEAN", "required": True,
         "description": "Make no changes if any product is missing from the new price book."},
    ],
    "outputs": [
        {"name": "willLoseLineItems", "type": "BOOLEAN",
         "description": "True when at least one product has no active entry in the new price book."},
        {"name": "missingProductNames", "type": "STRING",
         "description": "Names of the missing products, separated by ', '."},
    ],
}


class ChangePriceBookActionView(APIView):
    permission_classes = [CanChangeOpportunity]

    def get(self, request):
        return Response(CHANGE_PRICE_BOOK_ACTION)

    def post(self, request):
        serializer = ChangePriceBookRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inputs = serializer.validated_data["inputs"]

        logger.info(
            f"change_price_book action invoked with {len(inputs)} input(s)",
            extra={"user_id": request.user.pk},
        )

        results = []
        with transaction.atomic():
            for action_input in inputs:
                result = PriceBookChangeService.change_price_book(
                    opportunity_id=action_input["opportunityId"],
                    price_book_id=action_input["priceBookId"],
                    overwrite_unit_price=action_input["overwriteUnitPrice"],
                    stop_if_will_lose_line_items=action_input["stopIfWillLoseLineItems"],
                )
                results.append({
                    "actionName": CHANGE_PRICE_BOOK_ACTION["name"],
                    "isSuccess": True,
                    "outputValues": result.as_output_values(),
                })

        return Response(results, status=status.HTTP_200_OK)
