# apps/utils/views.py
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django.conf import settings

from .serializers import ServerInfoSerializer

class ServerInfoView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = ServerInfoSerializer({
            "app_name": "PriceBook",
            "version": "1.0.0",
            "debug": settings.DEBUG,
        })
        return Response(serializer.data)
