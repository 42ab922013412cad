# shared/api_markers.py
"""
Marker serializers for @extend_schema on endpoints without a real body.
"""
from rest_framework import serializers


class EmptySerializer(serializers.Serializer):
    """No request body (e.g. PATCH .../read/)."""

    pass


class ModifiedCountSerializer(serializers.Serializer):
    modified = serializers.IntegerField()
