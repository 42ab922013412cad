from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    is_read = serializers.BooleanField(read_only=True)
    actor_name = serializers.SerializerMethodField()
    order_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Notification
        fields = (
            "id",
            "type",
            "title",
            "message",
            "order_id",
            "actor_name",
            "data",
            "is_read",
            "read_at",
            "created_at",
        )
        read_only_fields = fields

    def get_actor_name(self, obj) -> str:
        return obj.actor.display_name if obj.actor_id else ""


class NotificationPageSerializer(serializers.Serializer):
    results = NotificationSerializer(many=True)
    next_cursor = serializers.DateTimeField(allow_null=True)


class UnreadCountSerializer(serializers.Serializer):
    count = serializers.IntegerField()
