from rest_framework import serializers


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return attrs


class RecordFilterQuerySerializer(DateRangeQuerySerializer):
    project_id = serializers.IntegerField(required=False, min_value=1)
    worker_id = serializers.IntegerField(required=False, min_value=1)
    project_owner_id = serializers.IntegerField(required=False, min_value=1)


def apply_date_range(queryset, validated_data, field="date"):
    """Filter only when both ends of the range are given."""
    start = validated_data.get("start_date")
    end = validated_data.get("end_date")
    if start and end:
        return queryset.filter(**{f"{field}__range": (start, end)})
    return queryset
