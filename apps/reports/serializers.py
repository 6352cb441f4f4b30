from rest_framework import serializers

from common.serializers import DateRangeQuerySerializer


class RecentActivitiesQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=100)


class SalaryReportQuerySerializer(DateRangeQuerySerializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    group_by = serializers.ChoiceField(choices=("day", "month"), required=False, default="month")
