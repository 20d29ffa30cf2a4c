from rest_framework import serializers

from .models import Certificate


class CertificateSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    is_currently_valid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Certificate
        fields = [
            "id",
            "course",
            "course_title",
            "test_attempt",
            "certificate_number",
            "verification_code",
            "issued_date",
            "expiry_date",
            "is_valid",
            "is_expired",
            "is_currently_valid",
            "metadata",
        ]
        read_only_fields = fields


class AdminCertificateSerializer(CertificateSerializer):
    learner_username = serializers.CharField(source="learner.username", read_only=True)
    learner_email = serializers.EmailField(source="learner.email", read_only=True)

    class Meta(CertificateSerializer.Meta):
        fields = CertificateSerializer.Meta.fields + ["learner", "learner_username", "learner_email"]
        read_only_fields = fields


class GenerateCertificateSerializer(serializers.Serializer):
    attempt_id = serializers.IntegerField()
