import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="NoiseReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("media_url", models.CharField(max_length=500, verbose_name="Media URL")),
                ("media_type", models.CharField(choices=[("audio", "Audio"), ("video", "Video")], max_length=10, verbose_name="Media Type")),
                ("reason", models.CharField(max_length=255, verbose_name="Reason")),
                ("comment", models.TextField(blank=True, default="", verbose_name="Comment")),
                ("location", models.JSONField(blank=True, null=True, verbose_name="Location")),
                ("geo_longitude", models.FloatField(blank=True, null=True, verbose_name="Longitude")),
                ("geo_latitude", models.FloatField(blank=True, null=True, verbose_name="Latitude")),
                ("noise_level", models.CharField(choices=[("red", "Red (High)"), ("yellow", "Yellow (Medium)"), ("green", "Green (Low)")], db_index=True, max_length=10, verbose_name="Noise Level")),
                ("consecutive_days", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name="Consecutive Days")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("monitoring", "Monitoring"), ("action_required", "Action Required"), ("resolved", "Resolved")], db_index=True, default="pending", max_length=20, verbose_name="Status")),
                ("admin_response", models.TextField(default="No response sent yet.", verbose_name="Admin Response")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="noise_reports", to=settings.AUTH_USER_MODEL, verbose_name="Reporter")),
            ],
            options={
                "verbose_name": "Noise Report",
                "verbose_name_plural": "Noise Reports",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["geo_longitude", "geo_latitude"], name="report_geo_point_idx"),
                    models.Index(fields=["reason", "status"], name="report_reason_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReportAdminAction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("action", models.CharField(max_length=100, verbose_name="Action")),
                ("note", models.TextField(blank=True, default="", verbose_name="Note")),
                ("from_status", models.CharField(choices=[("pending", "Pending"), ("monitoring", "Monitoring"), ("action_required", "Action Required"), ("resolved", "Resolved")], max_length=20, verbose_name="Previous Status")),
                ("to_status", models.CharField(choices=[("pending", "Pending"), ("monitoring", "Monitoring"), ("action_required", "Action Required"), ("resolved", "Resolved")], max_length=20, verbose_name="New Status")),
                ("performed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="report_actions", to=settings.AUTH_USER_MODEL, verbose_name="Performed By")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="admin_actions", to="reports.noisereport", verbose_name="Report")),
            ],
            options={
                "verbose_name": "Report Admin Action",
                "verbose_name_plural": "Report Admin Actions",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
