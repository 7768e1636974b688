from django.contrib import admin

from .models import NoiseReport, ReportAdminAction


class ReportAdminActionInline(admin.TabularInline):
    model = ReportAdminAction
    extra = 0
    can_delete = False
    readonly_fields = ("action", "note", "from_status", "to_status",
                       "performed_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(NoiseReport)
class NoiseReportAdmin(admin.ModelAdmin):
    list_display = ("id", "reason", "noise_level", "status",
                    "consecutive_days", "user", "created_at")
    list_filter = ("status", "noise_level", "media_type")
    search_fields = ("reason", "comment")
    readonly_fields = ("noise_level", "media_url", "media_type",
                       "created_at", "updated_at")
    inlines = [ReportAdminActionInline]


@admin.register(ReportAdminAction)
class ReportAdminActionAdmin(admin.ModelAdmin):
    list_display = ("report", "action", "from_status", "to_status",
                    "performed_by", "created_at")
    list_filter = ("to_status",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
