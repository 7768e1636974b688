"""
URL configuration for the NoiseWatch project.

Route prefixes match the paths the web and mobile clients already call
(``/auth``, ``/user``, ``/reports``, ``/analytics``, ``/notification``),
without trailing slashes.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from accounts.urls import auth_patterns, user_patterns
from core.urls import analytics_patterns, notification_patterns
from core.views import ApiRootView, ServerInfoView

urlpatterns = [
    path('', ApiRootView.as_view(), name='api-root'),
    path('api/test', ServerInfoView.as_view(), name='api-test'),
    path('admin/', admin.site.urls),

    # ── App routes ───────────────────────────────────────────────────
    path('auth/', include((auth_patterns, 'auth'))),
    path('user/', include((user_patterns, 'user'))),
    path('reports/', include('reports.urls')),
    path('analytics/', include((analytics_patterns, 'analytics'))),
    path('notification/', include((notification_patterns, 'notification'))),

    # ── Swagger / OpenAPI schema ─────────────────────────────────────
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

# ── Serve media files in local development ───────────────────────────
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
