from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('users.urls')),
    path('api/', include('academics.urls')),
    path('api/', include('attendance.urls')),
    path('api/', include('results.urls')),
    path('api/', include('leaves.urls')),
    path('api/', include('feedback.urls')),
]
