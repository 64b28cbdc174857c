from django.urls import path

from . import webhook

app_name = "paytr"
urlpatterns = [
    path("callback", webhook.paytr_callback, name="callback"),
    path("callback/", webhook.paytr_callback),
]
