from django.urls import path

from . import views

app_name = "cms"

urlpatterns = [
    # HTML editor toolbar endpoints
    path("toolbar/viewfile/", views.viewfile, name="toolbar_viewfile"),
    path("toolbar/getanchors/", views.getanchors, name="toolbar_getanchors"),
    path("toolbar/linkform/", views.linkform, name="toolbar_linkform"),
]
