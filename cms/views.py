# Editor toolbar endpoints used by the TinyMCE insert dialogs
import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods

from .forms import InsertLinkForm
from .toolbar import HTMLEditorToolbar

logger = logging.getLogger(__name__)


@login_required
@require_GET
def viewfile(request):
    """
    Describe the file given by ``?ID=`` or ``?FileURL=`` and render its insert form.

    Whitelist violations and bad parameters answer 400, unknown files 404 and
    files the user may not see 403.
    """
    toolbar = HTMLEditorToolbar(request)
    wrapper, form = toolbar.view_file(request.GET)
    data = wrapper.describe()
    data["form"] = form.as_div()
    return JsonResponse(data)


@login_required
@require_GET
def getanchors(request):
    """Return the anchors of the page given by ``?PageID=`` as a JSON list."""
    anchors = HTMLEditorToolbar(request).get_anchors(request.GET.get("PageID"))
    logger.debug("Found %d anchor(s) for page %s", len(anchors), request.GET.get("PageID"))
    return JsonResponse(anchors, safe=False)


@login_required
@require_http_methods(["GET", "POST"])
def linkform(request):
    """GET renders the insert-link form; POST validates it and returns the href."""
    if request.method == "GET":
        return HttpResponse(InsertLinkForm().as_div())

    form = InsertLinkForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"errors": form.errors.get_json_data()}, status=400)
    return JsonResponse(
        {
            "href": form.get_href(),
            "description": form.cleaned_data.get("description", ""),
            "target": "_blank" if form.cleaned_data.get("target_blank") else "",
        }
    )
