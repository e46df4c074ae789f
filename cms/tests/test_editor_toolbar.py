"""
Tests for the editor toolbar: file URL whitelisting, file lookup and anchors.
"""

import pytest
from django.core.exceptions import BadRequest, PermissionDenied
from django.http import Http404

from assets.models import File
from cms.forms import InsertImageForm, InsertLinkForm
from cms.models import Page
from cms.toolbar import (
    EditorEmbed,
    EditorFile,
    EditorImage,
    HTMLEditorToolbar,
    extract_anchors,
    prepare_embed_html,
    wrap_file,
)


@pytest.fixture
def whitelist(settings):
    settings.SITE_URL = ""
    settings.HTMLEDITOR_FILEURL_SCHEME_WHITELIST = ["http"]
    settings.HTMLEDITOR_FILEURL_DOMAIN_WHITELIST = ["example.com", "localhost"]
    return settings


@pytest.mark.django_db
class TestRemoteFileByURL:
    def test_valid_local_reference(self, whitelist, spy_store):
        spy_store("EditorToolbarTest")
        file = File().set_from_string(b"%PDF-1.4 test", "example.pdf")
        file.save()
        url = file.get_absolute_url()
        assert url.startswith("http://localhost")

        wrapper, returned_url = HTMLEditorToolbar().get_remote_file_by_url(url)
        assert returned_url == url
        assert wrapper.file == file
        assert isinstance(wrapper, EditorFile)

    def test_valid_scheme(self, whitelist):
        wrapper, url = HTMLEditorToolbar().get_remote_file_by_url("http://example.com/test.pdf")
        assert url == "http://example.com/test.pdf"
        assert wrapper.file is None

    def test_invalid_scheme(self, whitelist):
        with pytest.raises(BadRequest, match="scheme is not included"):
            HTMLEditorToolbar().get_remote_file_by_url("nope://example.com/test.pdf")

    def test_valid_domain(self, whitelist):
        _wrapper, url = HTMLEditorToolbar().get_remote_file_by_url("http://example.com/test.pdf")
        assert url == "http://example.com/test.pdf"

    def test_invalid_domain(self, whitelist):
        with pytest.raises(BadRequest, match="hostname is not included"):
            HTMLEditorToolbar().get_remote_file_by_url("http://evil.com/test.pdf")

    def test_relative_url_rejected(self, whitelist):
        with pytest.raises(BadRequest, match="Only absolute urls"):
            HTMLEditorToolbar().get_remote_file_by_url("/assets/test.pdf")

    def test_empty_whitelists_accept_anything(self, settings):
        settings.HTMLEDITOR_FILEURL_SCHEME_WHITELIST = []
        settings.HTMLEDITOR_FILEURL_DOMAIN_WHITELIST = []
        _wrapper, url = HTMLEditorToolbar().get_remote_file_by_url("ftp://files.net/a.zip")
        assert url == "ftp://files.net/a.zip"

    def test_whitelists_are_case_insensitive(self, settings):
        settings.HTMLEDITOR_FILEURL_SCHEME_WHITELIST = ["HTTPS"]
        settings.HTMLEDITOR_FILEURL_DOMAIN_WHITELIST = ["Example.com"]
        _wrapper, url = HTMLEditorToolbar().get_remote_file_by_url("https://EXAMPLE.com/a.pdf")
        assert url == "https://EXAMPLE.com/a.pdf"


@pytest.mark.django_db
class TestLocalFiles:
    def test_get_by_id(self, spy_store):
        spy_store("EditorToolbarTest")
        file = File().set_from_string(b"content", "notes.txt")
        file.save()

        wrapper, url = HTMLEditorToolbar().get_local_file_by_id(file.pk)
        assert wrapper.file == file
        assert url == file.get_url()

    def test_get_by_id_missing(self):
        with pytest.raises(Http404):
            HTMLEditorToolbar().get_local_file_by_id(9999)

    def test_get_by_id_invalid(self):
        with pytest.raises(BadRequest):
            HTMLEditorToolbar().get_local_file_by_id("abc")

    def test_get_by_id_without_permission(self, spy_store):
        spy_store("EditorToolbarTest")
        file = File().set_from_string(b"secret", "secret.txt")
        file.is_public = False
        file.save()

        with pytest.raises(PermissionDenied):
            HTMLEditorToolbar().get_local_file_by_id(file.pk)

    def test_get_by_url(self, spy_store):
        spy_store("EditorToolbarTest")
        file = File().set_from_string(b"content", "docs/manual.pdf")
        file.save()

        wrapper, _url = HTMLEditorToolbar().get_local_file_by_url(file.get_url())
        assert wrapper.file == file

    def test_get_by_url_missing(self, spy_store):
        spy_store("EditorToolbarTest")
        with pytest.raises(Http404):
            HTMLEditorToolbar().get_local_file_by_url("/assets/EditorToolbarTest/abc/x.pdf")

    def test_view_file_needs_a_parameter(self):
        with pytest.raises(BadRequest, match='"ID" or "FileURL"'):
            HTMLEditorToolbar().view_file({})

    def test_view_file_builds_forms(self, spy_store, make_image):
        spy_store("EditorToolbarTest")
        image = File().set_from_string(make_image(), "pic.jpg")
        image.save()
        document = File().set_from_string(b"doc", "doc.pdf")
        document.save()
        toolbar = HTMLEditorToolbar()

        wrapper, form = toolbar.view_file({"ID": str(image.pk)})
        assert isinstance(wrapper, EditorImage)
        assert isinstance(form, InsertImageForm)

        _wrapper, form = toolbar.view_file({"FileURL": document.get_url()})
        assert isinstance(form, InsertLinkForm)
        assert form.initial == {"link_type": "file", "file": document.pk}

    def test_view_file_with_bucket_url(self, whitelist, spy_store):
        spy_store("EditorToolbarTest", base_url="https://storage.googleapis.com/editor-bucket/")
        document = File().set_from_string(b"doc", "doc.pdf")
        document.save()
        toolbar = HTMLEditorToolbar()

        wrapper, _url = toolbar.get_local_file_by_url(document.get_url())
        assert wrapper.file == document

        wrapper, form = toolbar.view_file({"FileURL": document.get_url()})
        assert wrapper.file == document
        assert form.initial == {"link_type": "file", "file": document.pk}


class TestWrapFile:
    def test_image_extension(self):
        assert isinstance(wrap_file("http://example.com/a.PNG"), EditorImage)

    def test_remote_non_image_is_embed(self):
        assert isinstance(wrap_file("https://www.youtube.com/watch?v=abc"), EditorEmbed)

    def test_local_non_image_is_plain_file(self):
        wrapper = wrap_file("/assets/x/report.pdf", File(name="report.pdf"))
        assert type(wrapper) is EditorFile
        assert wrapper.get_title() == "report"


@pytest.mark.django_db
class TestAnchors:
    CONTENT = """
        <div>
            <p><a id="foo">Foo</a></p>
            <p><a name="bar">Bar</a></p>
            <p><a id="baz" name="baz">Baz</a></p>
            <p><a name='bam' id="bam">Bam</a></p>
            <p><a id="some'id">Some ID</a></p>
            [sitetree_link id="5"]
        </div>
    """

    def test_extract_anchors(self):
        assert extract_anchors(self.CONTENT) == ["foo", "bar", "baz", "bam", "some&#039;id"]

    def test_extract_anchors_ignores_data_attributes(self):
        assert extract_anchors('<p data-id="x" id="y">z</p>') == ["y"]

    def test_get_anchors(self):
        page = Page.objects.create(title="Anchors", content=self.CONTENT)
        assert HTMLEditorToolbar().get_anchors(page.pk) == [
            "foo",
            "bar",
            "baz",
            "bam",
            "some&#039;id",
        ]

    def test_only_quoted_attributes_count(self):
        content = "\n".join(
            [
                '<div name="foo"></div>',
                "<div name='bar'></div>",
                '<div id="baz"></div>',
                '[sitetree_link id="{id}"]',
                "<div id='bam'></div>",
                '<div id = "baz"></div>',
                '<div id = ""></div>',
                "<div id=\"some'id\"></div>",
                "<div id=bar></div>",
            ]
        )
        page = Page.objects.create(title="Quoting", content=content)
        expected = ["foo", "bar", "baz", "bam", "some&#039;id"]

        assert extract_anchors(content) == expected
        assert HTMLEditorToolbar().get_anchors(page.pk) == expected

    def test_get_anchors_missing_page(self):
        with pytest.raises(Http404):
            HTMLEditorToolbar().get_anchors(12345)

    def test_get_anchors_private_page(self):
        page = Page.objects.create(title="Private", content='<p id="a">x</p>', is_public=False)
        with pytest.raises(PermissionDenied):
            HTMLEditorToolbar().get_anchors(page.pk)


class TestPrepareEmbedHTML:
    def test_youtube_iframe_gets_referrer_policy(self):
        html = prepare_embed_html(
            '<iframe src="https://www.youtube.com/embed/abc" width="480"></iframe>'
        )
        assert 'referrerpolicy="strict-origin-when-cross-origin"' in html
        assert "encrypted-media" in html

    def test_other_iframes_untouched(self):
        html = '<iframe src="https://player.vimeo.com/video/1"></iframe>'
        assert prepare_embed_html(html) == html
