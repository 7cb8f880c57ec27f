"""
test_protected_render.py
------------------------
Unit tests for rendering protected posts.
"""
import pytest
from bs4 import BeautifulSoup

from conftest import BLOG_POST, FakeAttachmentLookup, FakeOptimizer

from diarist.core.exceptions import AuthenticationError
from diarist.pipeline.context import PipelineContext
from diarist.protected.crypto import encrypt_post_content, encrypt_post_file
from diarist.protected.render import (
    escape_plaintext,
    process_protected_post_html,
    render_encrypted_post,
    render_post_file,
    render_protected_post_html,
)


class BrokenLookup(FakeAttachmentLookup):
    def files(self):
        raise RuntimeError("index unavailable")


def images(html: str) -> list:
    return BeautifulSoup(html, "html.parser").find_all("img")


class TestEscapePlaintext:
    def test_escaped(self):
        assert escape_plaintext("<b>x</b> & y") == "<pre>&lt;b&gt;x&lt;/b&gt; &amp; y</pre>"


class TestProcessHtml:
    """Thumbnail rewriting of rendered HTML."""

    def test_attachment_image_rewritten(self):
        html = '<p><img src="../attachment/inbox/a.jpg" alt="A"></p>'
        img = images(process_protected_post_html(html, FakeOptimizer()))[0]
        assert img["src"] == "/_thumbs/a.webp"
        assert img["width"] == "800"
        assert img["height"] == "600"
        assert img["alt"] == "A"

    def test_external_image_untouched(self):
        optimizer = FakeOptimizer()
        html = '<img src="https://cdn.example/a.jpg">'
        img = images(process_protected_post_html(html, optimizer))[0]
        assert img["src"] == "https://cdn.example/a.jpg"
        assert optimizer.calls == []

    def test_optimizer_failure_keeps_src(self):
        html = '<img src="../attachment/inbox/a.jpg">'
        img = images(process_protected_post_html(html, FakeOptimizer(fail=True)))[0]
        assert img["src"] == "../attachment/inbox/a.jpg"
        assert not img.has_attr("width")

    def test_no_optimizer(self):
        html = '<img src="../attachment/inbox/a.jpg">'
        assert process_protected_post_html(html, None) == html


class TestRenderProtectedPost:
    """Markdown to HTML for decrypted bodies."""

    def test_renders_with_thumbnails(self, optimizing_context, fake_optimizer):
        html = render_protected_post_html("![[photo.png|Sunset]]", optimizing_context, BLOG_POST)
        img = images(html)[0]
        assert img["src"] == "/_thumbs/photo.webp"
        assert img["alt"] == "Sunset"
        assert fake_optimizer.calls == [("../attachment/blog/trip/photo.png", 1000)]

    def test_render_failure_falls_back(self):
        context = PipelineContext(lookup=BrokenLookup([]))
        html = render_protected_post_html("![[missing.png]] <b>", context, BLOG_POST)
        assert html == "<pre>![[missing.png]] &lt;b&gt;</pre>"

    def test_render_encrypted_post(self, context):
        payload = encrypt_post_content("Hello **world**", "pw")
        assert "<strong>world</strong>" in render_encrypted_post(payload.to_dict(), "pw", context)

    def test_render_encrypted_post_wrong_password(self, context):
        payload = encrypt_post_content("Hello", "pw")
        with pytest.raises(AuthenticationError):
            render_encrypted_post(payload, "nope", context)


class TestRenderPostFile:
    """Plain and protected post files."""

    def test_plain_post(self, tmp_dir, context):
        path = tmp_dir / "plain.md"
        path.write_text("---\ntitle: Plain\n---\n\nHello **world**\n", encoding="utf-8")
        assert "<strong>world</strong>" in render_post_file(path, context)

    @pytest.fixture
    def protected_post(self, tmp_dir):
        path = tmp_dir / "secret.md"
        path.write_text("---\ntitle: Secret\n---\n\nHidden *text*\n", encoding="utf-8")
        encrypt_post_file(path, password="pw")
        return path

    def test_protected_post(self, protected_post, context):
        assert "<em>text</em>" in render_post_file(protected_post, context, password="pw")

    def test_protected_post_requires_password(self, protected_post, context):
        with pytest.raises(ValueError):
            render_post_file(protected_post, context)

    def test_protected_post_wrong_password(self, protected_post, context):
        with pytest.raises(AuthenticationError):
            render_post_file(protected_post, context, password="bad")
