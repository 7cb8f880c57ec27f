"""
test_entry_parser.py
--------------------
Unit tests for diarist.diary.entry_parser.

Covers time heading splitting, image line detection and grouping, media
card extraction, raw HTML chunks and whole-file parsing with frontmatter.
"""
import pytest

from diarist.diary.entry_parser import (
    EntryParser,
    is_image_line,
    normalize_time,
    split_time_blocks,
)


DOC = "/site/src/data/diary/2024-01-15.md"


@pytest.fixture
def parser(context):
    return EntryParser(context)


@pytest.fixture
def diary_file(tmp_dir, diary_entry_content):
    path = tmp_dir / "2024-01-15.md"
    path.write_text(diary_entry_content, encoding="utf-8")
    return path


class TestSplitTimeBlocks:
    """Splitting the body at ## HH:MM headings."""

    def test_preamble_and_blocks(self):
        blocks = split_time_blocks("Intro\n\n## 9:30\nA\n## 21:10\nB")
        assert [(b.time, b.show_time) for b in blocks] == [
            ("", False),
            ("09:30", True),
            ("21:10", True),
        ]
        assert blocks[1].lines == ["A"]

    def test_blank_preamble_dropped(self):
        blocks = split_time_blocks("\n\n## 08:00\nA")
        assert [b.time for b in blocks] == ["08:00"]

    def test_no_headings(self):
        blocks = split_time_blocks("Just text.")
        assert len(blocks) == 1
        assert blocks[0].show_time is False

    def test_heading_inside_fence_ignored(self):
        blocks = split_time_blocks("## 10:00\n```\n## 11:00\n```\nafter")
        assert [b.time for b in blocks] == ["10:00"]
        assert "## 11:00" in blocks[0].lines

    @pytest.mark.parametrize("line", ["## 9:3", "### 09:30", "## 09:30 walk", "##09:30"])
    def test_not_headings(self, line):
        assert len(split_time_blocks(f"{line}\ntext")) == 1

    def test_normalize_time(self):
        assert normalize_time("7", "05") == "07:05"


class TestIsImageLine:
    @pytest.mark.parametrize(
        "line",
        ["![[a.png]]", "  ![[a.png|Cap]] ![b](c.jpg)  ", '![x](a.png "T")'],
    )
    def test_image_lines(self, line):
        assert is_image_line(line)

    @pytest.mark.parametrize(
        "line",
        ["", "text ![[a.png]]", "![[notes.pdf]]", "![[a.png]] and more", "[[Link]]"],
    )
    def test_other_lines(self, line):
        assert not is_image_line(line)


class TestImages:
    """Image groups inside a block."""

    def test_group_placeholder(self, parser):
        body = "## 10:00\nBefore\n![[harbor.jpg]]\n![[photo.png]]\nMiddle\n![[boats.jpg]]"
        entry = parser.parse_text("2024-01-15", body, DOC)
        block = entry.time_blocks[0]
        assert block.text == (
            "<p>Before</p>\n++DIARY_IMAGE_GROUP_0++\n<p>Middle</p>\n++DIARY_IMAGE_GROUP_1++"
        )
        assert [len(group) for group in block.image_groups] == [2, 1]

    def test_resolution_and_captions(self, parser):
        entry = parser.parse_text(
            "2024-01-15", "![[harbor.jpg|The harbor]]\n![IMG_2031](boats.jpg)", DOC
        )
        harbor, boats = entry.time_blocks[0].image_groups[0]
        assert (harbor.src, harbor.alt, harbor.title) == (
            "../attachment/inbox/harbor.jpg",
            "The harbor",
            "The harbor",
        )
        assert (boats.src, boats.alt, boats.title) == ("boats.jpg", "", None)

    def test_optimizer_fields(self, optimizing_context):
        entry = EntryParser(optimizing_context).parse_text("2024-01-15", "![[harbor.jpg]]", DOC)
        image = entry.time_blocks[0].image_groups[0][0]
        assert image.src == "/_thumbs/harbor.webp"
        assert image.original == "../attachment/inbox/harbor.jpg"
        assert (image.width, image.height) == (800, 600)

    def test_images_in_fence_not_grouped(self, parser):
        entry = parser.parse_text("2024-01-15", "```\n![[harbor.jpg]]\n```", DOC)
        assert entry.time_blocks[0].image_groups == []

    def test_images_only_block(self, parser):
        block = parser.parse_text("2024-01-15", "![[harbor.jpg]]", DOC).time_blocks[0]
        assert block.text == "++DIARY_IMAGE_GROUP_0++"
        assert block.html_content is None

    def test_text_rendered_once(self, parser):
        """Block text is HTML split by bare placeholders; nothing goes out twice."""
        body = "## 09:30\nMorning walk.\n\n![[harbor.jpg|Harbor]]\n\nAfter."
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.text == "<p>Morning walk.</p>\n++DIARY_IMAGE_GROUP_0++\n<p>After.</p>"
        assert "<p>++DIARY_IMAGE_GROUP" not in block.text
        assert block.html_content is None


class TestRawHtml:
    """Raw HTML chunks go to html_content untouched."""

    def test_chunk_extracted(self, parser):
        body = (
            "Before.\n\n"
            '<iframe src="https://player.example/1"\n  allowfullscreen></iframe>'
            "\n\nAfter."
        )
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.html_content == (
            '<iframe src="https://player.example/1"\n  allowfullscreen></iframe>'
        )
        assert block.text == "<p>Before.</p>\n<p>After.</p>"

    def test_several_chunks_joined(self, parser):
        body = "<div>one</div>\n\ntext\n\n<!-- two -->"
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.html_content == "<div>one</div>\n<!-- two -->"
        assert block.text == "<p>text</p>"

    def test_inline_html_stays_in_paragraph(self, parser):
        block = parser.parse_text("2024-01-15", "line\n<b>bold</b>", DOC).time_blocks[0]
        assert block.html_content is None
        assert "&lt;b&gt;bold&lt;/b&gt;" in block.text

    def test_html_in_fence_kept(self, parser):
        block = parser.parse_text("2024-01-15", "```\n<div>x</div>\n```", DOC).time_blocks[0]
        assert block.html_content is None
        assert "&lt;div&gt;x&lt;/div&gt;" in block.text

    def test_autolink_not_html(self, parser):
        block = parser.parse_text("2024-01-15", "<https://a.example>", DOC).time_blocks[0]
        assert block.html_content is None
        assert 'href="https://a.example"' in block.text


class TestMediaCards:
    """Media card extraction."""

    MOVIE = "```card-movie\ntitle: {title}\n```"

    def test_first_card_wins(self, parser):
        body = "\n".join(
            [self.MOVIE.format(title="First"), "text", self.MOVIE.format(title="Second")]
        )
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.media_type == "movie"
        assert block.media_data == {"title": "First"}
        assert 'class="language-card-movie"' not in block.text
        assert "《Second》" in block.text
        assert block.html_content is None

    def test_invalid_card_kept(self, parser):
        body = "```card-book\nauthor: X\n```\n```card-tv\ntitle: Dark\nid: 70523\n```"
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.media_type == "tv"
        assert block.media_data == {"title": "Dark", "id": 70523}
        assert block.text == '<pre><code class="language-card-book">author: X\n</code></pre>'

    def test_card_only_block(self, parser):
        block = parser.parse_text("2024-01-15", self.MOVIE.format(title="X"), DOC).time_blocks[0]
        assert block.text is None
        assert block.html_content is None

    def test_longer_fence_closes_on_matching_marker(self, parser):
        body = "````card-movie\ntitle: X\n```\nstill inside\n````\nafter"
        block = parser.parse_text("2024-01-15", body, DOC).time_blocks[0]
        assert block.media_data == {"title": "X"}
        assert block.text == "<p>after</p>"


class TestParseFile:
    """Whole diary files."""

    def test_full_entry(self, parser, diary_file):
        entry = parser.parse_file(diary_file)
        assert entry.meta.start_date == "2024-01-15"
        assert entry.tags == ["Diary", "Travel"]

        preamble, morning, evening = entry.time_blocks
        assert (preamble.time, preamble.show_time) == ("", False)
        assert preamble.text == "<p>Arrived late.</p>"
        assert preamble.html_content is None

        assert morning.time == "09:30"
        assert morning.text == "<p>Morning walk along the pier.</p>\n++DIARY_IMAGE_GROUP_0++"
        assert [image.alt for image in morning.image_groups[0]] == ["The harbor", ""]

        assert evening.time == "21:10"
        assert evening.media_type == "movie"
        assert evening.media_data == {"title": "Interstellar", "id": 157336, "rating": 8.9}
        assert evening.text == "<p>Watched it again.</p>"

    def test_draft_skipped(self, parser, tmp_dir):
        path = tmp_dir / "2024-01-16.md"
        path.write_text("---\ndraft: true\n---\n\n## 10:00\nx\n", encoding="utf-8")
        assert parser.parse_file(path) is None

    def test_default_tags(self, parser, tmp_dir):
        path = tmp_dir / "2024-01-17.md"
        path.write_text("---\ntags: []\n---\n\nx\n", encoding="utf-8")
        assert parser.parse_file(path).tags == ["Diary"]

    def test_no_frontmatter(self, parser, tmp_dir):
        path = tmp_dir / "2024-01-15_to_2024-01-20.md"
        path.write_text("## 10:00\nx\n", encoding="utf-8")
        entry = parser.parse_file(path)
        assert entry.meta.is_range
        assert entry.entry_id == "2024-01-15_to_2024-01-20"
