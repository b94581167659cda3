"""
Tests for the paste/drop interceptor.

Pasted and dropped images arrive as untracked data: URI embeds. The
interceptor must replace each with exactly one tracked, staged embed,
must not double-stage when a mutation is processed again, and must leave
malformed pastes untouched.
"""

from __future__ import annotations

import base64

import pytest

from quillpress.auth import StaticTokenAuth
from quillpress.document import Document, Embed, TextRun
from quillpress.editor.interceptor import decode_data_uri
from quillpress.editor.session import EditorSession
from quillpress.errors import AuthRequired, MalformedPasteData


def _data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class TestDecodeDataUri:
    def test_decodes_png(self, png):
        data = png()
        f = decode_data_uri(_data_uri(data), "pasted-image-1")
        assert f.data == data
        assert f.mime_type == "image/png"
        assert f.filename == "pasted-image-1.png"

    def test_missing_mime_uses_detected_format(self, png):
        f = decode_data_uri(_data_uri(png(), mime=""))
        assert f.mime_type == "image/png"

    def test_tolerates_line_breaks_in_payload(self, png):
        uri = _data_uri(png())
        header, payload = uri.split(",", 1)
        wrapped = header + "," + "\n".join(payload[i:i + 16] for i in range(0, len(payload), 16))
        assert decode_data_uri(wrapped).data == png()

    @pytest.mark.parametrize("src", [
        "data:image/png;base64,@@@not-base64@@@",
        "data:text/plain,hello",
        "data:image/png;base64,",
        "data:image/png;base64",
        "https://example.com/a.png",
    ])
    def test_malformed(self, src):
        with pytest.raises(MalformedPasteData):
            decode_data_uri(src)

    def test_non_image_bytes(self):
        with pytest.raises(MalformedPasteData):
            decode_data_uri(_data_uri(b"definitely not an image"))


class TestPasteInterception:
    def test_paste_produces_one_tracked_embed(self, session, png):
        session.insert_text(0, "Hello world\n")
        src = _data_uri(png())

        session.paste(6, [Embed(src)])

        embeds = session.document.embeds()
        assert len(embeds) == 1
        offset, embed = embeds[0]
        assert offset == 6
        assert embed.tracking_id is not None
        assert session.document.find_untracked(src) is None
        assert session.registry.list() == [(embed.tracking_id, session.registry.get(embed.tracking_id))]
        assert session.cursor == 7

    def test_staged_file_matches_pasted_bytes(self, session, png):
        data = png((0, 128, 0))
        session.paste(0, [Embed(_data_uri(data))])

        [(temp_id, f)] = session.registry.list()
        assert f.data == data
        assert f.mime_type == "image/png"
        assert f.filename.startswith("pasted-image-")

    def test_reprocessing_does_not_double_stage(self, session, png):
        mutation = session.paste(0, [Embed(_data_uri(png()))])

        assert session.interceptor.process(mutation) == []
        assert session.interceptor.process(mutation) == []
        assert len(session.registry) == 1
        assert len(session.document.embeds()) == 1

    def test_two_images_in_one_paste(self, session, png):
        a = _data_uri(png((1, 0, 0)))
        b = _data_uri(png((0, 0, 1)))

        session.paste(0, [Embed(a), Embed(b)])

        ids = session.document.tracking_ids()
        assert len(ids) == 2
        assert [session.registry.get(t).data for t in ids] == [
            base64.b64decode(a.split(",", 1)[1]),
            base64.b64decode(b.split(",", 1)[1]),
        ]
        assert all(e.is_staged for _, e in session.document.embeds())

    def test_same_image_pasted_twice(self, session, png):
        src = _data_uri(png())
        session.paste(0, [Embed(src), Embed(src)])

        assert len(session.document.tracking_ids()) == 2
        assert len(session.registry) == 2
        assert session.document.find_untracked(src) is None

    def test_remote_images_are_left_alone(self, session):
        session.paste(0, [Embed("https://example.com/cat.png")])
        assert len(session.registry) == 0
        assert session.document.embeds()[0][1].tracking_id is None

    def test_pasting_an_image_already_in_the_document(self, session, png):
        src = _data_uri(png())
        # An opened article that still carries the same inline image
        session.load(Document([Embed(src), TextRun("Body\n")]))

        mutation = session.paste(5, [Embed(src)])

        embeds = session.document.embeds()
        assert [(offset, e.is_staged) for offset, e in embeds] == [(0, False), (5, True)]
        assert embeds[0][1] == Embed(src)
        assert len(session.registry) == 1

        assert session.interceptor.process(mutation) == []
        assert len(session.registry) == 1
        assert session.document.find_untracked(src) == 0

    def test_embedder_insertions_are_not_reprocessed(self, session, make_file):
        session.insert_image(0, make_file())
        assert len(session.registry) == 1
        assert len(session.document.embeds()) == 1


class TestPasteFailures:
    def test_malformed_paste_degrades_gracefully(self, session, errors, caplog):
        src = "data:image/png;base64,@@@"

        with caplog.at_level("WARNING"):
            session.paste(0, [Embed(src)])

        assert len(session.registry) == 0
        assert session.document.find_untracked(src) == 0
        assert len(errors) == 1
        assert isinstance(errors[0], MalformedPasteData)
        assert "unstaged" in caplog.text

    def test_signed_out_paste_is_left_untracked(self, config, png):
        errors = []
        session = EditorSession(StaticTokenAuth(None), config=config, on_error=errors.append)
        src = _data_uri(png())

        session.paste(0, [Embed(src)])

        assert session.document.find_untracked(src) == 0
        assert len(session.registry) == 0
        assert isinstance(errors[0], AuthRequired)
