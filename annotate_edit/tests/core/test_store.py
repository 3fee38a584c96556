"""
Tests for the annotation model and the sidecar-backed store.
"""

import json

import pytest

from annotate_edit.core.annotation import AnnotationStore, sidecar_path
from annotate_edit.core.annotation.state import (
    Arrow,
    Color,
    Rectangle,
    Text,
    annotation_from_dict,
    annotation_to_dict,
    translated,
)

ARROW_RECORD = (
    '{"annotations": [{"kind": {"type": "Arrow", "start": [0, 0], "end": [%s, %s], '
    '"color": {"r": 1, "g": 0, "b": 0, "a": 1}, "thickness": %s}}]}'
)


class TestModel:
    """Tests for annotation records."""

    def test_record_layout(self, red):
        record = annotation_to_dict(Arrow((1, 2), (3, 4), red, 5))
        assert record == {
            "kind": {
                "type": "Arrow",
                "start": [1.0, 2.0],
                "end": [3.0, 4.0],
                "color": {"r": 1.0, "g": 0.0, "b": 0.0, "a": 1.0},
                "thickness": 5.0,
            }
        }

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            annotation_from_dict({"kind": {"type": "Ellipse"}})

    def test_missing_field_is_rejected(self):
        with pytest.raises(ValueError):
            annotation_from_dict({"kind": {"type": "Arrow", "start": [0, 0]}})

    def test_bad_point_is_rejected(self, red):
        record = annotation_to_dict(Arrow((1, 2), (3, 4), red, 5))
        record["kind"]["end"] = [3]
        with pytest.raises(ValueError):
            annotation_from_dict(record)

    def test_color_clamped_only_on_render(self):
        color = Color(1.5, -0.2, 0.5, 1.0)
        assert color.r == 1.5
        assert color.to_rgba8() == (255, 0, 127, 255)

    def test_translated_keeps_style_and_original(self, red):
        rect = Rectangle((10, 10), (50, 40), red, 2.0)
        moved = translated(rect, 5, -5)
        assert moved.min == (15, 5)
        assert moved.max == (55, 35)
        assert moved.color == red
        assert moved.thickness == 2.0
        assert rect.min == (10, 10)


class TestSidecarPath:
    """Tests for sidecar naming."""

    def test_extension_is_kept(self, temp_dir):
        assert sidecar_path(temp_dir / "photo.png") == temp_dir / "photo.png.annotz"

    def test_without_extension(self, temp_dir):
        assert sidecar_path(temp_dir / "photo") == temp_dir / "photo.annotz"

    def test_multiple_dots(self, temp_dir):
        assert sidecar_path(temp_dir / "a.b.jpg") == temp_dir / "a.b.jpg.annotz"


class TestAnnotationStore:
    """Tests for AnnotationStore."""

    def test_add_appends_on_top(self, sample_annotations):
        store = AnnotationStore()
        for annotation in sample_annotations:
            store.add(annotation)
        assert store.add(Text((0, 0), "top")) == 3
        assert store[3].content == "top"

    def test_remove_out_of_range_is_noop(self, sample_annotations):
        store = AnnotationStore()
        store.replace_all(sample_annotations)
        assert not store.remove(3)
        assert not store.remove(-1)
        assert len(store) == 3

    def test_remove_shifts_following(self, sample_annotations):
        store = AnnotationStore()
        store.replace_all(sample_annotations)
        assert store.remove(0)
        assert [a.kind for a in store] == ["Rectangle", "Text"]

    def test_update_geometry(self, sample_annotations):
        store = AnnotationStore()
        store.replace_all(sample_annotations)
        assert store.update_geometry(0, (1.0, 2.0))
        assert store[0].start == (1.0, 2.0)
        assert store[0].end == (101.0, 2.0)
        assert store.update_geometry(2, (-20.0, 0.0))
        assert store[2].pos == (0.0, 60.0)
        assert not store.update_geometry(7, (1.0, 1.0))

    def test_update_geometry_replaces_the_record(self, sample_annotations):
        store = AnnotationStore()
        store.replace_all(sample_annotations)
        before = store[1]
        assert store.update_geometry(1, (5.0, 5.0))
        assert store[1] is not before
        assert store[1].min == (before.min[0] + 5.0, before.min[1] + 5.0)
        assert store[1].color == before.color

    def test_save_and_load_round_trip(self, temp_dir, sample_annotations):
        path = temp_dir / "photo.png.annotz"
        store = AnnotationStore(path)
        store.replace_all(sample_annotations)
        assert store.save()

        loaded = AnnotationStore(path).load()
        assert loaded == sample_annotations

    def test_save_overwrites(self, temp_dir, sample_annotations):
        path = temp_dir / "photo.png.annotz"
        store = AnnotationStore(path)
        store.replace_all(sample_annotations)
        store.save()
        store.remove(0)
        store.save()
        assert len(AnnotationStore(path).load()) == 2
        assert [p.name for p in temp_dir.iterdir()] == ["photo.png.annotz"]

    def test_missing_file_loads_empty(self, temp_dir):
        assert AnnotationStore(temp_dir / "nope.annotz").load() == []

    @pytest.mark.parametrize(
        "content",
        [
            "not json at all",
            "[]",
            '{"annotations": 3}',
            '{"annotations": [{"kind": {"type": "Spiral"}}]}',
            '{"annotations": [{"kind": {"type": "Arrow", "start": [0, 0]}}]}',
            "",
            ARROW_RECORD % ("1e400", "0", "3"),
            ARROW_RECORD % ("NaN", "0", "3"),
            ARROW_RECORD % ("0", "-Infinity", "3"),
            ARROW_RECORD % ("0", "0", "Infinity"),
            ARROW_RECORD % ("1" + "0" * 400, "0", "3"),
        ],
    )
    def test_malformed_file_loads_empty(self, temp_dir, content):
        path = temp_dir / "photo.png.annotz"
        path.write_text(content)
        store = AnnotationStore(path)
        assert store.load() == []
        assert len(store) == 0

    def test_finite_record_template_loads(self, temp_dir):
        path = temp_dir / "photo.png.annotz"
        path.write_text(ARROW_RECORD % ("10", "0", "3"))
        (arrow,) = AnnotationStore(path).load()
        assert arrow.end == (10.0, 0.0)

    def test_non_finite_sidecar_does_not_break_export(self, session, image_file):
        image_file.with_name("photo.png.annotz").write_text(
            ARROW_RECORD % ("1e400", "0", "3")
        )
        session.open_image(image_file)
        assert session.annotations == []
        assert session.export() is not None

    def test_empty_text_record_is_rejected_on_load(self, temp_dir, red):
        """Empty-content text records are skipped; the rest of the file loads."""
        records = [
            annotation_to_dict(Arrow((0, 0), (10, 10), red, 1)),
            {"kind": {"type": "Text", "pos": [5, 5], "content": "", "font_size": 20,
                      "color": red.to_dict()}},
            annotation_to_dict(Text((1, 1), "kept", 12, red)),
        ]
        path = temp_dir / "photo.png.annotz"
        path.write_text(json.dumps({"annotations": records}))

        loaded = AnnotationStore(path).load()
        assert [a.kind for a in loaded] == ["Arrow", "Text"]
        assert loaded[1].content == "kept"

    def test_reads_files_with_integer_coordinates(self, temp_dir):
        path = temp_dir / "photo.png.annotz"
        path.write_text(json.dumps({"annotations": [{"kind": {
            "type": "Rectangle", "min": [1, 2], "max": [3, 4],
            "color": {"r": 0, "g": 0, "b": 0, "a": 1}, "thickness": 2,
        }}]}))
        (rect,) = AnnotationStore(path).load()
        assert rect.min == (1.0, 2.0)
        assert rect.thickness == 2.0

    def test_failed_save_keeps_previous_file(self, temp_dir, sample_annotations):
        path = temp_dir / "photo.png.annotz"
        store = AnnotationStore(path)
        store.replace_all(sample_annotations)
        store.save()
        before = path.read_text()

        store.add(Text((0, 0), "unsaved"))
        store.path = temp_dir / "missing_dir" / "photo.png.annotz"
        assert not store.save()
        assert path.read_text() == before

    def test_in_memory_store_does_not_save(self):
        assert not AnnotationStore().save()
