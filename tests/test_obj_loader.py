"""Unit tests for the OBJ mesh loader."""

import logging

import numpy as np
import pytest


class TestParseObj:
    def test_vertices_and_faces(self):
        from whitted.geometry.obj_loader import parse_obj_lines

        vertices, faces = parse_obj_lines(
            ["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1 2 3"]
        )
        assert vertices.shape == (3, 3)
        assert vertices.dtype == np.float32
        assert faces.tolist() == [[0, 1, 2]]
        assert faces.dtype == np.int32

    def test_comments_and_blank_lines_skipped(self):
        from whitted.geometry.obj_loader import parse_obj_lines

        vertices, faces = parse_obj_lines(
            ["# a comment", "", "   ", "v 0 0 0", "v 1 0 0", "v 0 1 0", "f 3 2 1"]
        )
        assert len(vertices) == 3
        assert faces.tolist() == [[2, 1, 0]]

    def test_slash_forms_keep_vertex_index(self):
        from whitted.geometry.obj_loader import parse_obj_lines

        lines = ["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1/4 2//5 3/6/7"]
        _, faces = parse_obj_lines(lines)
        assert faces.tolist() == [[0, 1, 2]]

    def test_unknown_tokens_warn(self, caplog):
        from whitted.geometry.obj_loader import parse_obj_lines

        with caplog.at_level(logging.WARNING, logger="whitted.geometry.obj_loader"):
            vertices, _ = parse_obj_lines(["vn 0 0 1", "v 0 0 0", "usemtl red"])
        assert len(vertices) == 1
        assert "vn" in caplog.text
        assert "usemtl" in caplog.text

    @pytest.mark.parametrize(
        "lines",
        [
            ["v 0 0"],
            ["v 0 zero 0"],
            ["v 0 0 0", "v 1 0 0", "v 0 1 0", "v 1 1 0", "f 1 2 3 4"],
            ["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1 2 4"],
            ["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 0 1 2"],
            ["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1 b 3"],
        ],
        ids=["short-vertex", "bad-float", "quad", "out-of-range", "zero-index", "bad-index"],
    )
    def test_malformed_input_raises(self, lines):
        from whitted.geometry.obj_loader import MeshLoadError, parse_obj_lines

        with pytest.raises(MeshLoadError):
            parse_obj_lines(lines)

    def test_mesh_load_error_is_value_error(self):
        from whitted.geometry.obj_loader import MeshLoadError

        assert issubclass(MeshLoadError, ValueError)


class TestLoadObj:
    def test_load_file(self, pyramid_obj):
        from whitted.geometry.obj_loader import load_obj

        vertices, faces = load_obj(pyramid_obj)
        assert vertices.shape == (5, 3)
        assert faces.shape == (6, 3)
        assert faces.max() == 4

    def test_missing_file_raises(self, tmp_path):
        from whitted.geometry.obj_loader import MeshLoadError, load_obj

        with pytest.raises(MeshLoadError):
            load_obj(tmp_path / "missing.obj")
