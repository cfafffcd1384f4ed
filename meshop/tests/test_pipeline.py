import importlib.util
from pathlib import Path

import numpy as np
import pytest

from meshop.core.config import ClipConfig, PipelineConfig, RefineConfig
from meshop.core.geometry import Extents3
from meshop.core.io import load_ply, save_as_obj
from meshop.core.pipeline import run_pipeline
from meshop.core.refinement import RefineStats


def test_empty_config_returns_copy(unit_cube):
    """An empty config returns a copy of the input."""
    out = run_pipeline(unit_cube, PipelineConfig())
    assert out is not unit_cube
    assert np.array_equal(out.faces, unit_cube.faces)


def test_all_stages(unit_cube):
    """Clip, clean and refine in order, recording a summary per stage."""
    box = Extents3((0.0, 0.0, 0.0), (0.5, 1.0, 1.0))
    cfg = PipelineConfig(clip=ClipConfig(box), remove_non_manifold=True,
                         refine=RefineConfig(max_face_count=60))
    history = []
    stats = RefineStats()
    out = run_pipeline(unit_cube, cfg, history=history, stats=stats)
    assert [stage for stage, _ in history] == ['input', 'clip', 'non_manifold', 'refine']
    assert out.n_faces >= 60
    assert np.all(box.contains(out.vertices))
    assert history[-1][1]['non_manifold_edges'] == 0
    assert stats.faces_after == out.n_faces


def test_reused_config_is_left_untouched(unit_cube):
    """Running twice with one config keeps it unchanged; stats accumulate per caller."""
    cfg = PipelineConfig(refine=RefineConfig(max_face_count=20))
    first, second = RefineStats(), RefineStats()
    out1 = run_pipeline(unit_cube, cfg, stats=first)
    run_pipeline(out1, cfg, stats=second)
    assert cfg.extras == {}
    assert first.faces_before == 12 and first.faces_after == out1.n_faces
    assert second.faces_before == out1.n_faces and second.splits == 0


def test_config_from_options():
    """Build a pipeline config from flat command-line options."""
    cfg = PipelineConfig.from_options(box=[0, 0, 0, 1, 2, 3], non_manifold=True, max_faces=10)
    assert cfg.clip.extents.ur == (1.0, 2.0, 3.0)
    assert cfg.refine.max_face_count == 10
    assert cfg.remove_non_manifold
    with pytest.raises(ValueError):
        PipelineConfig.from_options(box=[0, 0, 0, -1, 1, 1])


def _load_script():
    path = Path(__file__).resolve().parents[2] / 'scripts' / 'process_mesh.py'
    spec = importlib.util.spec_from_file_location('process_mesh', path)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_process_mesh_script(tmp_path, unit_cube):
    """The command-line script clips, refines and writes a mesh."""
    script = _load_script()
    src = tmp_path / 'cube.obj'
    dst = tmp_path / 'out.ply'
    save_as_obj(unit_cube, src)
    rc = script.main([str(src), str(dst), '--box', '0', '0', '0', '1', '1', '0.5',
                      '--max-faces', '40', '--log-level', 'WARNING'])
    assert rc == 0
    out = load_ply(dst)
    assert out.n_faces >= 40
    assert out.vertices[:, 2].max() <= 0.5
    assert script.main([str(tmp_path / 'missing.obj'), str(dst)]) == 2
