"""
Pytest configuration and fixtures for segyview tests.
"""
import numpy as np
import pytest
import tempfile
import shutil
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton at a per-test directory."""
    from models.app_settings import AppSettings

    settings_dir = tmp_path / 'settings'
    monkeypatch.setattr(AppSettings, 'SETTINGS_DIR', settings_dir)
    monkeypatch.setattr(AppSettings, 'SETTINGS_FILE', settings_dir / 'settings.json')
    monkeypatch.setattr(AppSettings, '_instance', None)
    yield settings_dir


@pytest.fixture
def sample_traces():
    """Generate sample trace data, (n_traces, n_samples), 2 ms interval."""
    np.random.seed(42)
    n_samples = 500
    n_traces = 40
    sample_interval_ms = 2.0

    t = np.arange(n_samples) * sample_interval_ms / 1000.0

    traces = np.zeros((n_traces, n_samples), dtype=np.float32)
    for i in range(n_traces):
        # Ricker wavelet with moveout, decaying background noise
        center = 0.2 + 0.005 * i
        freq = 30
        wavelet_t = t - center
        wavelet = (1 - 2 * (np.pi * freq * wavelet_t) ** 2) * np.exp(-(np.pi * freq * wavelet_t) ** 2)
        traces[i, :] = wavelet + 0.1 * np.random.randn(n_samples) * np.exp(-2 * t)

    return traces, sample_interval_ms


@pytest.fixture
def segy_file(sample_traces):
    """In-memory SegyFile (IEEE float) built from sample traces."""
    from utils.sample_data import build_segy_file

    traces, sample_interval_ms = sample_traces
    return build_segy_file(traces, sample_interval_us=int(sample_interval_ms * 1000))


@pytest.fixture
def mock_segy():
    """The 50 trace x 100 sample sine-wave file at 4000 us, IEEE float."""
    from utils.sample_data import generate_sine_segy
    return generate_sine_segy()


@pytest.fixture
def mock_segy_bytes(mock_segy):
    from utils.segy_import.segy_export import encode_segy
    return encode_segy(mock_segy)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


def _write_segyio_file(path, traces, sample_format):
    segyio = pytest.importorskip('segyio')

    n_traces, n_samples = traces.shape
    spec = segyio.spec()
    spec.format = sample_format
    spec.samples = range(n_samples)
    spec.tracecount = n_traces

    with segyio.create(str(path), spec) as f:
        f.bin.update({segyio.BinField.Interval: 2000})
        for i in range(n_traces):
            f.trace[i] = traces[i, :]
            f.header[i] = {
                segyio.TraceField.TRACE_SEQUENCE_LINE: i + 1,
                segyio.TraceField.FieldRecord: 100,
                segyio.TraceField.CDP: 1000 + i,
                segyio.TraceField.CDP_X: 500000 + 25 * i,
                segyio.TraceField.INLINE_3D: 7,
            }
    return path


@pytest.fixture
def sample_segy_path(temp_dir, sample_traces):
    """SEG-Y file written by segyio with IBM float samples."""
    traces, _ = sample_traces
    return _write_segyio_file(temp_dir / 'ibm.sgy', traces, 1)


@pytest.fixture
def sample_segy_path_ieee(temp_dir, sample_traces):
    """SEG-Y file written by segyio with IEEE float samples."""
    traces, _ = sample_traces
    return _write_segyio_file(temp_dir / 'ieee.sgy', traces, 5)
