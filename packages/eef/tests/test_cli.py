"""Tests for the command line tool and configuration."""
import numpy as np
import polars as pl
import pytest


@pytest.fixture
def series_csv(tmp_path):
    np.random.seed(42)
    t = np.linspace(0.0, 10.0, 120)
    df = pl.DataFrame({
        'label': [f'row{i}' for i in range(120)],
        't': t,
        'value': np.sin(t) + 0.1 * np.random.randn(120),
    })
    path = tmp_path / 'series.csv'
    df.write_csv(path)
    return path


class TestRun:
    def test_extrema_writes_columns(self, series_csv, tmp_path):
        from eef.cli import run
        out = tmp_path / 'out' / 'trend.csv'
        result = run(series_csv, 'extrema', x_column='t', depend_on='first_deriv', output_path=out)
        assert out.exists()
        df = pl.read_csv(out)
        assert df.columns == ['x', 'value', 'trend', 'diff']
        assert df.height == 120
        np.testing.assert_allclose(df['trend'] + df['diff'], df['value'], atol=1e-9)
        assert result['column'] == 'value'

    def test_default_column_skips_x_column(self, series_csv):
        from eef.cli import run
        result = run(series_csv, 'extrema', x_column='t')
        assert result['column'] == 'value'
        np.testing.assert_allclose(result['frame']['x'].to_numpy(), np.linspace(0.0, 10.0, 120))

    def test_unit_step_x(self, series_csv):
        from eef.cli import run
        result = run(series_csv, 'partition', column='value', split_levels=3)
        np.testing.assert_array_equal(result['frame']['x'].to_numpy(), np.arange(1.0, 121.0))

    def test_reverse(self, series_csv):
        from eef.cli import run
        forward = run(series_csv, 'extrema', column='value')
        backward = run(series_csv, 'extrema', column='value', reverse=True)
        np.testing.assert_array_equal(
            backward['frame']['value'].to_numpy(),
            forward['frame']['value'].to_numpy()[::-1],
        )

    def test_parquet_output(self, series_csv, tmp_path):
        from eef.cli import run
        out = tmp_path / 'trend.parquet'
        run(series_csv, 'partition', x_column='t', split_levels=4, output_path=out)
        assert pl.read_parquet(out).height == 120

    def test_non_numeric_column(self, series_csv):
        from eef.cli import run
        from eef.errors import InvalidArgumentError
        with pytest.raises(InvalidArgumentError):
            run(series_csv, 'extrema', column='label')

    def test_missing_column(self, series_csv):
        from eef.cli import run
        from eef.errors import InvalidArgumentError
        with pytest.raises(InvalidArgumentError):
            run(series_csv, 'extrema', column='nope')

    def test_empty_cells_rejected(self, tmp_path):
        from eef.cli import run
        from eef.errors import InvalidArgumentError
        path = tmp_path / 'gaps.csv'
        path.write_text("t,value\n0,1.0\n1,\n2,3.0\n3,2.0\n4,1.0\n")
        with pytest.raises(InvalidArgumentError, match='empty cells'):
            run(path, 'extrema', column='value')

    def test_unit_step_origin_from_config(self, series_csv):
        from eef.cli import run
        result = run(series_csv, 'extrema', column='value', config={'grid': {'unit_step_origin': 0.0}})
        np.testing.assert_array_equal(result['frame']['x'].to_numpy(), np.arange(120.0))

    def test_unsupported_format(self, tmp_path):
        from eef.cli import detect_format
        from eef.errors import InvalidArgumentError
        assert detect_format('a.PARQUET') == 'parquet'
        with pytest.raises(InvalidArgumentError):
            detect_format(str(tmp_path / 'data.json'))


class TestMain:
    def test_summary(self, series_csv, capsys):
        from eef.__main__ import main
        main(['extrema', str(series_csv), '--x-column', 't', '--depend-on', 'first_deriv'])
        captured = capsys.readouterr()
        assert 'value: n=120' in captured.out

    def test_partition_output(self, series_csv, tmp_path):
        from eef.__main__ import main
        out = tmp_path / 'p.csv'
        main(['partition', str(series_csv), '--levels', '3', '-p', '2', '-o', str(out)])
        assert pl.read_csv(out).height == 120

    def test_missing_file(self, tmp_path, capsys):
        from eef.__main__ import main
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(tmp_path / 'missing.csv')])
        assert exc.value.code == 1
        assert 'does not exist' in capsys.readouterr().out

    def test_invalid_p_order(self, series_csv, capsys):
        from eef.__main__ import main
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(series_csv), '--p-order', '7'])
        assert exc.value.code == 1
        assert 'p_order' in capsys.readouterr().out

    def test_too_many_levels(self, series_csv, capsys):
        from eef.__main__ import main
        with pytest.raises(SystemExit) as exc:
            main(['partition', str(series_csv), '--levels', '7'])
        assert exc.value.code == 1

    def test_unknown_depend_on_rejected_by_parser(self, series_csv):
        from eef.__main__ import main
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(series_csv), '--depend-on', 'abs_value'])
        assert exc.value.code == 2

    def test_config_file(self, series_csv, tmp_path, capsys):
        from eef.__main__ import main
        cfg = tmp_path / 'eef.yaml'
        cfg.write_text("cli:\n  x_column: t\n  split_levels: 2\ntrend:\n  p_order_default: 1\n")
        main(['partition', str(series_csv), '--config', str(cfg)])
        assert 'value: n=120' in capsys.readouterr().out

    def test_config_spline_smoothing_changes_trend(self, series_csv, tmp_path):
        from eef.__main__ import main
        exact, smooth = tmp_path / 'exact.csv', tmp_path / 'smooth.csv'
        cfg = tmp_path / 'eef.yaml'
        cfg.write_text("spline:\n  smoothing: 1000.0\n")
        args = ['extrema', str(series_csv), '-x', 't', '-d', 'first_deriv']
        main(args + ['-o', str(exact)])
        main(args + ['-o', str(smooth), '--config', str(cfg)])
        assert not np.allclose(pl.read_csv(exact)['trend'].to_numpy(), pl.read_csv(smooth)['trend'].to_numpy())

    def test_config_grid_origin_sets_x(self, series_csv, tmp_path):
        from eef.__main__ import main
        out = tmp_path / 'out.csv'
        cfg = tmp_path / 'eef.yaml'
        cfg.write_text("grid:\n  unit_step_origin: 0.0\n")
        main(['extrema', str(series_csv), '-c', 'value', '-o', str(out), '--config', str(cfg)])
        assert pl.read_csv(out)['x'].to_list()[:3] == [0.0, 1.0, 2.0]

    def test_config_p_order_range(self, series_csv, tmp_path, capsys):
        from eef.__main__ import main
        cfg = tmp_path / 'eef.yaml'
        cfg.write_text("trend:\n  p_order_max: 1\n")
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(series_csv), '-p', '2', '--config', str(cfg)])
        assert exc.value.code == 1
        assert '[0, 1]' in capsys.readouterr().out

    def test_empty_cells_exit(self, tmp_path, capsys):
        from eef.__main__ import main
        path = tmp_path / 'gaps.csv'
        path.write_text("t,value\n0,1.0\n1,\n2,3.0\n3,2.0\n4,1.0\n5,5.0\n")
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(path), '-c', 'value'])
        assert exc.value.code == 1
        assert 'empty cells' in capsys.readouterr().out

    def test_malformed_parquet(self, tmp_path, capsys):
        from eef.__main__ import main
        path = tmp_path / 'broken.parquet'
        path.write_bytes(b'this is not a parquet file')
        with pytest.raises(SystemExit) as exc:
            main(['extrema', str(path)])
        assert exc.value.code == 1
        assert capsys.readouterr().out.startswith('Error:')


class TestConfig:
    def test_get(self):
        from eef.config import get
        assert get('trend.p_order_max') == 4
        assert get('trend.missing', 'fallback') == 'fallback'
        assert get('spline.smoothing') == 0.0

    def test_load_merges_without_mutating_defaults(self, tmp_path):
        from eef.config import CONFIG, get, load
        path = tmp_path / 'eef.yaml'
        path.write_text("spline:\n  smoothing: 0.5\n")
        cfg = load(path)
        assert get('spline.smoothing', config=cfg) == 0.5
        assert get('spline.ext', config=cfg) == 'const'
        assert CONFIG['spline']['smoothing'] == 0.0

    def test_load_empty_file(self, tmp_path):
        from eef.config import CONFIG, load
        path = tmp_path / 'empty.yaml'
        path.write_text("")
        assert load(path) == CONFIG

    def test_load_rejects_non_mapping(self, tmp_path):
        from eef.config import load
        from eef.errors import InvalidArgumentError
        path = tmp_path / 'list.yaml'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(InvalidArgumentError):
            load(path)
