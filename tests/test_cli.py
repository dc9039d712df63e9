from bbtxt_data.cli import main


def test_preview_dumps_samples(make_image, write_bbtxt, tmp_path, capsys):
    image = make_image('a.png', 160, 120)
    source = write_bbtxt([f'{image} 0 1.0 30 30 70 90', f'{image} 1 1.0 100 20 140 50'])
    dump_dir = tmp_path / 'preview'

    code = main(['--source', str(source), '--height', '64', '--width', '64',
                 '--reference-size', '32', '--batch-size', '2', '--batches', '2',
                 '--seed', '0', '--dump-dir', str(dump_dir)])

    assert code == 0
    assert len(list(dump_dir.glob('*.png'))) == 4
    out = capsys.readouterr().out
    assert 'Batch 1: images (2, 3, 64, 64) labels (2, 20, 5)' in out


def test_preview_reports_errors(tmp_path, capsys):
    code = main(['--source', str(tmp_path / 'missing.bbtxt'), '--height', '64', '--width', '64',
                 '--reference-size', '32'])

    assert code == 1
    assert 'not found' in capsys.readouterr().out
