import sys

import pytest

import rmsp


def runCompile(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['rmsp.py', *[str(arg) for arg in args]])
    rmsp.compile()


def test_usage_without_arguments(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        runCompile(monkeypatch)
    assert excinfo.value.code == 1
    assert 'Usage' in capsys.readouterr().out


def test_missing_source(monkeypatch, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        runCompile(monkeypatch, tmp_path / 'missing.rmsp')
    assert excinfo.value.code == 1
    assert 'No such File' in capsys.readouterr().out


def test_compile_single_file_next_to_source(monkeypatch, tmp_path, capsys):
    source = tmp_path / 'arena.rmsp'
    source.write_text('#REPEAT(2)\nfoo\n#END_REPEAT\n', encoding='utf-8')
    runCompile(monkeypatch, source)
    assert (tmp_path / 'arena.rms').read_text(encoding='utf-8') == 'foo\nfoo'
    out = capsys.readouterr().out
    assert 'Environment:' in out
    assert 'TokenRepeat.process()' in out
    assert 'Compiled:' in out


def test_rms_source_is_not_overwritten(monkeypatch, tmp_path):
    source = tmp_path / 'arena.rms'
    source.write_text('foo   bar', encoding='utf-8')
    runCompile(monkeypatch, source, 'QUIET')
    assert source.read_text(encoding='utf-8') == 'foo   bar'
    assert (tmp_path / 'arena.out.rms').read_text(encoding='utf-8') == 'foo bar'


def test_quiet_prints_nothing(monkeypatch, tmp_path, capsys):
    source = tmp_path / 'arena.rmsp'
    source.write_text('foo', encoding='utf-8')
    runCompile(monkeypatch, source, 'QUIET')
    assert capsys.readouterr().out == ''


def test_compile_directory_with_output_dirs(monkeypatch, tmp_path):
    scripts = tmp_path / 'scripts'
    (scripts / 'nested').mkdir(parents=True)
    (scripts / 'Arena.rmsp').write_text('a', encoding='utf-8')
    (scripts / 'nested' / 'TCFortress.rms').write_text('b', encoding='utf-8')
    (scripts / 'notes.txt').write_text('c', encoding='utf-8')
    out = tmp_path / 'out'
    tcOut = tmp_path / 'tc'
    runCompile(monkeypatch, scripts, f'OUT={out}', f'TC_OUT={tcOut}', 'QUIET')
    assert (out / 'Arena.rms').read_text(encoding='utf-8') == 'a'
    assert (tcOut / 'TCFortress.rms').read_text(encoding='utf-8') == 'b'
    assert not (out / 'notes.rms').exists()


def test_previous_outputs_are_skipped(monkeypatch, tmp_path):
    (tmp_path / 'arena.rms').write_text('a', encoding='utf-8')
    (tmp_path / 'arena.out.rms').write_text('old', encoding='utf-8')
    runCompile(monkeypatch, tmp_path, 'QUIET')
    assert (tmp_path / 'arena.out.rms').read_text(encoding='utf-8') == 'a'
    assert not (tmp_path / 'arena.out.out.rms').exists()


def test_compiling_directory_twice_skips_own_outputs(monkeypatch, tmp_path):
    (tmp_path / 'arena.rmsp').write_text('#REPEAT(2)\nfoo\n#END_REPEAT', encoding='utf-8')
    runCompile(monkeypatch, tmp_path, 'QUIET')
    runCompile(monkeypatch, tmp_path, 'QUIET')
    assert sorted(path.name for path in tmp_path.iterdir()) == ['arena.rms', 'arena.rmsp']
    assert (tmp_path / 'arena.rms').read_text(encoding='utf-8') == 'foo\nfoo'


def test_actor_area_base_option(monkeypatch, tmp_path):
    source = tmp_path / 'arena.rmsp'
    source.write_text('actor_area tc\navoid_actor_area tc', encoding='utf-8')
    runCompile(monkeypatch, source, 'ACTOR_AREA_BASE=300', 'QUIET')
    assert (tmp_path / 'arena.rms').read_text(encoding='utf-8') == 'actor_area 300\navoid_actor_area 300'


def test_syntax_error_writes_nothing(monkeypatch, tmp_path, capsys):
    source = tmp_path / 'broken.rmsp'
    source.write_text('foo\n#REPEAT(2)\nbar\n', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        runCompile(monkeypatch, source, 'QUIET')
    assert excinfo.value.code == 1
    assert not (tmp_path / 'broken.rms').exists()
    out = capsys.readouterr().out
    assert 'Syntax Error' in out
    assert 'line 2' in out
