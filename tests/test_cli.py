import itertools
import json
from pathlib import Path
from freezegun import freeze_time
import pytest
from quicknotes import cli


def qn_setup(fs):
    Path('~').expanduser().mkdir(parents=True)
    Path('~/.quicknotes.conf.py').expanduser().write_text("""
from quicknotes.conf import *
conf = QuickNotesConf(
    store_conf=FileStoreConf(path='/data/notes.json'),
    template_globs={'/templates/*.mako'}
)
""")


def stored():
    return json.loads(json.loads(Path('/data/notes.json').read_text())['quicknotes_notes'])


def uuid_mock(mocker):
    mocker.patch('shortuuid.uuid', side_effect=(f'uuid{i}' for i in itertools.count(1)))


def test_no_command(capsys):
    assert cli.main([]) == 1
    out, err = capsys.readouterr()
    assert 'usage: quicknotes' in out


@freeze_time('2012-05-02T03:04:05Z')
def test_new_and_list_json(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    assert cli.main(['new', '-t', 'Groceries', '-c', 'yellow', 'milk, eggs']) == 0
    out, err = capsys.readouterr()
    assert out == 'Created uuid1\n'
    assert cli.main(['new', 'call Bob']) == 0
    out, err = capsys.readouterr()
    assert out == 'Created uuid2\n'
    expected = [
        {'id': 'uuid2', 'title': 'Untitled', 'content': 'call Bob', 'colorValue': 0xFFFFFFFF,
         'updatedAt': '2012-05-02T03:04:05+00:00'},
        {'id': 'uuid1', 'title': 'Groceries', 'content': 'milk, eggs', 'colorValue': 0xFFFFF9C4,
         'updatedAt': '2012-05-02T03:04:05+00:00'},
    ]
    assert stored() == expected
    assert cli.main(['list', '-j']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == expected
    assert cli.main(['list', '-j', 'EGG']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == expected[1:]
    assert cli.main(['list', '-j', 'bread']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == []


def test_list_text_and_table(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    assert cli.main(['new', '-t', 'Groceries', '-c', '#E8F5E9', 'milk, eggs\nbread']) == 0
    assert cli.main(['new', '-t', 'Todo', '-c', '#80112233', 'call Bob']) == 0
    capsys.readouterr()

    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    blocks = out.split('--------------------\n')[1:]
    assert len(blocks) == 2
    assert blocks[0].startswith('id: uuid2\ntitle: Todo\ncolor: #80112233\nupdated: ')
    assert blocks[0].endswith('\ncall Bob\n')
    assert blocks[1].startswith('id: uuid1\ntitle: Groceries\ncolor: green\nupdated: ')
    assert blocks[1].endswith('\nmilk, eggs\nbread\n')

    assert cli.main(['list', '-t', 'todo']) == 0
    out, err = capsys.readouterr()
    assert '| ID ' in out
    assert '| uuid2 | Todo ' in out
    assert 'uuid1' not in out

    assert cli.main(['list', '--table']) == 0
    out, err = capsys.readouterr()
    assert 'milk, eggs...' in out


def test_list_empty(fs, capsys):
    qn_setup(fs)
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert out == ''
    assert not Path('/data/notes.json').exists()


@freeze_time('2012-05-02T03:04:05Z')
def test_show(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    assert cli.main(['new', '-t', 'Groceries', 'milk']) == 0
    capsys.readouterr()
    assert cli.main(['show', '-j', 'uu']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == {'id': 'uuid1', 'title': 'Groceries', 'content': 'milk', 'colorValue': 0xFFFFFFFF,
                               'updatedAt': '2012-05-02T03:04:05+00:00'}
    assert cli.main(['show', 'uuid1']) == 0
    out, err = capsys.readouterr()
    assert out.startswith('id: uuid1\ntitle: Groceries\ncolor: white\n')
    assert cli.main(['show', 'nope']) == 1
    out, err = capsys.readouterr()
    assert 'No note with id: nope' in err


def test_edit(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    assert cli.main(['new', '-t', 'A', 'a']) == 0
    assert cli.main(['new', '-t', 'B', 'b']) == 0
    with freeze_time('2020-01-01T00:00:00Z'):
        assert cli.main(['edit', 'uuid1', '-t', 'A2', '-c', 'blue']) == 0
    assert [r['id'] for r in stored()] == ['uuid2', 'uuid1']
    assert stored()[1] == {'id': 'uuid1', 'title': 'A2', 'content': 'a', 'colorValue': 0xFFE3F2FD,
                           'updatedAt': '2020-01-01T00:00:00+00:00'}
    assert cli.main(['edit', 'uuid2', '-b', 'new body', '-t', '']) == 0
    assert stored()[0]['title'] == 'Untitled'
    assert stored()[0]['content'] == 'new body'


def test_bad_color(fs, capsys):
    qn_setup(fs)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(['new', '-c', 'purple', 'x'])
    assert excinfo.value.code == 2
    out, err = capsys.readouterr()
    assert 'invalid color: purple' in err


def test_rm(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    assert cli.main(['new', 'a']) == 0
    assert cli.main(['new', 'b']) == 0
    capsys.readouterr()
    assert cli.main(['rm', 'uuid1']) == 0
    out, err = capsys.readouterr()
    assert out == 'Deleted uuid1\n'
    assert [r['id'] for r in stored()] == ['uuid2']
    assert cli.main(['rm', 'uuid1']) == 1
    out, err = capsys.readouterr()
    assert 'No note with id: uuid1' in err
    assert [r['id'] for r in stored()] == ['uuid2']


def test_new_from_template(fs, capsys, mocker):
    uuid_mock(mocker)
    qn_setup(fs)
    fs.create_file('/templates/standup.txt.mako', contents="""<% directives.title = 'Standup' %>\
Yesterday:
Today:""")
    assert cli.main(['new', '-T', 'standup', '-c', 'green']) == 0
    out, err = capsys.readouterr()
    assert out == 'Created uuid1\n'
    assert stored()[0]['title'] == 'Standup'
    assert stored()[0]['content'] == 'Yesterday:\nToday:'
    assert stored()[0]['colorValue'] == 0xFFE8F5E9


def test_corrupt_store(fs, capsys):
    qn_setup(fs)
    fs.create_file('/data/notes.json', contents=json.dumps({'quicknotes_notes': '[{"id": 1}]'}))
    assert cli.main(['list']) == 2
    out, err = capsys.readouterr()
    assert 'Cannot load notes: Stored note at index 0 is malformed' in err
    assert out == ''


def test_unwritable_store(fs, capsys):
    qn_setup(fs)
    fs.create_file('/data', contents='not a directory')
    assert cli.main(['new', 'x']) == 1
    out, err = capsys.readouterr()
    assert 'Cannot save notes: Cannot write store file: /data/notes.json' in err


def test_colors(fs, capsys):
    qn_setup(fs)
    assert cli.main(['colors']) == 0
    out, err = capsys.readouterr()
    assert '| yellow | #FFFFF9C4 |' in out
