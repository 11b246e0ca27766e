import pytest

from errors import CollaboratorError
from file_manager import FileManager


@pytest.fixture
def files(tmp_path):
    manager = FileManager(str(tmp_path), {'B': str(tmp_path / 'b')})
    yield manager
    manager.close_all()


class TestSequential:
    def test_write_then_read(self, files):
        files.open(1, 'OUT.TXT', 'O')
        files.write(1, 'hello\n"a,b",3\n')
        files.close(1)
        files.open(1, 'OUT.TXT', 'I')
        assert files.read_line(1) == 'hello'
        assert files.read_item(1) == 'a,b'
        assert files.read_item(1) == '3'
        assert files.eof(1)

    def test_append(self, files, tmp_path):
        (tmp_path / 'LOG.TXT').write_text('one\n')
        files.open(2, 'LOG.TXT', 'A')
        files.write(2, 'two\n')
        files.close(2)
        assert (tmp_path / 'LOG.TXT').read_text() == 'one\ntwo\n'

    def test_column_tracking(self, files):
        files.open(1, 'C.TXT', 'O')
        files.write(1, 'abc')
        assert files.column(1) == 4
        files.write(1, '\n')
        assert files.column(1) == 1

    def test_ctrl_z_ends_file(self, files, tmp_path):
        (tmp_path / 'Z.TXT').write_text('x\n\x1a')
        files.open(1, 'Z.TXT', 'I')
        files.read_line(1)
        assert files.eof(1)

    def test_input_past_end(self, files, tmp_path):
        (tmp_path / 'E.TXT').write_text('')
        files.open(1, 'E.TXT', 'I')
        with pytest.raises(CollaboratorError) as info:
            files.read_line(1)
        assert info.value.code == 62

    def test_drive_letter(self, files, tmp_path):
        (tmp_path / 'b').mkdir()
        files.open(1, 'B:D.TXT', 'O')
        files.write(1, 'x')
        files.close(1)
        assert (tmp_path / 'b' / 'D.TXT').read_text() == 'x'


class TestRandom:
    def test_records(self, files):
        files.open(1, 'R.DAT', 'R', 4)
        files.write_record(1, 'ab', 2)
        assert files.length(1) == 8
        assert files.read_record(1, 2) == 'ab  '
        assert files.position(1) == 2

    def test_next_record_by_default(self, files):
        files.open(1, 'R.DAT', 'R', 2)
        files.write_record(1, 'aa')
        files.write_record(1, 'bb')
        assert files.read_record(1, 1) == 'aa'
        assert files.read_record(1) == 'bb'

    def test_bad_record_number(self, files):
        files.open(1, 'R.DAT', 'R')
        with pytest.raises(CollaboratorError) as info:
            files.read_record(1, 0)
        assert info.value.code == 63


class TestErrors:
    @pytest.mark.parametrize('action, code', [
        (lambda f: f.open(0, 'X.TXT', 'O'), 52),
        (lambda f: f.write(3, 'x'), 52),
        (lambda f: f.open(1, 'MISSING.TXT', 'I'), 53),
        (lambda f: f.open(1, 'X.TXT', 'Q'), 54),
        (lambda f: f.open(1, '  ', 'O'), 64),
    ])
    def test_codes(self, files, action, code):
        with pytest.raises(CollaboratorError) as info:
            action(files)
        assert info.value.code == code

    def test_already_open(self, files):
        files.open(1, 'X.TXT', 'O')
        with pytest.raises(CollaboratorError) as info:
            files.open(1, 'Y.TXT', 'O')
        assert info.value.code == 55

    def test_wrong_mode(self, files):
        files.open(1, 'X.TXT', 'O')
        with pytest.raises(CollaboratorError) as info:
            files.read_line(1)
        assert info.value.code == 54

    def test_close_unopened_is_harmless(self, files):
        files.close(9)
        assert not files.is_open(9)


class TestProgramFiles:
    def test_sequential_round_trip(self, run):
        output = run("""
            10 OPEN "OUT.TXT" FOR OUTPUT AS #1
            20 PRINT #1, "hello"; 42
            30 WRITE #1, "a,b", 3
            40 CLOSE #1
            50 OPEN "OUT.TXT" FOR INPUT AS #1
            60 LINE INPUT #1, A$
            70 INPUT #1, B$, C
            80 PRINT A$: PRINT B$: PRINT C
            90 PRINT EOF(1)
        """)
        assert output == "hello 42 \na,b\n 3 \n -1 \n"

    def test_random_fields(self, run):
        output = run("""
            10 OPEN "R.DAT" AS #1 LEN = 10
            20 FIELD #1, 4 AS N$, 6 AS V$
            30 LSET N$ = "ab": RSET V$ = "xy"
            40 PUT #1, 2
            50 LSET N$ = "": LSET V$ = ""
            60 GET #1, 2
            70 PRINT N$; "|"; V$; "|"
            80 PRINT LOF(1); LOC(1)
            90 CLOSE
        """)
        assert output == "ab  |    xy|\n 20  2 \n"

    def test_field_overflow(self, run):
        with pytest.raises(CollaboratorError) as info:
            run("""
                10 OPEN "R.DAT" AS #1 LEN = 4
                20 FIELD #1, 3 AS A$, 3 AS B$
            """)
        assert info.value.code == 50

    def test_missing_file_is_trappable(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 OPEN "NOPE.TXT" FOR INPUT AS #1
            30 END
            100 PRINT ERR: RESUME 30
        """)
        assert output == " 53 \n"

    def test_end_closes_files(self, run, interp, tmp_path):
        run("""
            10 OPEN "O.TXT" FOR OUTPUT AS #1
            20 PRINT #1, "x"
        """)
        assert interp.file_manager.channels == {}
        assert (tmp_path / 'O.TXT').read_text() == "x\n"
