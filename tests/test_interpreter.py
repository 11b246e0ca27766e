import pytest

from errors import (BasicSyntaxError, CantContinueError, CollaboratorError,
                    DivisionByZeroError, DuplicateDeclarationError,
                    IllegalDirectError, IllegalFunctionCallError,
                    NextWithoutForError, NoResumeError, NumericOverflowError,
                    OutOfDataError, OutOfMemoryError, ResumeWithoutError,
                    ReturnWithoutGosubError, SubscriptError, TypeMismatchError,
                    UndefinedLineError, WendWithoutWhileError,
                    WhileWithoutWendError)


class TestLoops:
    def test_for_prints_each_value(self, run, interp):
        output = run("""
            10 FOR I = 1 TO 3
            20 PRINT I
            30 NEXT I
        """)
        assert output == " 1 \n 2 \n 3 \n"
        assert interp.halt_reason == 'end'

    @pytest.mark.parametrize('start, limit, step, count', [
        (1, 10, 1, 10),
        (1, 10, 3, 4),
        (10, 1, -2, 5),
        (5, 1, 1, 0),
        (1, 1, 1, 1),
        (0, 1, 0.25, 5),
    ])
    def test_iteration_count(self, run, interp, start, limit, step, count):
        run(f"10 C = 0: FOR I = {start} TO {limit} STEP {step}: C = C + 1: NEXT I\n")
        assert interp.env.get('C').data == count
        assert interp.env.get('I').data == start + step * count

    def test_zero_iteration_loop_skips_body(self, run):
        output = run("""
            10 FOR I = 5 TO 1
            20 PRINT "body"
            30 NEXT I
            40 PRINT "after"
        """)
        assert output == "after\n"

    def test_nested_loops(self, run, interp):
        output = run("""
            10 FOR I = 1 TO 2
            20 FOR J = 1 TO 2
            30 PRINT I * 10 + J;
            40 NEXT J
            50 NEXT I
        """)
        assert output == " 11  12  21  22 "
        assert interp.for_stack == []

    def test_next_closes_inner_loop(self, run):
        output = run("""
            10 FOR I = 1 TO 2
            20 FOR J = 1 TO 3
            30 PRINT I; J
            40 NEXT I
            50 PRINT "done"
        """)
        assert output == " 1  1 \n 2  1 \ndone\n"

    def test_reentered_for_discards_old_frame(self, run, interp):
        output = run("""
            10 FOR I = 1 TO 3: GOTO 20
            20 FOR I = 1 TO 2: PRINT I: NEXT I
        """)
        assert output == " 1 \n 2 \n"
        assert interp.for_stack == []

    def test_next_without_for(self, run):
        with pytest.raises(NextWithoutForError) as info:
            run("10 NEXT I\n")
        assert info.value.line == 10

    def test_while_wend(self, run):
        output = run("""
            10 I = 0
            20 WHILE I < 3
            30 I = I + 1
            40 WEND
            50 PRINT I
        """)
        assert output == " 3 \n"

    def test_while_without_wend(self, run):
        with pytest.raises(WhileWithoutWendError):
            run("10 WHILE 0\n20 PRINT 1\n")

    def test_wend_without_while(self, run):
        with pytest.raises(WendWithoutWhileError):
            run("10 WEND\n")


class TestJumps:
    def test_gosub_return(self, run):
        output = run("""
            10 GOSUB 100
            20 PRINT "back"
            30 END
            100 PRINT "sub"
            110 RETURN
        """)
        assert output == "sub\nback\n"

    def test_return_to_statement_after_gosub_in_if(self, run):
        output = run("""
            10 IF 1 THEN GOSUB 100: PRINT "back"
            20 END
            100 PRINT "sub": RETURN
        """)
        assert output == "sub\nback\n"

    def test_return_without_gosub(self, run):
        with pytest.raises(ReturnWithoutGosubError):
            run("10 RETURN\n")

    def test_gosub_depth_is_bounded(self, run):
        with pytest.raises(OutOfMemoryError) as info:
            run("10 GOSUB 10\n")
        assert info.value.line == 10

    def test_on_goto_out_of_range_falls_through(self, run):
        output = run("""
            10 X = 5: ON X GOTO 100, 200: PRINT "fell"
            20 END
            100 PRINT "one"
            200 PRINT "two"
        """)
        assert output == "fell\n"

    def test_on_gosub(self, run):
        output = run("""
            10 ON 2 GOSUB 100, 200: PRINT "back": END
            100 PRINT "one": RETURN
            200 PRINT "two": RETURN
        """)
        assert output == "two\nback\n"

    def test_goto_missing_line(self, run):
        with pytest.raises(UndefinedLineError) as info:
            run("10 GOTO 99\n")
        assert info.value.line == 10

    def test_if_else(self, run):
        output = run("""
            10 X = 5
            20 IF X > 3 THEN PRINT "big" ELSE PRINT "small"
            30 IF X > 9 THEN PRINT "huge" ELSE PRINT "not huge"
        """)
        assert output == "big\nnot huge\n"

    def test_false_if_skips_rest_of_line(self, run):
        output = run("""
            10 IF 0 THEN PRINT "a": PRINT "b"
            20 PRINT "c"
        """)
        assert output == "c\n"

    def test_if_then_line_number(self, run):
        output = run("""
            10 IF 1 THEN 30
            20 PRINT "skipped"
            30 PRINT "target"
        """)
        assert output == "target\n"


class TestErrorTrapping:
    def test_trap_runs_handler(self, run, io):
        with pytest.raises(NoResumeError):
            run("""
                10 ON ERROR GOTO 100
                20 X = 1/0
                30 PRINT "unreachable"
                100 PRINT "caught"
            """)
        assert io.getvalue() == "caught\n"

    def test_resume_next(self, run):
        output = run("""
            10 ON ERROR GOTO 100: X = 1/0: PRINT "after"
            20 END
            100 PRINT "err"; ERR; ERL: RESUME NEXT
        """)
        assert output == "err 11  10 \nafter\n"

    def test_resume_next_after_failed_if_condition(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 IF 1/0 THEN PRINT "then-body" ELSE PRINT "else-body"
            30 PRINT "after"
            40 END
            100 RESUME NEXT
        """)
        assert output == "after\n"

    def test_resume_next_after_failed_if_keeps_line_tail(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 PRINT "a": IF 1/0 THEN PRINT "then-body"
            30 PRINT "b"
            40 END
            100 RESUME NEXT
        """)
        assert output == "a\nb\n"

    def test_resume_next_inside_then_body(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 IF 1 THEN X = 1/0: PRINT "rest of then"
            30 END
            100 RESUME NEXT
        """)
        assert output == "rest of then\n"

    def test_resume_retries_statement(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 D = 0
            30 PRINT 10 / D
            40 END
            100 D = 2: RESUME
        """)
        assert output == " 5 \n"

    def test_resume_line(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 ERROR 5
            30 PRINT "skipped"
            40 PRINT "resumed"
            50 END
            100 RESUME 40
        """)
        assert output == "resumed\n"

    def test_error_statement_sets_err(self, run):
        output = run("""
            10 ON ERROR GOTO 100
            20 ERROR 11
            30 END
            100 PRINT ERR; ERL: RESUME NEXT
        """)
        assert output == " 11  20 \n"

    def test_error_in_handler_is_fatal(self, run):
        with pytest.raises(DivisionByZeroError) as info:
            run("""
                10 ON ERROR GOTO 100
                20 X = 1/0
                100 Y = 1/0
            """)
        assert info.value.line == 100

    def test_on_error_goto_zero_in_handler_reraises(self, run):
        with pytest.raises(DivisionByZeroError) as info:
            run("""
                10 ON ERROR GOTO 100
                20 X = 1/0
                100 ON ERROR GOTO 0
            """)
        assert info.value.line == 20

    def test_resume_without_error(self, run):
        with pytest.raises(ResumeWithoutError):
            run("10 RESUME\n")

    def test_untrapped_error_reports_line(self, run, interp):
        with pytest.raises(TypeMismatchError) as info:
            run('10 PRINT "AB" + 1\n')
        assert info.value.line == 10
        assert str(info.value) == "Type mismatch in 10"
        assert interp.halt_reason == 'error'

    def test_run_resets_error_state(self, run, interp):
        run("""
            10 ON ERROR GOTO 100
            20 ERROR 7
            30 END
            100 RESUME NEXT
        """)
        assert interp.error_code == 7
        interp.program.delete(20)
        interp.run()
        assert interp.error_code == 0


class TestVariablesAndArrays:
    def test_subscript_out_of_range(self, run):
        with pytest.raises(SubscriptError):
            run("10 DIM A(5): A(5) = 1: A(6) = 1\n")

    def test_redimension(self, run):
        with pytest.raises(DuplicateDeclarationError):
            run("10 DIM A(5): DIM A(10)\n")

    def test_erase_then_dim(self, run, interp):
        run("10 DIM A(5): ERASE A: DIM A(20): A(20) = 3\n")
        assert interp.env.get_element('A', None, [20]).data == 3

    def test_implicit_dimension(self, run):
        with pytest.raises(SubscriptError):
            run("10 A(10) = 1: A(11) = 1\n")

    def test_option_base(self, run):
        with pytest.raises(SubscriptError):
            run("10 OPTION BASE 1: DIM A(3): A(0) = 1\n")

    def test_integer_overflow(self, run):
        with pytest.raises(NumericOverflowError):
            run("10 A% = 40000\n")

    def test_string_assignment_mismatch(self, run):
        with pytest.raises(TypeMismatchError):
            run("10 A$ = 5\n")

    def test_deftype(self, run):
        output = run("10 DEFINT I-N: I = 2.6: PRINT I\n")
        assert output == " 3 \n"

    def test_swap(self, run):
        assert run("10 A = 1: B = 2: SWAP A, B: PRINT A; B\n") == " 2  1 \n"

    def test_clear(self, run):
        assert run("10 A = 5: CLEAR: PRINT A\n") == " 0 \n"

    def test_def_fn(self, run):
        output = run("""
            10 DEF FNSQ(X) = X * X
            20 PRINT FNSQ(4)
        """)
        assert output == " 16 \n"


class TestData:
    def test_read_and_restore(self, run):
        output = run("""
            10 READ A, B$, C
            20 PRINT A; B$; C
            30 RESTORE 50
            40 READ D: PRINT D
            50 DATA 7, "x,y", 9
        """)
        assert output == " 7 x,y 9 \n 7 \n"

    def test_out_of_data(self, run):
        with pytest.raises(OutOfDataError):
            run("10 READ A, B\n20 DATA 1\n")

    def test_bad_number_reports_data_line(self, run):
        with pytest.raises(BasicSyntaxError) as info:
            run("10 READ A\n20 DATA abc\n")
        assert info.value.line == 20


class TestConsole:
    def test_print_separators(self, run):
        assert run('10 PRINT 1; -1\n') == " 1 -1 \n"

    def test_print_zones(self, run):
        assert run('10 PRINT "A", "B"\n') == "A" + " " * 13 + "B\n"

    def test_tab_and_spc(self, run):
        assert run('10 PRINT TAB(5); "X"; SPC(3); "Y"\n') == "    X   Y\n"

    def test_trailing_semicolon(self, run):
        assert run('10 PRINT "A";\n20 PRINT "B"\n') == "AB\n"

    def test_string_functions(self, run):
        output = run('10 PRINT LEFT$("HELLO", 2); MID$("HELLO", 2, 3); RIGHT$("HELLO", 1)\n')
        assert output == "HEELLO\n"

    def test_write(self, run):
        assert run('10 WRITE "a", 1, -2.5\n') == '"a",1,-2.5\n'

    def test_input_redo(self, run):
        output = run("""
            10 INPUT "N"; N
            20 PRINT N * 2
        """, 'abc', '42')
        assert output == "N? ?Redo from start\nN?  84 \n"

    def test_input_several_values(self, run, interp):
        run("10 INPUT A, B$\n", '1, hello')
        assert interp.env.get('A').data == 1
        assert interp.env.get('B', '$').data == 'hello'

    def test_input_without_data(self, run):
        with pytest.raises(CollaboratorError) as info:
            run("10 INPUT A\n")
        assert info.value.code == 62

    def test_line_input(self, run, interp):
        run('10 LINE INPUT "> "; A$\n', 'hello, world')
        assert interp.env.get('A', '$').data == 'hello, world'

    def test_inkey(self, run, io):
        io.keys.append('x')
        assert run('10 A$ = INKEY$: B$ = INKEY$: PRINT A$; B$; LEN(B$)\n') == "x 0 \n"

    def test_locate_and_cursor_functions(self, run):
        assert run('10 LOCATE 5, 10: PRINT CSRLIN; POS(0)\n') == " 5  13 \n"

    def test_locate_out_of_range(self, run):
        with pytest.raises(IllegalFunctionCallError):
            run('10 LOCATE 26, 1\n')

    def test_cls_clears_output(self, run):
        assert run('10 PRINT "gone": CLS: PRINT "kept"\n') == "kept\n"

    def test_randomize(self, run):
        assert run('10 RANDOMIZE 5: X = RND: PRINT X >= 0 AND X < 1\n') == " -1 \n"

    def test_tron(self, run):
        assert run('10 TRON\n20 PRINT "x"\n') == "[20]x\n"


class TestGraphicsAndSound:
    def test_pset_and_point(self, run, interp):
        output = run('10 SCREEN 1: PSET (10, 10), 2: PRINT POINT(10, 10)\n')
        assert output == " 2 \n"

    def test_line_and_circle(self, run, interp):
        run('10 LINE (0, 0)-(3, 0), 1: CIRCLE (50, 50), 5, 3\n')
        canvas = interp.graphics
        assert [canvas.get_pixel(x, 0) for x in range(4)] == [1, 1, 1, 1]
        assert canvas.get_pixel(55, 50) == 3
        assert canvas.get_pixel(50, 45) == 3

    def test_bad_screen_mode(self, run):
        with pytest.raises(IllegalFunctionCallError):
            run('10 SCREEN 9\n')

    def test_sound_frequency_range(self, run):
        with pytest.raises(IllegalFunctionCallError):
            run('10 SOUND 20, 1\n')


class TestSession:
    def test_stop_and_cont(self, run, interp, io):
        output = run("""
            10 PRINT "a"
            20 STOP
            30 PRINT "b"
        """)
        assert output == "a\n"
        assert interp.halt_reason == 'stop'
        interp.cont()
        assert io.getvalue() == "a\nb\n"

    def test_cont_without_stop(self, interp):
        with pytest.raises(CantContinueError):
            interp.cont()

    def test_editing_prevents_cont(self, run, interp):
        run("10 STOP\n20 PRINT 1\n")
        interp.execute_direct('30 END')
        with pytest.raises(CantContinueError):
            interp.cont()

    def test_host_break(self, interp, io):
        interp.load_program('10 PRINT "x"\n')
        interp.host.request_halt()
        interp.run()
        assert interp.halt_reason == 'break'
        assert io.getvalue() == ""
        interp.cont()
        assert io.getvalue() == "x\n"

    def test_direct_statement(self, interp, io):
        interp.execute_direct('PRINT 2 + 3')
        assert io.getvalue() == " 5 \n"
        assert interp.halt_reason == 'direct'

    def test_direct_lines_edit_program(self, interp, io):
        interp.execute_direct('10 PRINT "x"')
        interp.execute_direct('20 PRINT "y"')
        interp.execute_direct('20')
        interp.execute_direct('RUN')
        assert io.getvalue() == "x\n"
        assert list(interp.program.listing()) == ['10 PRINT "x"']

    def test_direct_goto_enters_program(self, interp, io):
        interp.load_program('10 PRINT "a"\n20 PRINT "b"\n')
        interp.execute_direct('GOTO 20')
        assert io.getvalue() == "b\n"

    def test_direct_error_line(self, interp):
        with pytest.raises(DivisionByZeroError) as info:
            interp.execute_direct('X = 1/0')
        assert info.value.line == 65535
        assert str(info.value) == "Division by zero"
        assert interp.error_line == 65535

    def test_def_fn_is_illegal_direct(self, interp):
        with pytest.raises(IllegalDirectError):
            interp.execute_direct('DEF FNA(X) = X')

    def test_new_clears_program(self, run, interp):
        run('10 PRINT 1\n')
        interp.execute_direct('NEW')
        assert len(interp.program) == 0

    def test_load_syntax_error_names_line(self, interp):
        with pytest.raises(BasicSyntaxError) as info:
            interp.load_program('10 PRINT 1\n20 GOTO\n')
        assert info.value.line == 20

    def test_load_rejects_unnumbered_line(self, interp):
        with pytest.raises(BasicSyntaxError):
            interp.load_program('PRINT 1\n')

    def test_run_from_line(self, interp, io):
        interp.load_program('10 PRINT "a"\n20 PRINT "b"\n')
        interp.run(20)
        assert io.getvalue() == "b\n"

    def test_run_from_empty_line(self, interp, io):
        interp.load_program('10 :\n20 PRINT 5\n')
        interp.run(10)
        assert io.getvalue() == " 5 \n"
        assert interp.halt_reason == 'end'
