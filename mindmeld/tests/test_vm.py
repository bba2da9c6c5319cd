import io
import pathlib
import sys
from contextlib import redirect_stdout

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mindmeld.bytecode import Selector
from mindmeld.console import StreamInput
from mindmeld.errors import TapeBoundsError
from mindmeld.machine import Machine, Tape
from mindmeld.tokenizer import tokenize
from mindmeld.vm import TapeVM


def run_vm(stream, **kwargs):
    vm = TapeVM(tokenize(stream), **kwargs)
    return vm, vm.run()


def test_three_increments_then_output():
    _, output = run_vm("+A+A+A.A")
    assert output == "\x03"


def test_cursors_are_independent_over_one_tape():
    vm, output = run_vm("+A>A+B.B")
    assert vm.tape.cursors == {Selector.A: 1, Selector.B: 0}
    # both increments landed on cell 0: one tape, two cursors
    assert vm.tape.cells[0] == 2
    assert vm.tape.cells[1] == 0
    assert output == "\x02"


def test_cursor_b_reads_what_cursor_a_wrote():
    _, output = run_vm("+A+A>A+A>B.B")
    assert output == "\x01"


def test_decrement_loop_runs_once_per_unit():
    vm = TapeVM(tokenize("[A-A]A"))
    vm.tape.cells[0] = 5
    body_runs = 0
    while not vm.halted:
        if vm.pc == 1:
            body_runs += 1
        vm.step()
    assert vm.tape.cells[0] == 0
    assert body_runs == 5
    assert vm.steps == 15


def test_loop_skipped_when_cell_is_zero():
    vm, output = run_vm("[A+A.A]A.A")
    assert output == "\x00"
    # open jumps onto the close, which falls through
    assert vm.steps == 3


def test_straight_line_program_visits_each_instruction_once():
    vm = TapeVM(tokenize("+A>A+B<A-B.A,B"))
    visited = []
    while not vm.halted:
        visited.append(vm.pc)
        vm.step()
    assert visited == list(range(7))
    assert vm.steps == 7


def test_cells_wrap_modulo_256():
    _, output = run_vm("-A.A")
    assert output == "\xff"
    vm, _ = run_vm("+A" * 256)
    assert vm.tape.cells[0] == 0


def test_moving_below_zero_is_a_bounds_error():
    vm = TapeVM(tokenize("+A<A"))
    with pytest.raises(TapeBoundsError) as excinfo:
        vm.run()
    frame = excinfo.value.frame
    assert frame.pc == 1
    assert frame.instruction == "<A"
    assert frame.cell_a == 1
    assert vm.tape.cursors[Selector.A] == 0


def test_moving_past_the_end_is_a_bounds_error():
    vm = TapeVM(tokenize(">B>B>B"), tape_length=3)
    with pytest.raises(TapeBoundsError) as excinfo:
        vm.run()
    assert excinfo.value.frame.pc == 2
    assert excinfo.value.frame.cursor_b == 2
    assert "outside tape [0, 3)" in str(excinfo.value)


def test_input_is_stored_and_echoed():
    vm, output = run_vm(",A.A,B.B", input_source=StreamInput(io.StringIO("hi")))
    assert output == "hhii"
    assert vm.tape.cells[0] == ord("i")


def test_end_of_input_stores_zero_without_echo():
    vm = TapeVM(tokenize("+A,A.A"))
    assert vm.run() == "\x00"
    assert vm.tape.cells[0] == 0


def test_output_sink_receives_each_character():
    received = []
    run_vm("+A.A+A.A", output_sink=received.append)
    assert received == ["\x01", "\x02"]


def test_debug_run_prints_trace_lines():
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        run_vm("+A>B")
    assert buffer.getvalue() == ""
    vm = TapeVM(tokenize("+A>B"))
    with redirect_stdout(buffer):
        vm.run(debug=True)
    lines = buffer.getvalue().splitlines()
    assert lines[0].startswith("[PC=0] EXEC: +A")
    assert "B@0=1" in lines[1]


def test_step_reports_halt_past_the_end():
    vm = TapeVM(tokenize("+A"))
    assert vm.step() is None
    assert vm.step() == "halt"
    assert vm.halted


def test_snapshot_and_clone():
    vm, _ = run_vm("+A>A+A+A>B")
    snap = vm.snapshot(window=4)
    assert snap.cursor(Selector.A) == 1
    assert snap.cursor(Selector.B) == 1
    assert snap.window_start == 0
    assert list(snap.window) == [1, 2, 0, 0]
    fresh = vm.clone()
    assert fresh.pc == 0 and fresh.steps == 0
    assert fresh.instructions == vm.instructions
    assert len(fresh.tape) == len(vm.tape)


def test_tape_rejects_non_positive_length():
    with pytest.raises(ValueError):
        Tape(0)


def test_tape_window_stays_on_tape():
    tape = Tape(10)
    assert tape.window(-5, 4) == (0, [0, 0, 0, 0])
    start, cells = tape.window(8, 4)
    assert start == 6 and len(cells) == 4


def test_machine_without_program_hooks_cannot_be_built():
    class LoopsOnly(Machine):
        def _op_LOOP_OPEN(self, selector):
            return None

        def _op_LOOP_CLOSE(self, selector):
            return None

    with pytest.raises(TypeError):
        LoopsOnly()
    with pytest.raises(TypeError):
        Machine()
