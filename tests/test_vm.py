import pytest

from gbvm.instructions import Opcode
from gbvm.vm import (
    INSTRUCTIONS_PER_QUANT,
    SCRIPT_TERMINATED,
    VM,
    VM_CONTEXT_STACK_SIZE,
    VM_HEAP_SIZE,
    VM_MAX_CONTEXTS,
    ExceptionCode,
    RunnerStatus,
)


def _push(vm, ctx, args):
    ctx.push(int.from_bytes(args, "little"))


def _idle(vm, ctx, args):
    ctx.waitable = True


def _lock(vm, ctx, args):
    ctx.lock_count += 1
    vm.lock_state += 1


def _jump(vm, ctx, args):
    ctx.pc = int.from_bytes(args, "little")


def _raise(vm, ctx, args):
    vm.raise_exception(ctx, args[0], args[1])


def make_vm(rom):
    vm = VM(rom)
    vm.register(Opcode.PUSH, _push)
    vm.register(Opcode.IDLE, _idle)
    vm.register(Opcode.LOCK, _lock)
    vm.register(Opcode.JUMP, _jump)
    vm.register(Opcode.RAISE, _raise)
    return vm


def test_execute_assigns_ids_and_handle():
    vm = make_vm({1: bytes([0])})
    first = vm.execute(1, 0, 5)
    second = vm.execute(1, 0, 6)
    assert first.id == 1
    assert second.id == 2
    assert vm.memory[5] == 1
    assert vm.memory[6] == 2
    assert vm.active == [second, first]
    assert first.base_addr == VM_HEAP_SIZE
    assert second.base_addr == VM_HEAP_SIZE + VM_CONTEXT_STACK_SIZE


def test_execute_pushes_thread_locals():
    vm = make_vm({1: bytes([0])})
    ctx = vm.execute(1, 0, None, 7, -1)
    assert ctx.stack_ptr == ctx.base_addr + 2
    assert vm.read(ctx, -2) == 7
    assert vm.read(ctx, -1) == -1


def test_execute_runs_out_of_contexts():
    vm = make_vm({1: bytes([0])})
    started = [vm.execute(1, 0, None) for _ in range(VM_MAX_CONTEXTS)]
    assert all(ctx is not None for ctx in started)
    assert vm.execute(1, 0, None) is None


def test_push_pop_round_trip():
    vm = make_vm({})
    ctx = vm.execute(1, 0, None)
    ctx.push(42)
    ctx.push(-3)
    assert ctx.pop(1) == -3
    assert ctx.pop(1) == 42
    assert ctx.stack_ptr == ctx.base_addr


def test_read_write_global_and_stack():
    vm = make_vm({})
    ctx = vm.execute(1, 0, None, 0)
    vm.write(ctx, 10, 0x1234)
    vm.write(ctx, -1, -5)
    assert vm.read(ctx, 10) == 0x1234
    assert vm.read(ctx, -1) == -5
    assert vm.memory[ctx.base_addr] == 0x10000 - 5


def test_read_out_of_range():
    vm = make_vm({})
    ctx = vm.execute(1, 0, None)
    with pytest.raises(IndexError):
        vm.read(ctx, -VM_HEAP_SIZE - 1)


def test_script_runs_to_end_and_flags_handle():
    code = bytes([Opcode.PUSH, 9, 0, 0])
    vm = make_vm({1: code})
    ctx = vm.execute(1, 0, 3)
    assert vm.update() == RunnerStatus.DONE
    assert vm.memory[3] == ctx.id | SCRIPT_TERMINATED
    assert vm.read(ctx, -1) == 9
    assert vm.active == []
    assert vm.free[0] is ctx


def test_idle_script_reports_idle():
    code = bytes([Opcode.IDLE, Opcode.JUMP, 0, 0])
    vm = make_vm({1: code})
    ctx = vm.execute(1, 0, None)
    assert vm.update() == RunnerStatus.IDLE
    assert ctx.pc == 1
    assert vm.active == [ctx]


def test_busy_script_uses_one_quantum():
    calls = []

    def spin(vm, ctx, args):
        calls.append(ctx.pc)
        ctx.pc = 0

    vm = make_vm({1: bytes([Opcode.JUMP, 0, 0])})
    vm.register(Opcode.JUMP, spin)
    vm.execute(1, 0, None)
    assert vm.update() == RunnerStatus.BUSY
    assert len(calls) == INSTRUCTIONS_PER_QUANT + 1


def test_terminate():
    vm = make_vm({1: bytes([Opcode.IDLE, Opcode.JUMP, 0, 0])})
    ctx = vm.execute(1, 0, 2)
    assert vm.terminate(99) is False
    assert vm.terminate(ctx.id) is True
    assert ctx.terminated
    assert vm.memory[2] & SCRIPT_TERMINATED
    assert vm.update() == RunnerStatus.DONE
    assert vm.active == []


def test_exception_stops_runner():
    code = bytes([Opcode.RAISE, ExceptionCode.CHANGE_SCENE, 3, 1, 2, 3, 0])
    vm = make_vm({4: code})
    ctx = vm.execute(4, 0, None)
    assert vm.update() == RunnerStatus.EXCEPTION
    assert vm.exception_code == ExceptionCode.CHANGE_SCENE
    assert vm.exception_params_length == 3
    assert vm.exception_params_bank == 4
    assert vm.exception_params_offset == 3
    assert ctx.pc == 6


def test_lock_keeps_running_locked_context():
    ran = []

    def mark(vm, ctx, args):
        ran.append(ctx.id)
        ctx.waitable = True

    rom = {
        1: bytes([Opcode.LOCK, Opcode.IDLE, 0]),
        2: bytes([Opcode.PUSH, 0, 0, 0]),
    }
    vm = make_vm(rom)
    vm.register(Opcode.PUSH, mark)
    other = vm.execute(2, 0, None)
    locker = vm.execute(1, 0, None)
    assert vm.update() == RunnerStatus.IDLE
    assert vm.lock_state == 1
    assert ran == []
    vm.update()
    assert vm.lock_state == 0
    assert locker not in vm.active
    assert ran == [other.id]


def test_unknown_and_unregistered_opcodes():
    vm = VM({1: bytes([Opcode.PUSH, 0, 0]), 2: bytes([0x50])})
    with pytest.raises(KeyError):
        vm.step(vm.execute(1, 0, None))
    with pytest.raises(ValueError):
        vm.step(vm.execute(2, 0, None))
    with pytest.raises(ValueError):
        vm.register(0x50, _idle)


def test_missing_bank():
    vm = make_vm({})
    ctx = vm.execute(9, 0, None)
    with pytest.raises(KeyError):
        vm.step(ctx)


def test_reset_restores_pool_and_clears_memory():
    vm = make_vm({1: bytes([0])})
    ctx = vm.execute(1, 0, 0)
    vm.lock_state = 2
    vm.reset(True)
    assert vm.active == []
    assert len(vm.free) == VM_MAX_CONTEXTS
    assert [c.id for c in vm.free] == list(range(1, VM_MAX_CONTEXTS + 1))
    assert vm.lock_state == 0
    assert vm.memory[0] == 0
    assert vm.execute(1, 0, None).id == ctx.id