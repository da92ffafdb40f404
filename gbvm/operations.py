"""Core script instructions: flow control, variables, expressions and threads."""

from __future__ import annotations

import operator
import struct
from enum import IntEnum
from typing import Callable, Dict, Sequence, Tuple

from .instructions import INSTRUCTION_SIZE, Opcode
from .mathutil import isqrt, to_int8, to_int16, to_uint16
from .vm import (
    VM,
    VM_OP_AND,
    VM_OP_EQ,
    VM_OP_GE,
    VM_OP_GT,
    VM_OP_LE,
    VM_OP_LT,
    VM_OP_NE,
    VM_OP_NOT,
    VM_OP_OR,
    ScriptContext,
)

Routine = Callable[[VM, ScriptContext, bool, int], bool]


class Condition(IntEnum):
    """Comparison used by the conditional jump instructions."""

    EQ = VM_OP_EQ
    LT = VM_OP_LT
    LE = VM_OP_LE
    GT = VM_OP_GT
    GE = VM_OP_GE
    NE = VM_OP_NE


_COMPARE = {
    Condition.EQ: operator.eq,
    Condition.LT: operator.lt,
    Condition.LE: operator.le,
    Condition.GT: operator.gt,
    Condition.GE: operator.ge,
    Condition.NE: operator.ne,
}


def compare(condition: int, a: int, b: int) -> bool:
    """Compare two signed words; an unknown condition is never met."""
    fn = _COMPARE.get(condition)
    if fn is None:
        return False
    return bool(fn(to_int16(a), to_int16(b)))


def _check(memory: Sequence[int], address: int) -> int:
    if not 0 <= address < len(memory):
        raise IndexError(f"script memory address {address} out of range")
    return address


def _addr(memory: Sequence[int], base: int, idx: int) -> int:
    idx = to_int16(idx)
    return _check(memory, base + idx if idx < 0 else idx)


def _byte(code: bytes, pc: int) -> int:
    if not 0 <= pc < len(code):
        raise IndexError(f"expression runs past the end of its bank at {pc}")
    return code[pc]


def _word(code: bytes, pc: int) -> int:
    if not 0 <= pc or pc + 2 > len(code):
        raise IndexError(f"expression runs past the end of its bank at {pc}")
    return struct.unpack_from("<h", code, pc)[0]


def _c_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("division by zero in expression")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _c_mod(a: int, b: int) -> int:
    return a - b * _c_div(a, b)


_BINARY: Dict[int, Callable[[int, int], int]] = {
    ord("+"): operator.add,
    ord("-"): operator.sub,
    ord("*"): operator.mul,
    ord("/"): _c_div,
    ord("%"): _c_mod,
    VM_OP_EQ: lambda a, b: int(a == b),
    VM_OP_LT: lambda a, b: int(a < b),
    VM_OP_LE: lambda a, b: int(a <= b),
    VM_OP_GT: lambda a, b: int(a > b),
    VM_OP_GE: lambda a, b: int(a >= b),
    VM_OP_NE: lambda a, b: int(a != b),
    VM_OP_AND: lambda a, b: int(bool(a) and bool(b)),
    VM_OP_OR: lambda a, b: int(bool(a) or bool(b)),
    ord("&"): operator.and_,
    ord("|"): operator.or_,
    ord("^"): operator.xor,
    ord("m"): min,
    ord("M"): max,
}

_UNARY: Dict[int, Callable[[int], int]] = {
    VM_OP_NOT: lambda b: int(not b),
    ord("@"): abs,
    ord("~"): operator.invert,
    ord("Q"): isqrt,
}


def evaluate_rpn(vm: VM, ctx: ScriptContext) -> None:
    """Evaluate the postfix expression at ctx.pc, leaving results on the stack.

    References are resolved against the stack pointer as it was on entry.
    """
    try:
        code = vm.rom[ctx.bank]
    except KeyError:
        raise KeyError(f"no bytecode in bank {ctx.bank}") from None
    memory = vm.memory
    args = ctx.stack_ptr
    while True:
        op = to_int8(_byte(code, ctx.pc))
        ctx.pc += 1
        if op < 0:
            if op == -4:
                idx = _word(code, ctx.pc)
                idx = to_int16(memory[_addr(memory, args, idx)])
                ctx.push(memory[_addr(memory, args, idx)])
                ctx.pc += 2
            elif op == -3:
                idx = _word(code, ctx.pc)
                ctx.push(memory[_addr(memory, args, idx)])
                ctx.pc += 2
            elif op == -2:
                ctx.push(_word(code, ctx.pc))
                ctx.pc += 2
            elif op == -1:
                ctx.push(to_int8(_byte(code, ctx.pc)))
                ctx.pc += 1
            else:
                return
            continue

        b_addr = ctx.stack_ptr - 1
        if op in _UNARY:
            b = to_int16(memory[_check(memory, b_addr)])
            memory[b_addr] = to_uint16(_UNARY[op](b))
            continue
        if op in _BINARY:
            a_addr = _check(memory, b_addr - 1)
            a = to_int16(memory[a_addr])
            b = to_int16(memory[_check(memory, b_addr)])
            memory[a_addr] = to_uint16(_BINARY[op](a, b))
            ctx.stack_ptr -= 1
            continue
        return


def wait_frames(vm: VM, ctx: ScriptContext, start: bool, frame: int) -> bool:
    """Invoke routine: wait for the number of frames held at frame."""
    scratch = _check(vm.memory, ctx.stack_ptr)
    if start:
        vm.memory[scratch] = to_uint16(vm.sys_time)
    elapsed = to_uint16(vm.sys_time - vm.memory[scratch])
    if elapsed < vm.memory[_check(vm.memory, frame)]:
        ctx.waitable = True
        return False
    return True


def _unpack(fmt: str) -> Callable[[bytes], Tuple[int, ...]]:
    return struct.Struct("<" + fmt).unpack


_U8 = _unpack("B")
_S8 = _unpack("b")
_U16 = _unpack("H")
_S16 = _unpack("h")
_S16_S16 = _unpack("hh")
_S16_U16 = _unpack("hH")
_LOOP_REL = _unpack("hbB")
_LOOP = _unpack("hHB")
_CALL_FAR = _unpack("BH")
_INVOKE = _unpack("BHBh")
_BEGINTHREAD = _unpack("BHhB")
_IF = _unpack("BhhHB")
_RAND = _unpack("hHHH")
_RAISE = _unpack("BB")
_S16X3 = _unpack("hhh")


def _push(vm, ctx, args):
    ctx.push(_U16(args)[0])


def _pop(vm, ctx, args):
    ctx.pop(_U8(args)[0])


def _call_rel(vm, ctx, args):
    ctx.push(ctx.pc)
    ctx.pc += _S8(args)[0]


def _call(vm, ctx, args):
    ctx.push(ctx.pc)
    ctx.pc = _U16(args)[0]


def _ret(vm, ctx, args):
    ctx.stack_ptr -= 1
    ctx.pc = vm.memory[_check(vm.memory, ctx.stack_ptr)]
    ctx.stack_ptr -= _U8(args)[0]


def _call_far(vm, ctx, args):
    bank, pc = _CALL_FAR(args)
    ctx.push(ctx.pc)
    ctx.push(ctx.bank)
    ctx.pc = pc
    ctx.bank = bank


def _ret_far(vm, ctx, args):
    ctx.stack_ptr -= 1
    ctx.bank = vm.memory[_check(vm.memory, ctx.stack_ptr)] & 0xFF
    ctx.stack_ptr -= 1
    ctx.pc = vm.memory[_check(vm.memory, ctx.stack_ptr)]
    ctx.stack_ptr -= _U8(args)[0]


def _loop_step(vm, ctx, idx, target, n):
    counter = _addr(vm.memory, ctx.stack_ptr, idx)
    if vm.memory[counter]:
        ctx.pc = target
        vm.memory[counter] = to_uint16(vm.memory[counter] - 1)
    else:
        ctx.stack_ptr -= n


def _loop_rel(vm, ctx, args):
    idx, ofs, n = _LOOP_REL(args)
    _loop_step(vm, ctx, idx, ctx.pc + ofs, n)


def _loop(vm, ctx, args):
    idx, pc, n = _LOOP(args)
    _loop_step(vm, ctx, idx, pc, n)


def _jump_rel(vm, ctx, args):
    ctx.pc += _S8(args)[0]


def _jump(vm, ctx, args):
    ctx.pc = _U16(args)[0]


def _systime(vm, ctx, args):
    vm.write(ctx, _S16(args)[0], vm.sys_time)


def _beginthread(vm, ctx, args):
    bank, pc, idx, nargs = _BEGINTHREAD(args)
    handle = _addr(vm.memory, ctx.stack_ptr, idx)
    child = vm.execute(bank, pc, handle)
    if not nargs or child is None:
        return
    code = vm.rom[ctx.bank]
    for _ in range(nargs):
        operand = _word(code, ctx.pc)
        base = ctx.stack_ptr if operand < 0 else 0
        child.push(vm.memory[_check(vm.memory, base + idx)])
        ctx.pc += 2


def _if(vm, ctx, args):
    condition, idx_a, idx_b, pc, n = _IF(args)
    if compare(condition, vm.read(ctx, idx_a), vm.read(ctx, idx_b)):
        ctx.pc = pc
    ctx.stack_ptr -= n


def _if_const(vm, ctx, args):
    condition, idx_a, value, pc, n = _IF(args)
    if compare(condition, vm.read(ctx, idx_a), value):
        ctx.pc = pc
    ctx.stack_ptr -= n


def _push_value(vm, ctx, args):
    ctx.push(vm.read(ctx, _S16(args)[0]))


def _push_value_ind(vm, ctx, args):
    idx = vm.read(ctx, _S16(args)[0])
    ctx.push(vm.read(ctx, idx))


def _push_reference(vm, ctx, args):
    idx = _S16(args)[0]
    ctx.push(ctx.stack_ptr + idx if idx < 0 else idx)


def _reserve(vm, ctx, args):
    ctx.stack_ptr += _S8(args)[0]


def _set(vm, ctx, args):
    idx_a, idx_b = _S16_S16(args)
    vm.write(ctx, idx_a, vm.read(ctx, idx_b))


def _set_const(vm, ctx, args):
    idx, value = _S16_U16(args)
    vm.write(ctx, idx, value)


def _rpn(vm, ctx, args):
    evaluate_rpn(vm, ctx)


def _join(vm, ctx, args):
    value = vm.memory[_addr(vm.memory, ctx.stack_ptr, _S16(args)[0])]
    if not value >> 8:
        ctx.pc -= INSTRUCTION_SIZE + len(args)
        ctx.waitable = True


def _terminate(vm, ctx, args):
    value = vm.memory[_addr(vm.memory, ctx.stack_ptr, _S16(args)[0])]
    vm.terminate(value & 0xFF)


def _idle(vm, ctx, args):
    ctx.waitable = True


def _get_tlocal(vm, ctx, args):
    idx_a, idx_b = _S16_S16(args)
    source = _check(
        vm.memory, ctx.stack_ptr + idx_b if idx_b < 0 else ctx.base_addr + idx_b
    )
    vm.write(ctx, idx_a, vm.memory[source])


def _randomize(vm, ctx, args):
    vm.random.seed(vm.sys_time)


def _rand(vm, ctx, args):
    idx, low, limit, mask = _RAND(args)
    value = vm.random.getrandbits(16) & mask
    if value >= limit:
        value -= limit
    if value >= limit:
        value -= limit
    vm.write(ctx, idx, value + low)


def _lock(vm, ctx, args):
    ctx.lock_count += 1
    vm.lock_state += 1


def _unlock(vm, ctx, args):
    if ctx.lock_count == 0:
        return
    ctx.lock_count -= 1
    vm.lock_state -= 1


def _raise(vm, ctx, args):
    code, size = _RAISE(args)
    vm.raise_exception(ctx, code, size)


def _set_indirect(vm, ctx, args):
    idx_a, idx_b = _S16_S16(args)
    vm.write(ctx, vm.read(ctx, idx_a), vm.read(ctx, idx_b))


def _get_indirect(vm, ctx, args):
    idx_a, idx_b = _S16_S16(args)
    vm.write(ctx, idx_a, vm.read(ctx, vm.read(ctx, idx_b)))


def _poll_loaded(vm, ctx, args):
    vm.write(ctx, _S16(args)[0], int(bool(vm.loaded_state)))
    vm.loaded_state = False


def _span(vm, ctx, idx, count):
    if count < 0:
        raise ValueError(f"negative word count {count}")
    start = _addr(vm.memory, ctx.stack_ptr, idx)
    if start + count > len(vm.memory):
        raise IndexError(f"{count} words at {start} run past script memory")
    return start


def _memset(vm, ctx, args):
    idx, value, count = _S16X3(args)
    start = _span(vm, ctx, idx, count)
    vm.memory[start:start + count] = [(value & 0xFF) * 0x0101] * count


def _memcpy(vm, ctx, args):
    idx_a, idx_b, count = _S16X3(args)
    dest = _span(vm, ctx, idx_a, count)
    source = _span(vm, ctx, idx_b, count)
    vm.memory[dest:dest + count] = vm.memory[source:source + count]


_HANDLERS = {
    Opcode.PUSH: _push,
    Opcode.POP: _pop,
    Opcode.CALL_REL: _call_rel,
    Opcode.CALL: _call,
    Opcode.RET: _ret,
    Opcode.LOOP_REL: _loop_rel,
    Opcode.LOOP: _loop,
    Opcode.JUMP_REL: _jump_rel,
    Opcode.JUMP: _jump,
    Opcode.CALL_FAR: _call_far,
    Opcode.RET_FAR: _ret_far,
    Opcode.SYSTIME: _systime,
    Opcode.BEGINTHREAD: _beginthread,
    Opcode.IF: _if,
    Opcode.PUSH_VALUE_IND: _push_value_ind,
    Opcode.PUSH_VALUE: _push_value,
    Opcode.RESERVE: _reserve,
    Opcode.SET: _set,
    Opcode.SET_CONST: _set_const,
    Opcode.RPN: _rpn,
    Opcode.JOIN: _join,
    Opcode.TERMINATE: _terminate,
    Opcode.IDLE: _idle,
    Opcode.GET_TLOCAL: _get_tlocal,
    Opcode.IF_CONST: _if_const,
    Opcode.RANDOMIZE: _randomize,
    Opcode.RAND: _rand,
    Opcode.LOCK: _lock,
    Opcode.UNLOCK: _unlock,
    Opcode.RAISE: _raise,
    Opcode.SET_INDIRECT: _set_indirect,
    Opcode.GET_INDIRECT: _get_indirect,
    Opcode.POLL_LOADED: _poll_loaded,
    Opcode.PUSH_REFERENCE: _push_reference,
    Opcode.MEMSET: _memset,
    Opcode.MEMCPY: _memcpy,
}


def install(vm: VM) -> Dict[Tuple[int, int], Routine]:
    """Register the core instructions on vm.

    Returns the table of routines the INVOKE instruction may call, keyed by
    (bank, address); it starts empty and the caller fills it.
    """
    routines: Dict[Tuple[int, int], Routine] = {}

    def invoke(vm: VM, ctx: ScriptContext, args: bytes) -> None:
        bank, fn, nparams, idx = _INVOKE(args)
        frame = _addr(vm.memory, ctx.stack_ptr, idx)
        start = ctx.update_fn != fn or ctx.update_fn_bank != bank
        if start:
            ctx.update_fn = fn
            ctx.update_fn_bank = bank
        try:
            routine = routines[(bank, fn)]
        except KeyError:
            raise KeyError(f"no routine at bank {bank} address 0x{fn:04X}") from None
        if routine(vm, ctx, start, frame):
            ctx.stack_ptr -= nparams
            ctx.update_fn = None
            ctx.update_fn_bank = 0
            return
        ctx.pc -= INSTRUCTION_SIZE + len(args)

    for opcode, handler in _HANDLERS.items():
        vm.register(opcode, handler)
    vm.register(Opcode.INVOKE, invoke)
    return routines