"""Cooperative script runner: contexts, shared memory and the scheduler."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Mapping, Optional

from .instructions import INSTRUCTION_SIZE, Opcode, arg_length
from .mathutil import to_int16, to_uint16

VM_MAX_CONTEXTS = 16
VM_CONTEXT_STACK_SIZE = 64
VM_HEAP_SIZE = 768
MEMORY_SIZE = VM_HEAP_SIZE + VM_MAX_CONTEXTS * VM_CONTEXT_STACK_SIZE
INSTRUCTIONS_PER_QUANT = 0x10
SCRIPT_TERMINATED = 0x8000

VM_OP_EQ = 1
VM_OP_LT = 2
VM_OP_LE = 3
VM_OP_GT = 4
VM_OP_GE = 5
VM_OP_NE = 6
VM_OP_AND = 7
VM_OP_OR = 8
VM_OP_NOT = 9


class RunnerStatus(IntEnum):
    """Result of one pass of the script runner."""

    DONE = 0
    IDLE = 1
    BUSY = 2
    EXCEPTION = 3


class ExceptionCode(IntEnum):
    """Codes a script raises to ask the engine for a state change."""

    NONE = 0
    RESET = 1
    CHANGE_SCENE = 2
    SAVE = 3
    LOAD = 4
    TERMINATE = 5


Handler = Callable[["VM", "ScriptContext", bytes], None]


def _check_address(address: int) -> int:
    if not 0 <= address < MEMORY_SIZE:
        raise IndexError(f"script memory address {address} out of range")
    return address


@dataclass(eq=False)
class ScriptContext:
    """One script thread: program counter, bank and its stack in shared memory."""

    id: int
    base_addr: int
    memory: list[int] = field(repr=False)
    pc: int = 0
    bank: int = 0
    stack_ptr: int = 0
    hthread: Optional[int] = None
    terminated: bool = False
    waitable: bool = False
    lock_count: int = 0
    flags: int = 0
    update_fn: object = None
    update_fn_bank: int = 0

    def __post_init__(self) -> None:
        if not self.stack_ptr:
            self.stack_ptr = self.base_addr

    def push(self, value: int) -> None:
        """Push a word onto this context's stack."""
        self.memory[_check_address(self.stack_ptr)] = to_uint16(value)
        self.stack_ptr += 1

    def pop(self, n: int) -> int:
        """Drop n words and return the word now at the stack pointer."""
        if n:
            self.stack_ptr -= n
        return to_int16(self.memory[_check_address(self.stack_ptr)])


class VM:
    """Shared script memory, the pool of contexts and the instruction table.

    ``rom`` maps a bank number to its bytecode; a context's ``pc`` is an
    offset into the bytes of its ``bank``. Handlers are called as
    ``handler(vm, ctx, args)`` after the program counter has moved past the
    instruction and its argument bytes.
    """

    def __init__(self, rom: Optional[Mapping[int, bytes]] = None) -> None:
        self.rom: dict[int, bytes] = {b: bytes(c) for b, c in (rom or {}).items()}
        self.memory: list[int] = [0] * MEMORY_SIZE
        self.contexts: list[ScriptContext] = []
        self.active: list[ScriptContext] = []
        self.free: list[ScriptContext] = []
        self.lock_state = 0
        self.loaded_state = False
        self.exception_code = ExceptionCode.NONE
        self.exception_params_length = 0
        self.exception_params_bank = 0
        self.exception_params_offset = 0
        self.sys_time = 0
        self.random = random.Random()
        self._handlers: dict[int, Handler] = {}
        self._prev: Optional[ScriptContext] = None
        self._current: Optional[ScriptContext] = None
        self.reset(True)

    def reset(self, reset: bool) -> None:
        """Return every context to the free pool; with reset, clear all memory."""
        if reset or not self.contexts:
            if reset:
                self.memory[:] = [0] * MEMORY_SIZE
            self.contexts = [
                ScriptContext(
                    id=i + 1,
                    base_addr=VM_HEAP_SIZE + i * VM_CONTEXT_STACK_SIZE,
                    memory=self.memory,
                )
                for i in range(VM_MAX_CONTEXTS)
            ]
        self.free = list(self.contexts)
        self.active = []
        self.lock_state = 0
        self.loaded_state = False
        self._prev = None
        self._current = None

    def execute(self, bank: int, pc: int, handle: Optional[int], *args: int):
        """Start a script in a free context; return it, or None if none is free."""
        if not self.free:
            return None
        ctx = self.free.pop(0)
        ctx.pc = pc
        ctx.bank = bank
        ctx.stack_ptr = ctx.base_addr
        ctx.hthread = handle
        if handle is not None:
            self.memory[_check_address(handle)] = ctx.id
        ctx.terminated = False
        ctx.lock_count = 0
        ctx.flags = 0
        ctx.update_fn_bank = 0
        self.active.insert(0, ctx)
        for value in args:
            ctx.push(value)
        return ctx

    def terminate(self, script_id: int) -> bool:
        """Mark the running script with this id for termination."""
        for ctx in self.active:
            if ctx.id == script_id:
                if ctx.hthread is not None:
                    self.memory[ctx.hthread] |= SCRIPT_TERMINATED
                    ctx.hthread = None
                ctx.terminated = True
                return True
        return False

    def register(self, opcode: int, handler: Handler) -> None:
        """Install the handler run for an opcode."""
        arg_length(opcode)
        self._handlers[int(opcode)] = handler

    def step(self, ctx: ScriptContext) -> bool:
        """Run one instruction of ctx; False when the script has ended."""
        try:
            code = self.rom[ctx.bank]
        except KeyError:
            raise KeyError(f"no bytecode in bank {ctx.bank}") from None
        if not 0 <= ctx.pc < len(code):
            raise IndexError(f"program counter {ctx.pc} outside bank {ctx.bank}")
        opcode = code[ctx.pc]
        if opcode == Opcode.STOP:
            return False
        n = arg_length(opcode)
        start = ctx.pc + INSTRUCTION_SIZE
        args = code[start:start + n]
        if len(args) < n:
            raise IndexError(f"truncated instruction 0x{opcode:02X} at {ctx.pc}")
        handler = self._handlers.get(opcode)
        if handler is None:
            raise KeyError(f"no handler registered for opcode 0x{opcode:02X}")
        ctx.pc = start + n
        handler(self, ctx, args)
        return True

    def _address(self, ctx: ScriptContext, idx: int) -> int:
        idx = to_int16(idx)
        return _check_address(ctx.stack_ptr + idx if idx < 0 else idx)

    def read(self, ctx: ScriptContext, idx: int) -> int:
        """Signed word at idx: negative is relative to the stack top, else global."""
        return to_int16(self.memory[self._address(ctx, idx)])

    def write(self, ctx: ScriptContext, idx: int, value: int) -> None:
        """Store a word at idx, addressed as in read."""
        self.memory[self._address(ctx, idx)] = to_uint16(value)

    def raise_exception(self, ctx: ScriptContext, code: int, size: int) -> None:
        """Raise a script exception whose parameters are the next size bytes."""
        self.exception_code = code
        self.exception_params_length = size
        self.exception_params_bank = ctx.bank
        self.exception_params_offset = ctx.pc
        ctx.pc += size

    def _after(self, ctx: Optional[ScriptContext]) -> Optional[ScriptContext]:
        if ctx is None:
            return self.active[0] if self.active else None
        try:
            position = self.active.index(ctx)
        except ValueError:
            return self.active[0] if self.active else None
        return self.active[position + 1] if position + 1 < len(self.active) else None

    def update(self) -> RunnerStatus:
        """Run every active context for one quantum."""
        if not self.lock_state:
            self._prev = None
            self._current = self.active[0] if self.active else None

        waitable = True
        counter = INSTRUCTIONS_PER_QUANT
        while self._current is not None:
            ctx = self._current
            self.exception_code = ExceptionCode.NONE
            ctx.waitable = False
            if ctx.terminated or not self.step(ctx):
                self.lock_state -= ctx.lock_count
                if ctx.hthread is not None:
                    self.memory[ctx.hthread] |= SCRIPT_TERMINATED
                self.active.remove(ctx)
                self.free.insert(0, ctx)
                self._current = self._after(self._prev)
                continue
            if self.exception_code:
                return RunnerStatus.EXCEPTION
            if not ctx.waitable and counter:
                counter -= 1
                continue
            if self.lock_state:
                break
            waitable = waitable and ctx.waitable
            self._prev = ctx
            self._current = self._after(ctx)
            counter = INSTRUCTIONS_PER_QUANT

        if not self.active:
            return RunnerStatus.DONE
        return RunnerStatus.IDLE if waitable else RunnerStatus.BUSY