# gbvm

`gbvm` is a small script virtual machine for tile-based games. Scripts are
bytecode held in numbered banks. They run in up to sixteen cooperative
threads, and each thread has its own stack inside a shared memory of 16-bit
words. The package also holds the engine state that scripts act on: a camera,
a link-cable packet exchange, a scene stack, input and timer event slots,
palettes, collision maps and dialogue text formatting.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Running scripts

```python
from gbvm.vm import VM, RunnerStatus
from gbvm.operations import install

script = bytes([
    0x15, 0xFF, 0x02, 0xFF, 0x03, ord("+"), 0x00,  # RPN: push 2, push 3, add
    0x13, 0x00, 0x00, 0xFF, 0xFF,                  # SET global 0 from stack top
    0x00,                                          # STOP
])

vm = VM({0: script})
install(vm)                       # register the core instruction set
ctx = vm.execute(0, 0, None)      # bank 0, offset 0, no handle variable
assert vm.update() is RunnerStatus.DONE
assert vm.memory[0] == 5
```

`VM(rom)` takes a mapping of bank number to bytecode. A context's `pc` is an
offset into its bank. `VM.execute(bank, pc, handle, *args)` starts a thread in
a free context. It returns that context, or `None` when all sixteen are in
use. If `handle` is given, it is the memory address where the thread's id is
stored. That word gets the `SCRIPT_TERMINATED` bit once the thread ends. Any
extra `args` are pushed onto the new thread's stack.

`VM.update()` gives every active thread one scheduling quantum and returns a
`RunnerStatus`:

- `DONE`: every thread has finished.
- `IDLE`: every thread is waiting.
- `BUSY`: at least one thread still has work to do.
- `EXCEPTION`: a script raised an engine request, such as a scene change, a
  save or a load (see `ExceptionCode`). The request's parameters are
  described by `vm.exception_params_bank`, `vm.exception_params_offset` and
  `vm.exception_params_length`.

`VM.read(ctx, idx)` and `VM.write(ctx, idx, value)` access words in memory. A
negative index counts back from the thread's stack pointer, and a
non-negative index addresses the shared memory directly. `VM.terminate(id)`
stops a thread. `VM.reset(reset)` frees all contexts, and `reset=True` also
clears memory. `vm.sys_time` is the frame counter that time-based
instructions read; the caller advances it.

`gbvm.operations.install(vm)` registers the flow-control, stack, variable,
expression, thread, lock, random and memory-copy instructions. It returns an
empty dictionary of routines that the `INVOKE` instruction may call. Keys are
`(bank, address)`, and each value is a function
`routine(vm, ctx, start, frame) -> bool`. `gbvm.operations.wait_frames` is
one such routine, ready to be put in that table. Any other instruction is
added with `VM.register(opcode, handler)`, where the handler is called as
`handler(vm, ctx, args)`. `evaluate_rpn` and `compare` (with `Condition`) can
also be used on their own.

## Other modules

- `gbvm.mathutil`: `Direction`, `flipped_dir`, `is_dir_horizontal`,
  `is_dir_vertical`, `clamp`, `isqrt`, and the wrapping helpers `to_int8`,
  `to_int16` and `to_uint16`.
- `gbvm.collision`: `BoundingBox`, `Point`, `bb_contains`, `bb_intersects`,
  and `CollisionMap.tile_at`. A tile outside the map returns
  `COLLISION_ALL`.
- `gbvm.palette`: `dmg_palette`, `cgb_color`, `PaletteEntry`, and
  `PaletteState.load(data, mask, options)`. `load` stores the selected
  palettes, optionally commits them, and returns the number of bytes it used.
- `gbvm.instructions`: the `Opcode` enumeration, with `arg_length` and
  `instruction_size`.
- `gbvm.camera`: `Camera` with `move_towards`, `set_pos`, `shake` and
  `end_shake`.
- `gbvm.link`: `LinkMode`, `LinkPort`, and `Exchange`. `Exchange.step` runs
  one stage of a send-and-receive swap of up to 32 bytes.
- `gbvm.scene`: `SceneStack`, which holds up to eight scenes, with `push`,
  `pop`, `pop_all` and `reset`.
- `gbvm.events`: `Buttons`, `InputState` (`update`, `held`, `pressed`,
  `recent`, `any_pressed`), `EventSlots` (`prepare`, `attach`, `detach`) and
  `Timers` (`prepare`, `set`, `stop`, `reset`).
- `gbvm.text`: `itoa_format`, and `format_text` for templates using `%d`,
  `%Dn`, `%c`, `%t`, `%f` and `%%`. `Overlay` handles the window position and
  has `wait_satisfied`.

## What it does not do

This package has no display, sound, save memory or real link hardware. Only
the core instructions have handlers. `Opcode` lists many more, for actors,
music, the overlay, palettes, the camera and more, and `VM.step` raises
`KeyError` for any of them until you register a handler. Classes such as
`Camera`, `Exchange`, `SceneStack` and `PaletteState` hold the state those
handlers would change. Wiring them to opcodes is left to the caller.