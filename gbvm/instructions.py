"""Opcode numbers of the script machine and the argument bytes each takes."""

from __future__ import annotations

from enum import IntEnum

INSTRUCTION_SIZE = 1


class Opcode(IntEnum):
    """Bytecode instruction numbers."""

    STOP = 0x00
    PUSH = 0x01
    POP = 0x02
    CALL_REL = 0x03
    CALL = 0x04
    RET = 0x05
    LOOP_REL = 0x06
    LOOP = 0x07
    JUMP_REL = 0x08
    JUMP = 0x09
    CALL_FAR = 0x0A
    RET_FAR = 0x0B
    SYSTIME = 0x0C
    INVOKE = 0x0D
    BEGINTHREAD = 0x0E
    IF = 0x0F
    PUSH_VALUE_IND = 0x10
    PUSH_VALUE = 0x11
    RESERVE = 0x12
    SET = 0x13
    SET_CONST = 0x14
    RPN = 0x15
    JOIN = 0x16
    TERMINATE = 0x17
    IDLE = 0x18
    GET_TLOCAL = 0x19
    IF_CONST = 0x1A
    GET_UINT8 = 0x1B
    GET_INT8 = 0x1C
    GET_INT16 = 0x1D
    SET_UINT8 = 0x1E
    SET_INT8 = 0x1F
    SET_INT16 = 0x20
    SET_CONST_INT8 = 0x21
    SET_CONST_INT16 = 0x22
    RANDOMIZE = 0x23
    RAND = 0x24
    LOCK = 0x25
    UNLOCK = 0x26
    RAISE = 0x27
    SET_INDIRECT = 0x28
    GET_INDIRECT = 0x29
    TEST_TERMINATE = 0x2A
    POLL_LOADED = 0x2B
    PUSH_REFERENCE = 0x2C
    CALL_NATIVE = 0x2D
    SAVE_PEEK = 0x2E
    SAVE_CLEAR = 0x2F
    ACTOR_MOVE_TO = 0x30
    ACTOR_ACTIVATE = 0x31
    ACTOR_SET_DIR = 0x32
    ACTOR_DEACTIVATE = 0x33
    ACTOR_SET_ANIM = 0x34
    ACTOR_SET_POS = 0x35
    ACTOR_EMOTE = 0x36
    ACTOR_SET_BOUNDS = 0x37
    ACTOR_SET_SPRITESHEET = 0x38
    ACTOR_REPLACE_TILE = 0x39
    ACTOR_GET_POS = 0x3A
    ACTOR_SET_HIDDEN = 0x3B
    ACTOR_GET_DIR = 0x3C
    ACTOR_SET_ANIM_TICK = 0x3D
    ACTOR_SET_MOVE_SPEED = 0x3E
    ACTOR_SET_COLL_ENABLED = 0x3F
    LOAD_TEXT = 0x40
    DISPLAY_TEXT = 0x41
    OVERLAY_SETPOS = 0x42
    OVERLAY_HIDE = 0x43
    OVERLAY_WAIT = 0x44
    OVERLAY_MOVE_TO = 0x45
    OVERLAY_SHOW = 0x46
    OVERLAY_CLEAR = 0x47
    CHOICE = 0x48
    LOAD_FRAME = 0x49
    LOAD_CURSOR = 0x4A
    SET_FONT = 0x4B
    SET_PRINT_DIR = 0x4C
    OVERLAY_SCROLL = 0x4D
    OVERLAY_SET_SCROLL = 0x4E
    OVERLAY_SET_SUBMAP = 0x4F
    SET_SPRITES_VISIBLE = 0x51
    INPUT_WAIT = 0x52
    INPUT_ATTACH = 0x53
    INPUT_GET = 0x54
    CONTEXT_PREPARE = 0x55
    FADE = 0x57
    TIMER_PREPARE = 0x58
    TIMER_SET = 0x59
    GET_TILE_XY = 0x5A
    REPLACE_TILE = 0x5B
    POLL = 0x5C
    SET_SPRITE_MODE = 0x5D
    REPLACE_TILE_XY = 0x5E
    INPUT_DETACH = 0x5F
    MUSIC_PLAY = 0x60
    MUSIC_STOP = 0x61
    MUSIC_MUTE = 0x62
    SOUND_MASTERVOL = 0x63
    SOUND_PLAY = 0x64
    MUSIC_ROUTINE = 0x65
    WAVE_PLAY = 0x66
    MUSIC_SETPOS = 0x67
    SCENE_PUSH = 0x68
    SCENE_POP = 0x69
    SCENE_POP_ALL = 0x6A
    SCENE_STACK_RESET = 0x6B
    SIO_SET_MODE = 0x6C
    SIO_EXCHANGE = 0x6D
    CAMERA_MOVE_TO = 0x70
    CAMERA_SET_POS = 0x71
    TIMER_STOP = 0x72
    TIMER_RESET = 0x73
    ACTOR_TERMINATE_UPDATE = 0x74
    ACTOR_SET_ANIM_FRAME = 0x75
    MEMSET = 0x76
    MEMCPY = 0x77
    RTC_LATCH = 0x78
    RTC_GET = 0x79
    RTC_SET = 0x7A
    RTC_START = 0x7B
    LOAD_PALETTE = 0x7C
    SGB_TRANSFER = 0x7E
    RUMBLE = 0x7F
    PROJECTILE_LAUNCH = 0x80
    ACTOR_GET_ANIM_FRAME = 0x83
    ACTOR_SET_ANIM_SET = 0x84
    SWITCH_TEXT_LAYER = 0x85
    ACTOR_GET_ANGLE = 0x86
    ACTOR_SET_SPRITESHEET_BY_REF = 0x87
    SIN_SCALE = 0x89
    COS_SCALE = 0x8A
    SET_TEXT_SOUND = 0x8B


_ARG_LENGTHS: dict[Opcode, int] = {
    Opcode.STOP: 0,
    Opcode.PUSH: 2, Opcode.POP: 1, Opcode.CALL_REL: 1, Opcode.CALL: 2,
    Opcode.RET: 1, Opcode.LOOP_REL: 4, Opcode.LOOP: 5, Opcode.JUMP_REL: 1,
    Opcode.JUMP: 2, Opcode.CALL_FAR: 3, Opcode.RET_FAR: 1, Opcode.SYSTIME: 2,
    Opcode.INVOKE: 6, Opcode.BEGINTHREAD: 6, Opcode.IF: 8,
    Opcode.PUSH_VALUE_IND: 2, Opcode.PUSH_VALUE: 2, Opcode.RESERVE: 1,
    Opcode.SET: 4, Opcode.SET_CONST: 4, Opcode.RPN: 0, Opcode.JOIN: 2,
    Opcode.TERMINATE: 2, Opcode.IDLE: 0, Opcode.GET_TLOCAL: 4,
    Opcode.IF_CONST: 8, Opcode.GET_UINT8: 4, Opcode.GET_INT8: 4,
    Opcode.GET_INT16: 4, Opcode.SET_UINT8: 4, Opcode.SET_INT8: 4,
    Opcode.SET_INT16: 4, Opcode.SET_CONST_INT8: 3, Opcode.SET_CONST_INT16: 4,
    Opcode.RANDOMIZE: 0, Opcode.RAND: 8, Opcode.LOCK: 0, Opcode.UNLOCK: 0,
    Opcode.RAISE: 2, Opcode.SET_INDIRECT: 4, Opcode.GET_INDIRECT: 4,
    Opcode.TEST_TERMINATE: 1, Opcode.POLL_LOADED: 2,
    Opcode.PUSH_REFERENCE: 2, Opcode.CALL_NATIVE: 3,
    Opcode.SAVE_PEEK: 8, Opcode.SAVE_CLEAR: 1,
    Opcode.ACTOR_MOVE_TO: 2, Opcode.ACTOR_ACTIVATE: 2,
    Opcode.ACTOR_SET_DIR: 3, Opcode.ACTOR_DEACTIVATE: 2,
    Opcode.ACTOR_SET_ANIM: 4, Opcode.ACTOR_SET_POS: 2,
    Opcode.ACTOR_EMOTE: 5, Opcode.ACTOR_SET_BOUNDS: 6,
    Opcode.ACTOR_SET_SPRITESHEET: 5, Opcode.ACTOR_REPLACE_TILE: 8,
    Opcode.ACTOR_GET_POS: 2, Opcode.ACTOR_SET_HIDDEN: 3,
    Opcode.ACTOR_GET_DIR: 4, Opcode.ACTOR_SET_ANIM_TICK: 3,
    Opcode.ACTOR_SET_MOVE_SPEED: 3, Opcode.ACTOR_SET_COLL_ENABLED: 3,
    Opcode.LOAD_TEXT: 1, Opcode.DISPLAY_TEXT: 0, Opcode.OVERLAY_SETPOS: 2,
    Opcode.OVERLAY_HIDE: 0, Opcode.OVERLAY_WAIT: 2,
    Opcode.OVERLAY_MOVE_TO: 3, Opcode.OVERLAY_SHOW: 4,
    Opcode.OVERLAY_CLEAR: 6, Opcode.CHOICE: 4, Opcode.LOAD_FRAME: 3,
    Opcode.LOAD_CURSOR: 3, Opcode.SET_FONT: 1, Opcode.SET_PRINT_DIR: 1,
    Opcode.OVERLAY_SCROLL: 5, Opcode.OVERLAY_SET_SCROLL: 5,
    Opcode.OVERLAY_SET_SUBMAP: 6,
    Opcode.SET_SPRITES_VISIBLE: 1, Opcode.INPUT_WAIT: 1,
    Opcode.INPUT_ATTACH: 2, Opcode.INPUT_GET: 3, Opcode.CONTEXT_PREPARE: 4,
    Opcode.FADE: 1, Opcode.TIMER_PREPARE: 4, Opcode.TIMER_SET: 2,
    Opcode.GET_TILE_XY: 6, Opcode.REPLACE_TILE: 8, Opcode.POLL: 5,
    Opcode.SET_SPRITE_MODE: 1, Opcode.REPLACE_TILE_XY: 7,
    Opcode.INPUT_DETACH: 1,
    Opcode.MUSIC_PLAY: 4, Opcode.MUSIC_STOP: 0, Opcode.MUSIC_MUTE: 1,
    Opcode.SOUND_MASTERVOL: 1, Opcode.SOUND_PLAY: 2,
    Opcode.MUSIC_ROUTINE: 4, Opcode.WAVE_PLAY: 6, Opcode.MUSIC_SETPOS: 2,
    Opcode.SCENE_PUSH: 0, Opcode.SCENE_POP: 0, Opcode.SCENE_POP_ALL: 0,
    Opcode.SCENE_STACK_RESET: 0,
    Opcode.SIO_SET_MODE: 1, Opcode.SIO_EXCHANGE: 5,
    Opcode.CAMERA_MOVE_TO: 4, Opcode.CAMERA_SET_POS: 2,
    Opcode.TIMER_STOP: 1, Opcode.TIMER_RESET: 1,
    Opcode.ACTOR_TERMINATE_UPDATE: 2, Opcode.ACTOR_SET_ANIM_FRAME: 2,
    Opcode.MEMSET: 6, Opcode.MEMCPY: 6,
    Opcode.RTC_LATCH: 0, Opcode.RTC_GET: 3, Opcode.RTC_SET: 3,
    Opcode.RTC_START: 1,
    Opcode.LOAD_PALETTE: 2, Opcode.SGB_TRANSFER: 0, Opcode.RUMBLE: 1,
    Opcode.PROJECTILE_LAUNCH: 3,
    Opcode.ACTOR_GET_ANIM_FRAME: 2, Opcode.ACTOR_SET_ANIM_SET: 4,
    Opcode.SWITCH_TEXT_LAYER: 1, Opcode.ACTOR_GET_ANGLE: 4,
    Opcode.ACTOR_SET_SPRITESHEET_BY_REF: 4,
    Opcode.SIN_SCALE: 5, Opcode.COS_SCALE: 5,
    Opcode.SET_TEXT_SOUND: 2,
}


def _lookup(opcode: int) -> Opcode:
    try:
        return Opcode(opcode)
    except ValueError:
        raise ValueError(f"unknown opcode 0x{int(opcode):02X}") from None


def arg_length(opcode: int) -> int:
    """Number of argument bytes that follow the opcode byte."""
    return _ARG_LENGTHS[_lookup(opcode)]


def instruction_size(opcode: int) -> int:
    """Total encoded size of an instruction, opcode byte included."""
    return INSTRUCTION_SIZE + arg_length(opcode)